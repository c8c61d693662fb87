from __future__ import annotations

import pytest

from pathway_core.types import TRAIT_IDS, Cluster, ConfigSnapshot, Option, Question, Trait, TraitScores


def make_question(qid: str, mode: str = "JSS", qtype: str = "mcq", **kw) -> Question:
    kw.setdefault("prompt", f"Prompt for {qid}")
    kw.setdefault("tags", ("logic",))
    return Question(id=qid, mode=mode, type=qtype, **kw)


def make_option(oid: str, qid: str, scores: dict | None = None, **kw) -> Option:
    kw.setdefault("label", f"Option {oid}")
    return Option(id=oid, question_id=qid, score_map=TraitScores.from_mapping(scores), **kw)


def make_cluster(cid: str, weights: dict, track_bias: tuple = (), **kw) -> Cluster:
    kw.setdefault("label", cid.replace("_", " ").title())
    return Cluster(id=cid, trait_weights=TraitScores.from_mapping(weights), track_bias=track_bias, **kw)


def chain_snapshot(edges: dict[str, list[str]], parents: dict[str, str] | None = None, **kw) -> ConfigSnapshot:
    """Questions wired only by explicit next links, one option per edge."""

    parents = parents or {}
    questions = [make_question(qid, parent_question_id=parents.get(qid), **kw) for qid in edges]
    options = []
    for qid, targets in edges.items():
        if not targets:
            options.append(make_option(f"{qid}_end", qid, {"logic": 1}))
        for idx, target in enumerate(targets):
            options.append(make_option(f"{qid}_{idx}", qid, {"logic": 1}, next_question_id=target))
    return ConfigSnapshot(questions=tuple(questions), options=tuple(options))


def build_synthetic_snapshot(*, include_open: bool = True, include_tracks: bool = True) -> ConfigSnapshot:
    """Create a deterministic two-mode snapshot for tests and smoke runs."""

    questions = [
        make_question("JSS_A", tags=("logic", "creativity")),
        make_question("JSS_A1", qtype="scenario", parent_question_id="JSS_A", branch_level=1),
        make_question("JSS_A2", qtype="scenario", parent_question_id="JSS_A", branch_level=1),
        make_question("JSS_B", qtype="drag_rank"),
        make_question("JSS_C", qtype="image_select", tags=("empathy", "practical")),
        make_question("SSS_A", mode="SSS"),
    ]
    options = [
        make_option("JSS_A_1", "JSS_A", {"logic": 2}, next_question_id="JSS_A1"),
        make_option("JSS_A_2", "JSS_A", {"creativity": 2}, next_question_id="JSS_A2"),
        make_option("JSS_A_3", "JSS_A", {}, disengaged=True),
        make_option("JSS_A1_1", "JSS_A1", {"logic": 1, "technical": 1}),
        make_option("JSS_A1_2", "JSS_A1", {"curiosity": 1}),
        make_option("JSS_A2_1", "JSS_A2", {"creativity": 1, "communication": 1}),
        make_option("JSS_A2_2", "JSS_A2", {}, disengaged=True),
        make_option("JSS_B_1", "JSS_B", {"logic": 1}),
        make_option("JSS_B_2", "JSS_B", {"creativity": 1}),
        make_option("JSS_B_3", "JSS_B", {"organization": 1}),
        make_option("JSS_B_4", "JSS_B", {"communication": 1}),
        make_option("JSS_C_1", "JSS_C", {"empathy": 1}, image_url="/img/c1.png"),
        make_option("JSS_C_2", "JSS_C", {"practical": 1}, image_url="/img/c2.png"),
        make_option("SSS_A_1", "SSS_A", {"logic": 2}),
        make_option("SSS_A_2", "SSS_A", {"leadership": 2}),
        make_option("SSS_A_3", "SSS_A", {}, disengaged=True),
    ]
    if include_open:
        questions.append(make_question("JSS_D", qtype="open_short", tags=("reflection", "rubric")))
    if include_tracks:
        questions.append(make_question("SSS_SCI", mode="SSS", track="SCIENCE"))
        questions.append(make_question("SSS_ART", mode="SSS", track="ARTS"))
        options.append(make_option("SSS_SCI_1", "SSS_SCI", {"technical": 2}))
        options.append(make_option("SSS_ART_1", "SSS_ART", {"creativity": 2}))

    clusters = [
        make_cluster("JSS_LOGIC", {"logic": 1.5, "technical": 1}),
        make_cluster("JSS_CREATE", {"creativity": 1.5, "communication": 1}),
        make_cluster("JSS_PEOPLE", {"empathy": 1, "organization": 1}),
        make_cluster("SSS_TECH", {"technical": 1.4, "logic": 1}, track_bias=("SCIENCE",)),
        make_cluster("SSS_ARTS", {"creativity": 1.2}, track_bias=("ARTS",)),
        make_cluster("SSS_LEAD", {"leadership": 1.3}),
    ]
    traits = [Trait(id=t, label=t.title()) for t in TRAIT_IDS]
    return ConfigSnapshot(
        questions=tuple(questions), options=tuple(options), traits=tuple(traits), clusters=tuple(clusters)
    )


@pytest.fixture
def synthetic_snapshot() -> ConfigSnapshot:
    return build_synthetic_snapshot()
