from __future__ import annotations

import random
import string

import pytest

from pathway_core import config
from pathway_core.recommend import (
    GENERIC_NEXT_STEPS,
    NEXT_STEPS_BY_CLUSTER,
    build_explanation,
    compute_confidence,
    compute_engagement,
    compute_result,
    create_report_code,
    dominant_traits,
    score_clusters,
)
from pathway_core.types import ClusterScore, ConfigSnapshot, EngineState, QuestionResponse, TraitScores

from tests.conftest import make_cluster, make_option, make_question


STRONG = TraitScores(logic=4.0)


def _scores(*values: float) -> list[ClusterScore]:
    return [ClusterScore(cluster_id=f"C{i}", score=v) for i, v in enumerate(values)]


def test_cluster_scoring_prefix_weights_and_bonus(synthetic_snapshot):
    scores = TraitScores(logic=2, technical=1, creativity=1)
    ranked = score_clusters(synthetic_snapshot.clusters, scores, "SSS", "ARTS")

    assert [c.cluster_id for c in ranked] == ["SSS_ARTS", "SSS_TECH", "SSS_LEAD"]
    by_id = {c.cluster_id: c.score for c in ranked}
    assert by_id["SSS_ARTS"] == pytest.approx(1.2 + config.TRACK_BIAS_BONUS)
    assert by_id["SSS_TECH"] == pytest.approx(1.4 + 2)
    assert by_id["SSS_LEAD"] == 0


def test_cluster_ties_keep_snapshot_order():
    clusters = [make_cluster("JSS_X", {"logic": 1}), make_cluster("JSS_Y", {"logic": 1}), make_cluster("JSS_Z", {"logic": 2})]
    ranked = score_clusters(clusters, TraitScores(logic=1), "JSS")
    assert [c.cluster_id for c in ranked] == ["JSS_Z", "JSS_X", "JSS_Y"]


def test_dominant_traits_ties_follow_trait_order():
    assert dominant_traits(TraitScores()) == ["logic", "creativity", "empathy"]
    scores = TraitScores(technical=3, curiosity=3, empathy=1)
    assert dominant_traits(scores) == ["curiosity", "technical", "empathy"]


@pytest.mark.parametrize(
    "values,expected",
    [
        ((12.0, 10.0), "HIGH"),
        ((13.0, 10.0), "HIGH"),
        ((11.0, 10.0), "MEDIUM"),
        ((10.5, 10.0), "MEDIUM"),
        ((10.4, 10.0), "LOW"),
        ((10.0, 10.0), "LOW"),
    ],
)
def test_confidence_ratio_bands(values, expected):
    assert compute_confidence(_scores(*values), STRONG) == expected


def test_confidence_degenerate_cases():
    assert compute_confidence(_scores(10.0), STRONG) == "LOW"
    assert compute_confidence([], STRONG) == "LOW"
    assert compute_confidence(_scores(10.0, 1.0), TraitScores(logic=3.9)) == "LOW"
    assert compute_confidence(_scores(0.0, 0.0), STRONG) == "LOW"
    assert compute_confidence(_scores(5.0, 0.0), STRONG) == "HIGH"
    # negative scores still count toward signal
    assert compute_confidence(_scores(5.0, 0.0), TraitScores(logic=2, empathy=-2)) == "HIGH"


def _engagement_snapshot() -> ConfigSnapshot:
    questions = [make_question(f"Q{i}") for i in range(1, 6)] + [make_question("Q6", qtype="open_short")]
    options = []
    for i in range(1, 6):
        options.append(make_option(f"Q{i}_ok", f"Q{i}", {"logic": 1}))
        options.append(make_option(f"Q{i}_meh", f"Q{i}", {}, disengaged=True))
    return ConfigSnapshot(questions=tuple(questions), options=tuple(options))


def _answered(disengaged: int) -> EngineState:
    answers = {}
    for i in range(1, 6):
        pick = f"Q{i}_meh" if i <= disengaged else f"Q{i}_ok"
        answers[f"Q{i}"] = QuestionResponse("mcq", (pick,))
    return EngineState(asked=list(answers), answers=answers)


@pytest.mark.parametrize("disengaged,level", [(2, "LOW"), (1, "MEDIUM"), (0, "HIGH")])
def test_engagement_thresholds(disengaged, level):
    eng = compute_engagement(_engagement_snapshot(), _answered(disengaged))
    assert eng.level == level
    assert eng.disengaged_count == disengaged
    assert eng.answered_count == 5
    assert eng.note == config.ENGAGEMENT_NOTES[level]


def test_engagement_skips_free_text_and_unresolved():
    state = _answered(1)
    state.answers["Q6"] = QuestionResponse("open_short", text="not sure")
    state.answers["Q7"] = QuestionResponse("mcq", ("Q1_meh",))  # not an option of Q7
    eng = compute_engagement(_engagement_snapshot(), state)
    assert eng.answered_count == 5
    assert eng.disengaged_count == 1


def test_engagement_with_no_answers_is_high():
    eng = compute_engagement(_engagement_snapshot(), EngineState())
    assert (eng.level, eng.answered_count) == ("HIGH", 0)


def test_explanation_with_curated_steps():
    clusters = [make_cluster("JSS_HYBRID", {"logic": 1}, label="Hybrid / Multidisciplinary")]
    exp = build_explanation(clusters, "JSS_HYBRID", ["logic", "creativity", "organization"])
    assert exp.summary == (
        "You lean toward Hybrid / Multidisciplinary because your strongest signals are "
        "Logic, Creativity, Organization."
    )
    assert exp.why[2] == "You repeatedly chose options that reflect Organization."
    assert exp.next_steps == NEXT_STEPS_BY_CLUSTER["JSS_HYBRID"]


def test_explanation_without_cluster_uses_generic_text():
    exp = build_explanation([], "", ["empathy", "logic", "creativity"])
    assert exp.summary == "Your answers show strong signals in Empathy, Logic, Creativity."
    assert exp.next_steps == GENERIC_NEXT_STEPS


def test_report_code_shape_and_seeding():
    code = create_report_code(random.Random(42))
    assert len(code) == config.REPORT_CODE_LENGTH
    assert set(code) <= set(string.digits + string.ascii_uppercase)
    assert create_report_code(random.Random(42)) == code


def test_result_caps_surfaced_clusters():
    clusters = [make_cluster(f"{m}_{i}", {"logic": i + 1}) for m in ("JSS", "SSS") for i in range(7)]
    snap = ConfigSnapshot(clusters=tuple(clusters))
    state = EngineState(scores=STRONG)

    jss = compute_result(snap, state, "JSS", rng=random.Random(0))
    sss = compute_result(snap, state, "SSS", "SCIENCE", rng=random.Random(0))
    assert len(jss.top_clusters) == 3
    assert len(sss.top_clusters) == 5
    assert jss.primary_cluster == "JSS_6"
    assert sss.track == "SCIENCE"


def test_result_without_clusters_degenerates():
    res = compute_result(ConfigSnapshot(), EngineState(scores=STRONG), "SSS", rng=random.Random(0))
    assert res.primary_cluster == ""
    assert res.top_clusters == []
    assert res.confidence == "LOW"
    assert res.explanation.next_steps == GENERIC_NEXT_STEPS


def test_result_wire_format(synthetic_snapshot):
    state = EngineState(scores=TraitScores(logic=3, technical=2))
    payload = compute_result(synthetic_snapshot, state, "JSS", rng=random.Random(3)).to_dict()

    assert set(payload) == {
        "mode", "track", "primary_cluster", "top_clusters", "dominant_traits",
        "confidence", "trait_scores", "explanation", "engagement", "report_code",
    }
    assert payload["track"] is None
    assert payload["primary_cluster"] == "JSS_LOGIC"
    assert payload["top_clusters"][0] == {"clusterId": "JSS_LOGIC", "score": 6.5}
    assert payload["dominant_traits"] == ["logic", "technical", "creativity"]
    assert set(payload["trait_scores"]) == set(TraitScores().to_dict())
    assert set(payload["engagement"]) == {"level", "disengagedCount", "answeredCount", "note"}
    assert payload["confidence"] == "HIGH"
