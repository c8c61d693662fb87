from __future__ import annotations
from typing import Dict, List, Optional
import logging, random, string

from .types import (
    TRAIT_IDS,
    AssessmentResult,
    Cluster,
    ClusterScore,
    ConfigSnapshot,
    Engagement,
    EngineState,
    Explanation,
    TraitScores,
)
from . import config
from .scoring import FREE_TEXT

log = logging.getLogger(__name__)

_CODE_ALPHABET = string.digits + string.ascii_uppercase

NEXT_STEPS_BY_CLUSTER: Dict[str, List[str]] = {
    "JSS_SCIENCE_ANALYTICAL": [
        "Try science or coding clubs to explore how things work.",
        "Pick projects that let you test ideas and solve puzzles.",
    ],
    "JSS_ARTS_HUMANITIES": [
        "Join writing, debate, or art activities that let you express ideas.",
        "Explore subjects that focus on people, stories, and history.",
    ],
    "JSS_COMMERCIAL_BUSINESS": [
        "Try simple entrepreneurship projects or class leadership roles.",
        "Practice planning and teamwork through school events.",
    ],
    "JSS_CREATIVE_DESIGN": [
        "Explore design, music, or media projects where imagination matters.",
        "Build a small portfolio of what you enjoy creating.",
    ],
    "JSS_HYBRID": [
        "Mix activities across science, arts, and business to see what sticks.",
        "Reflect on which tasks keep you energized over time.",
    ],
}
GENERIC_NEXT_STEPS: List[str] = [
    "Explore clubs or activities that match your top traits.",
    "Talk with a teacher about subjects that fit your interests.",
]


def score_clusters(
    clusters, scores: TraitScores, mode: str, track: Optional[str] = None
) -> List[ClusterScore]:
    prefix = config.MODE_PREFIX.get(mode, f"{mode}_")
    out: List[ClusterScore] = []
    for cl in clusters:
        if not cl.id.startswith(prefix):
            continue
        total = scores.dot(cl.trait_weights)
        if track and track in cl.track_bias:
            total += config.TRACK_BIAS_BONUS
        out.append(ClusterScore(cluster_id=cl.id, score=total))
    # sorted() is stable, ties keep snapshot order
    return sorted(out, key=lambda c: c.score, reverse=True)


def dominant_traits(scores: TraitScores, count: int = config.DOMINANT_TRAIT_COUNT) -> List[str]:
    ranked = sorted(TRAIT_IDS, key=lambda t: scores.get(t), reverse=True)
    return list(ranked[:count])


def compute_confidence(cluster_scores: List[ClusterScore], scores: TraitScores) -> str:
    if len(cluster_scores) < 2:
        return "LOW"
    if scores.total_signal() < config.CONFIDENCE_MIN_SIGNAL:
        return "LOW"
    top, second = cluster_scores[0].score, cluster_scores[1].score
    if top == 0:
        return "LOW"
    if second == 0:
        return "HIGH"
    ratio = top / second
    if ratio >= config.CONFIDENCE_HIGH_RATIO:
        return "HIGH"
    if ratio >= config.CONFIDENCE_MEDIUM_RATIO:
        return "MEDIUM"
    return "LOW"


def _trait_label(trait: str) -> str:
    return trait[:1].upper() + trait[1:]


def build_explanation(clusters, primary_cluster_id: str, traits: List[str]) -> Explanation:
    cluster: Optional[Cluster] = next((c for c in clusters if c.id == primary_cluster_id), None)
    labels = ", ".join(_trait_label(t) for t in traits)
    if cluster is not None:
        summary = f"You lean toward {cluster.label} because your strongest signals are {labels}."
    else:
        summary = f"Your answers show strong signals in {labels}."
    why = [f"You repeatedly chose options that reflect {_trait_label(t)}." for t in traits]
    steps = NEXT_STEPS_BY_CLUSTER.get(primary_cluster_id) or GENERIC_NEXT_STEPS
    return Explanation(summary=summary, why=why, next_steps=list(steps))


def compute_engagement(snapshot: ConfigSnapshot, state: EngineState) -> Engagement:
    """Share of option-backed answers that picked a disengaged option.

    Free text and option ids that don't belong to the answered question are
    left out of both counts.
    """

    answered = disengaged = 0
    for qid, resp in state.answers.items():
        if resp.type == FREE_TEXT or not resp.first_option_id:
            continue
        opt = next((o for o in snapshot.options_for(qid) if o.id == resp.first_option_id), None)
        if opt is None:
            continue
        answered += 1
        if opt.disengaged:
            disengaged += 1

    ratio = disengaged / answered if answered else 0.0
    if ratio >= config.ENGAGEMENT_LOW_RATIO:
        level = "LOW"
    elif ratio >= config.ENGAGEMENT_MEDIUM_RATIO:
        level = "MEDIUM"
    else:
        level = "HIGH"
    return Engagement(
        level=level,
        disengaged_count=disengaged,
        answered_count=answered,
        note=config.ENGAGEMENT_NOTES[level],
    )


def create_report_code(rng: Optional[random.Random] = None) -> str:
    pick = (rng or random).choice
    return "".join(pick(_CODE_ALPHABET) for _ in range(config.REPORT_CODE_LENGTH))


def compute_result(
    snapshot: ConfigSnapshot,
    state: EngineState,
    mode: str,
    track: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> AssessmentResult:
    cluster_scores = score_clusters(snapshot.clusters, state.scores, mode, track)
    primary = cluster_scores[0].cluster_id if cluster_scores else ""
    traits = dominant_traits(state.scores)
    confidence = compute_confidence(cluster_scores, state.scores)
    cap = config.TOP_CLUSTERS.get(mode, config.TOP_CLUSTERS[config.BRANCHING_MODE])
    if not cluster_scores:
        log.warning("no clusters for mode %s; result has no primary cluster", mode)
    log.debug("result mode=%s track=%s primary=%s confidence=%s", mode, track, primary, confidence)
    return AssessmentResult(
        mode=mode,
        track=track,
        primary_cluster=primary,
        top_clusters=cluster_scores[:cap],
        dominant_traits=traits,
        confidence=confidence,
        trait_scores=state.scores,
        explanation=build_explanation(snapshot.clusters, primary, traits),
        engagement=compute_engagement(snapshot, state),
        report_code=create_report_code(rng),
    )
