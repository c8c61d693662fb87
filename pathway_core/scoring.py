from __future__ import annotations
from typing import Dict, Optional
import logging

from .types import ConfigSnapshot, Option, QuestionResponse, TraitScores
from .config import RANK_WEIGHTS, RANK_WEIGHT_TAIL

log = logging.getLogger(__name__)

FREE_TEXT = "open_short"
RANKED = "drag_rank"


def rank_weight(index: int) -> float:
    """Weight of the option ranked at 0-based position `index`."""
    if 0 <= index < len(RANK_WEIGHTS):
        return RANK_WEIGHTS[index]
    return RANK_WEIGHT_TAIL


def _own_options(snapshot: ConfigSnapshot, question_id: str) -> Dict[str, Option]:
    return {o.id: o for o in snapshot.options_for(question_id)}


def _score_ranked(options: Dict[str, Option], response: QuestionResponse, scores: TraitScores) -> TraitScores:
    updated = scores
    for idx, oid in enumerate(response.option_ids):
        opt = options.get(oid)
        if opt is None:
            log.debug("ranked option %s not on question, skipped", oid)
            continue
        updated = updated.plus(opt.score_map, rank_weight(idx))
    return updated


def apply_response_scores(
    snapshot: ConfigSnapshot,
    question_id: str,
    response: QuestionResponse,
    scores: TraitScores,
) -> TraitScores:
    """Add one response's contribution to `scores` and return the new record.

    Free text never moves trait scores. Ranked responses add every listed
    option's map scaled by its rank weight. Every other type adds the full map
    of the first selected option. Option ids are resolved only among the
    answered question's own options; ids that do not resolve add nothing.
    """

    if response.type == FREE_TEXT:
        return scores
    options = _own_options(snapshot, question_id)
    if response.type == RANKED:
        return _score_ranked(options, response, scores)

    opt: Optional[Option] = options.get(response.first_option_id or "")
    if opt is None:
        if response.option_ids:
            log.warning("option %s does not belong to %s", response.first_option_id, question_id)
        return scores
    return scores.plus(opt.score_map)
