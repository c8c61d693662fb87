# pathway_core/engine.py
from __future__ import annotations
from dataclasses import replace
from typing import Dict, List, Mapping, Optional
import logging, random

from .types import AssessmentResult, ConfigSnapshot, EngineState, Question, QuestionResponse, TraitScores
from .scoring import apply_response_scores
from .recommend import compute_result
from .config import DEFAULT_MAX_QUESTIONS, DEBUG_TRACE, TRACE_FIELDS


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def in_scope(question: Question, mode: str, track: Optional[str] = None) -> bool:
    """Mode must match; a track-specific question needs that exact track requested."""
    if question.mode != mode:
        return False
    if question.track and question.track != track:
        return False
    return True


def get_ordered_questions(snapshot: ConfigSnapshot, mode: str, track: Optional[str] = None) -> List[Question]:
    qs = [q for q in snapshot.questions if q.status == "active" and in_scope(q, mode, track)]
    return sorted(qs, key=lambda q: q.id)


def _pick_start(snapshot: ConfigSnapshot, mode: str, track: Optional[str]) -> Optional[Question]:
    ordered = get_ordered_questions(snapshot, mode, track)
    root = next((q for q in ordered if not q.parent_question_id), None)
    return root or (ordered[0] if ordered else None)


def _is_target(snapshot: ConfigSnapshot, question_id: str, mode: str, track: Optional[str]) -> bool:
    q = snapshot.question(question_id)
    return q is not None and q.status == "active" and in_scope(q, mode, track)


def select_next_question_id(
    snapshot: ConfigSnapshot,
    mode: str,
    track: Optional[str],
    response: QuestionResponse,
    asked: List[str],
    max_questions: int,
) -> tuple[Optional[str], str]:
    """Return (next id, source) where source is cap, branch, order or end."""

    if len(asked) >= max_questions:
        return None, "cap"
    opt = snapshot.option(response.first_option_id)
    target = opt.next_question_id if opt else None
    if target and target not in asked and _is_target(snapshot, target, mode, track):
        return target, "branch"
    seen = set(asked)
    nxt = next((q for q in get_ordered_questions(snapshot, mode, track) if q.id not in seen), None)
    if nxt is None:
        return None, "end"
    return nxt.id, "order"


def start_assessment(
    snapshot: ConfigSnapshot,
    mode: str,
    track: Optional[str] = None,
    max_questions: int = DEFAULT_MAX_QUESTIONS,
) -> EngineState:
    start = _pick_start(snapshot, mode, track)
    state = EngineState(current_question_id=start.id if start else None, max_questions=max_questions)
    log.debug("start mode=%s track=%s first=%s cap=%d", mode, track, state.current_question_id, max_questions)
    _emit_trace(op="start", mode=mode, track=track, next_id=state.current_question_id)
    return state


def answer_question(
    snapshot: ConfigSnapshot,
    state: EngineState,
    mode: str,
    track: Optional[str],
    question_id: str,
    response: QuestionResponse,
) -> EngineState:
    """Record `response` for `question_id` and move to the next question.

    The input state is left untouched; a new EngineState is returned.
    """

    scores = apply_response_scores(snapshot, question_id, response, state.scores)
    asked = list(state.asked) + [question_id]
    answers = dict(state.answers)
    answers[question_id] = response
    next_id, source = select_next_question_id(snapshot, mode, track, response, asked, state.max_questions)
    log.debug("answer %s -> %s (%s) asked=%d", question_id, next_id, source, len(asked))
    _emit_trace(
        op="answer",
        mode=mode,
        track=track,
        question_id=question_id,
        asked=len(asked),
        next_id=next_id,
        source=source,
        signal=round(scores.total_signal(), 3),
    )
    return replace(state, asked=asked, answers=answers, scores=scores, current_question_id=next_id)


def replay_scores(snapshot: ConfigSnapshot, answers: Mapping[str, QuestionResponse]) -> TraitScores:
    scores = TraitScores()
    for qid, resp in answers.items():
        scores = apply_response_scores(snapshot, qid, resp, scores)
    return scores


def undo_last_question(snapshot: ConfigSnapshot, state: EngineState) -> EngineState:
    if not state.asked:
        return state
    asked = list(state.asked)
    previous = asked.pop()
    answers: Dict[str, QuestionResponse] = {k: v for k, v in state.answers.items() if k != previous}
    scores = replay_scores(snapshot, answers)
    log.debug("undo %s asked=%d", previous, len(asked))
    _emit_trace(op="undo", question_id=previous, asked=len(asked), signal=round(scores.total_signal(), 3))
    return replace(state, asked=asked, answers=answers, scores=scores, current_question_id=previous)


class AssessmentSession:
    """One student's run through a snapshot partition.

    Holds the mode/track binding so callers only pass responses. The state is
    replaced wholesale on every transition.
    """

    def __init__(
        self,
        snapshot: ConfigSnapshot,
        mode: str,
        track: Optional[str] = None,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        state: Optional[EngineState] = None,
    ):
        self.snapshot = snapshot
        self.mode = mode
        self.track = track
        self.state = state or start_assessment(snapshot, mode, track, max_questions)
        self.result: Optional[AssessmentResult] = None

    @property
    def done(self) -> bool:
        return self.state.done

    def current_question(self) -> Optional[Question]:
        return self.snapshot.question(self.state.current_question_id)

    def options(self):
        qid = self.state.current_question_id
        return self.snapshot.options_for(qid) if qid else []

    def answer_current(self, response: QuestionResponse) -> None:
        qid = self.state.current_question_id
        if qid is None:
            return
        self.state = answer_question(self.snapshot, self.state, self.mode, self.track, qid, response)
        self.result = None

    def undo(self) -> None:
        self.state = undo_last_question(self.snapshot, self.state)
        self.result = None

    def finalize(self, rng: Optional[random.Random] = None) -> AssessmentResult:
        if self.result is None:
            self.result = compute_result(self.snapshot, self.state, self.mode, self.track, rng=rng)
        return self.result
