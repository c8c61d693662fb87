from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

Mode = Literal["JSS", "SSS"]
Track = Literal["SCIENCE", "ARTS", "COMMERCIAL"]
QuestionType = Literal["mcq", "image_select", "scenario", "drag_rank", "open_short"]
QuestionStatus = Literal["draft", "active", "archived"]
Confidence = Literal["HIGH", "MEDIUM", "LOW"]
TraitId = Literal[
    "logic",
    "creativity",
    "empathy",
    "practical",
    "communication",
    "leadership",
    "curiosity",
    "organization",
    "technical",
]

TRAIT_IDS: Tuple[str, ...] = (
    "logic",
    "creativity",
    "empathy",
    "practical",
    "communication",
    "leadership",
    "curiosity",
    "organization",
    "technical",
)


def _num(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _strs(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


def _ref(value: Any) -> Optional[str]:
    """An id-like field: non-empty string or None."""
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class TraitScores:
    """One slot per trait; a trait absent from a sparse map is 0."""

    logic: float = 0.0
    creativity: float = 0.0
    empathy: float = 0.0
    practical: float = 0.0
    communication: float = 0.0
    leadership: float = 0.0
    curiosity: float = 0.0
    organization: float = 0.0
    technical: float = 0.0

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "TraitScores":
        if not raw or not isinstance(raw, Mapping):
            return cls()
        return cls(**{t: _num(raw[t]) for t in TRAIT_IDS if t in raw and raw[t] is not None})

    def get(self, trait: str) -> float:
        return float(getattr(self, trait))

    def plus(self, delta: "TraitScores", weight: float = 1.0) -> "TraitScores":
        return TraitScores(**{t: self.get(t) + delta.get(t) * weight for t in TRAIT_IDS})

    def dot(self, weights: "TraitScores") -> float:
        return sum(self.get(t) * weights.get(t) for t in TRAIT_IDS)

    def total_signal(self) -> float:
        return sum(abs(self.get(t)) for t in TRAIT_IDS)

    def to_dict(self) -> Dict[str, float]:
        return {t: self.get(t) for t in TRAIT_IDS}

    def sparse(self) -> Dict[str, float]:
        return {t: self.get(t) for t in TRAIT_IDS if self.get(t) != 0}


@dataclass(frozen=True)
class Trait:
    id: str; label: str = ""; description: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Trait":
        return cls(id=str(raw.get("id", "")), label=str(raw.get("label") or ""),
                   description=str(raw.get("description") or ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "description": self.description}


@dataclass(frozen=True)
class Question:
    id: str
    mode: str
    type: str
    prompt: str = ""
    tags: Tuple[str, ...] = ()
    branch_level: int = 0
    parent_question_id: Optional[str] = None
    status: str = "active"
    track: Optional[str] = None
    illustration_url: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Question":
        try:
            level = int(raw.get("branch_level") or 0)
        except (TypeError, ValueError, OverflowError):
            level = 0
        return cls(
            id=str(raw.get("id", "")),
            mode=str(raw.get("mode", "")),
            type=str(raw.get("type", "")),
            prompt=str(raw.get("prompt") or ""),
            tags=_strs(raw.get("tags")),
            branch_level=level,
            parent_question_id=_ref(raw.get("parent_question_id")),
            status=str(raw.get("status") or "active"),
            track=_ref(raw.get("track")),
            illustration_url=_ref(raw.get("illustration_url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode,
            "type": self.type,
            "prompt": self.prompt,
            "tags": list(self.tags),
            "branch_level": self.branch_level,
            "parent_question_id": self.parent_question_id,
            "status": self.status,
            "track": self.track,
            "illustration_url": self.illustration_url,
        }


@dataclass(frozen=True)
class Option:
    id: str
    question_id: str
    label: str = ""
    score_map: TraitScores = field(default_factory=TraitScores)
    image_url: Optional[str] = None
    next_question_id: Optional[str] = None
    disengaged: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Option":
        return cls(
            id=str(raw.get("id", "")),
            question_id=str(raw.get("question_id", "")),
            label=str(raw.get("label") or ""),
            score_map=TraitScores.from_mapping(raw.get("score_map")),
            image_url=_ref(raw.get("image_url")),
            next_question_id=_ref(raw.get("next_question_id")),
            disengaged=bool(raw.get("disengaged", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "question_id": self.question_id,
            "label": self.label,
            "score_map": self.score_map.sparse(),
            "image_url": self.image_url,
            "next_question_id": self.next_question_id,
        }
        if self.disengaged:
            out["disengaged"] = True
        return out


@dataclass(frozen=True)
class Cluster:
    id: str
    label: str = ""
    description: str = ""
    track_bias: Tuple[str, ...] = ()
    trait_weights: TraitScores = field(default_factory=TraitScores)
    subjects: Tuple[str, ...] = ()
    skills: Tuple[str, ...] = ()
    next_steps: Tuple[str, ...] = ()
    what_they_do: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Cluster":
        return cls(
            id=str(raw.get("id", "")),
            label=str(raw.get("label") or ""),
            description=str(raw.get("description") or ""),
            track_bias=_strs(raw.get("track_bias")),
            trait_weights=TraitScores.from_mapping(raw.get("trait_weights")),
            subjects=_strs(raw.get("subjects")),
            skills=_strs(raw.get("skills")),
            next_steps=_strs(raw.get("next_steps")),
            what_they_do=_strs(raw.get("what_they_do")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "track_bias": list(self.track_bias),
            "trait_weights": self.trait_weights.sparse(),
            "subjects": list(self.subjects),
            "skills": list(self.skills),
            "next_steps": list(self.next_steps),
            "what_they_do": list(self.what_they_do),
        }


@dataclass(frozen=True)
class ConfigSnapshot:
    questions: Tuple[Question, ...] = ()
    options: Tuple[Option, ...] = ()
    traits: Tuple[Trait, ...] = ()
    clusters: Tuple[Cluster, ...] = ()

    def question(self, question_id: Optional[str]) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def option(self, option_id: Optional[str]) -> Optional[Option]:
        return next((o for o in self.options if o.id == option_id), None)

    def options_for(self, question_id: str) -> List[Option]:
        return [o for o in self.options if o.question_id == question_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "options": [o.to_dict() for o in self.options],
            "traits": [t.to_dict() for t in self.traits],
            "clusters": [c.to_dict() for c in self.clusters],
        }


@dataclass(frozen=True)
class QuestionResponse:
    type: str
    option_ids: Tuple[str, ...] = ()
    text: Optional[str] = None

    @property
    def first_option_id(self) -> Optional[str]:
        return self.option_ids[0] if self.option_ids else None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "QuestionResponse":
        ids = raw.get("optionIds", raw.get("option_ids")) or ()
        return cls(type=str(raw.get("type", "")), option_ids=tuple(str(i) for i in ids),
                   text=raw.get("text"))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.option_ids:
            out["optionIds"] = list(self.option_ids)
        if self.text is not None:
            out["text"] = self.text
        return out


@dataclass
class EngineState:
    asked: List[str] = field(default_factory=list)
    answers: Dict[str, QuestionResponse] = field(default_factory=dict)
    scores: TraitScores = field(default_factory=TraitScores)
    current_question_id: Optional[str] = None
    max_questions: int = 20

    @property
    def done(self) -> bool:
        return self.current_question_id is None

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape the caller persists between transitions."""

        return {
            "asked": list(self.asked),
            "answers": {qid: resp.to_dict() for qid, resp in self.answers.items()},
            "scores": self.scores.to_dict(),
            "currentQuestionId": self.current_question_id,
            "maxQuestions": self.max_questions,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EngineState":
        answers = raw.get("answers") or {}
        return cls(
            asked=[str(q) for q in (raw.get("asked") or [])],
            answers={str(k): QuestionResponse.from_dict(v) for k, v in answers.items()},
            scores=TraitScores.from_mapping(raw.get("scores")),
            current_question_id=raw.get("currentQuestionId"),
            max_questions=int(raw.get("maxQuestions", 20)),
        )


@dataclass(frozen=True)
class ClusterScore:
    cluster_id: str; score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"clusterId": self.cluster_id, "score": self.score}


@dataclass(frozen=True)
class Explanation:
    summary: str
    why: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "why": list(self.why), "next_steps": list(self.next_steps)}


@dataclass(frozen=True)
class Engagement:
    level: Confidence; disengaged_count: int; answered_count: int; note: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "disengagedCount": self.disengaged_count,
            "answeredCount": self.answered_count,
            "note": self.note,
        }


@dataclass(frozen=True)
class AssessmentResult:
    mode: str
    track: Optional[str]
    primary_cluster: str
    top_clusters: List[ClusterScore]
    dominant_traits: List[str]
    confidence: Confidence
    trait_scores: TraitScores
    explanation: Explanation
    engagement: Engagement
    report_code: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "track": self.track,
            "primary_cluster": self.primary_cluster,
            "top_clusters": [c.to_dict() for c in self.top_clusters],
            "dominant_traits": list(self.dominant_traits),
            "confidence": self.confidence,
            "trait_scores": self.trait_scores.to_dict(),
            "explanation": self.explanation.to_dict(),
            "engagement": self.engagement.to_dict(),
            "report_code": self.report_code,
        }


