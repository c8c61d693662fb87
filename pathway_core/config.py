from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


ROOT_MODE: str = "JSS"
BRANCHING_MODE: str = "SSS"
MODE_PREFIX: dict[str, str] = {"JSS": "JSS_", "SSS": "SSS_"}

MAX_BRANCH_LEVEL: int = 3
DEFAULT_MAX_QUESTIONS: int = 20

# rank 1..4; every later rank gets the tail weight
RANK_WEIGHTS: tuple[float, ...] = (3.0, 2.0, 1.0, 0.5)
RANK_WEIGHT_TAIL: float = 0.25

TRACK_BIAS_BONUS: float = 4.0
CONFIDENCE_MIN_SIGNAL: float = 4.0
CONFIDENCE_HIGH_RATIO: float = 1.2
CONFIDENCE_MEDIUM_RATIO: float = 1.05

ENGAGEMENT_LOW_RATIO: float = 0.4
ENGAGEMENT_MEDIUM_RATIO: float = 0.2
ENGAGEMENT_NOTES: dict[str, str] = {
    "LOW": "Several answers suggest low engagement or avoidance. Consider retaking for clearer results.",
    "MEDIUM": "A few answers suggest low engagement. Try to answer based on what you truly prefer.",
    "HIGH": "Responses show steady engagement.",
}

TOP_CLUSTERS: dict[str, int] = {"JSS": 3, "SSS": 5}
DOMINANT_TRAIT_COUNT: int = 3
REPORT_CODE_LENGTH: int = 6

RUBRIC_TAG: str = "rubric"

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "op",
    "mode",
    "track",
    "question_id",
    "asked",
    "next_id",
    "source",
    "signal",
)
# env overrides for staging
DEFAULT_MAX_QUESTIONS = _env_int("MAX_QUESTIONS", DEFAULT_MAX_QUESTIONS)
MAX_BRANCH_LEVEL = _env_int("MAX_BRANCH_LEVEL", MAX_BRANCH_LEVEL)
TRACK_BIAS_BONUS = _env_float("TRACK_BIAS_BONUS", TRACK_BIAS_BONUS)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
SNAPSHOT_PATH = os.getenv("SNAPSHOT_PATH", None)

def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("SNAPSHOT_PATH"): cfg["SNAPSHOT_PATH"] = e.get("SNAPSHOT_PATH")
    if e.get("MAX_QUESTIONS"): cfg["MAX_QUESTIONS"] = _env_int("MAX_QUESTIONS", DEFAULT_MAX_QUESTIONS)
    if e.get("SEED"): cfg["SEED"] = int(e.get("SEED"))
    return cfg
def max_questions(cfg: dict) -> int:
    try: return max(1, int(cfg.get("MAX_QUESTIONS", DEFAULT_MAX_QUESTIONS)))
    except (TypeError, ValueError): return DEFAULT_MAX_QUESTIONS
def seed_rng(cfg: dict):
    s = cfg.get("SEED")
    if s is not None:
        random.seed(int(s))
