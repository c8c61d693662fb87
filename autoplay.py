# autoplay.py
from __future__ import annotations
import argparse, json, logging, random
from collections import Counter
from typing import Any, Dict, List, Optional
from pathway_core.engine import AssessmentSession
from pathway_core.snapshot import MODES, TRACKS, load_snapshot
from pathway_core.types import ConfigSnapshot, Option, Question, QuestionResponse

# canned free-text answers; they never move trait scores
OPEN_TEXTS: List[str] = [
    "I enjoyed organizing our class science fair because everyone worked together.",
    "Helping my younger brother with homework felt good because he finally understood it.",
    "Drawing the posters for our cultural day was fun because I could be creative.",
]

def _answer_for(q: Question, opts: List[Option], profile: str, rng: random.Random) -> QuestionResponse:
    if q.type == "open_short":
        return QuestionResponse(type=q.type, text=rng.choice(OPEN_TEXTS))
    if q.type == "drag_rank":
        order = [o.id for o in opts]; rng.shuffle(order)
        return QuestionResponse(type=q.type, option_ids=tuple(order))
    pool = opts
    if profile == "engaged":
        pool = [o for o in opts if not o.disengaged] or opts
    elif profile == "disengaged":
        pool = [o for o in opts if o.disengaged] or opts
    return QuestionResponse(type=q.type, option_ids=(rng.choice(pool).id,))

def play_once(snapshot: ConfigSnapshot, mode: str, track: Optional[str], profile: str,
              rng: random.Random, max_questions: int = 20) -> Dict[str, Any]:
    sess = AssessmentSession(snapshot, mode, track, max_questions=max_questions)
    while not sess.done:
        q = sess.current_question()
        sess.answer_current(_answer_for(q, sess.options(), profile, rng))
    if not sess.state.asked: raise RuntimeError(f"no questions in scope for {mode}/{track}")
    res = sess.finalize(rng=rng).to_dict()
    res["asked"] = list(sess.state.asked)
    return res

def run(mode: str, track: Optional[str], profile: str, runs: int, seed: Optional[int],
        snapshot_path: Optional[str] = None, max_questions: int = 20) -> List[Dict[str, Any]]:
    rng = random.Random(seed if seed is not None else 1234)
    snapshot = load_snapshot(snapshot_path)
    return [play_once(snapshot, mode, track, profile, rng, max_questions) for _ in range(runs)]

def summarize(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    primary = Counter(r["primary_cluster"] for r in results)
    confidence = Counter(r["confidence"] for r in results)
    engagement = Counter(r["engagement"]["level"] for r in results)
    return {
        "runs": len(results),
        "primary_cluster": dict(primary.most_common()),
        "confidence": dict(confidence),
        "engagement": dict(engagement),
    }

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--mode", choices=MODES, default="JSS")
    ap.add_argument("--track", choices=TRACKS, default=None)
    ap.add_argument("--profile", choices=["random", "engaged", "disengaged"], default="random")
    ap.add_argument("--runs", type=int, default=50)
    ap.add_argument("--seed", type=int, default=1337)
    ap.add_argument("--max-questions", type=int, default=20)
    ap.add_argument("--snapshot", default=None)
    ap.add_argument("--out", default=None, help="write every result as JSON here")
    a = ap.parse_args(argv)
    logging.basicConfig(level=logging.WARNING)
    track = a.track if a.mode == "SSS" else None
    results = run(a.mode, track, a.profile, a.runs, a.seed, a.snapshot, a.max_questions)
    summary = summarize(results)
    print(json.dumps(summary, indent=2))
    if a.out:
        with open(a.out, "w", encoding="utf-8") as f:
            json.dump({"summary": summary, "results": results}, f, indent=2)
        print(f"Results: {a.out}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
