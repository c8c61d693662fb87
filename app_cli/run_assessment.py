from __future__ import annotations
import argparse, json, logging
from pathway_core.types import QuestionResponse
from pathway_core.engine import AssessmentSession
from pathway_core.snapshot import MODES, TRACKS, load_snapshot
from pathway_core.config import load_config, max_questions, seed_rng
def ask(prompt: str, options=None) -> str:
    if options:
        print(prompt)
        for i,opt in enumerate(options): print(f"  [{i}] {opt.label}")
        while True:
            v = input("Your choice (index): ").strip()
            if v == "u" or (v.isdigit() and int(v) < len(options)): return v
            print("Enter a number index.")
    else:
        return input(prompt + " ").strip()
def ask_rank(prompt: str, options) -> list[str]:
    """Empty list means go back."""
    print(prompt)
    for i,opt in enumerate(options): print(f"  [{i}] {opt.label}")
    while True:
        raw = input("Your order, most liked first (e.g. 2 0 1 3): ").replace(",", " ").split()
        if raw == ["u"]: return []
        if raw and all(r.isdigit() and int(r) < len(options) for r in raw) and len(set(raw)) == len(raw):
            return [options[int(r)].id for r in raw]
        print("Enter distinct indexes separated by spaces.")
def main(argv: list[str] | None = None):
    ap = argparse.ArgumentParser(description="Pathway assessment in the terminal")
    ap.add_argument("--mode", choices=MODES, default="JSS")
    ap.add_argument("--track", choices=TRACKS, default=None)
    ap.add_argument("--snapshot", default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    a = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if a.verbose else logging.WARNING)
    cfg = load_config(); seed_rng(cfg)
    track = a.track if a.mode == "SSS" else None
    session = AssessmentSession(load_snapshot(a.snapshot or cfg.get("SNAPSHOT_PATH")), a.mode, track, max_questions(cfg))
    print(f"Pathway Assessment ({a.mode}{' / ' + track if track else ''})  type 'u' to go back")
    while not session.done:
        q = session.current_question(); opts = session.options()
        if q.type == "open_short":
            v = ask(q.prompt)
            if v == "u": session.undo(); continue
            session.answer_current(QuestionResponse(type=q.type, text=v))
        elif q.type == "drag_rank":
            order = ask_rank(q.prompt, opts)
            if not order: session.undo(); continue
            session.answer_current(QuestionResponse(type=q.type, option_ids=tuple(order)))
        else:
            v = ask(q.prompt, opts)
            if v == "u": session.undo(); continue
            session.answer_current(QuestionResponse(type=q.type, option_ids=(opts[int(v)].id,)))
    res = session.finalize()
    print(f"\n{res.explanation.summary}")
    for line in res.explanation.why: print(f"  - {line}")
    print("Next steps:")
    for line in res.explanation.next_steps: print(f"  - {line}")
    print(f"Confidence: {res.confidence}   Engagement: {res.engagement.level}")
    print(f"Report code: {res.report_code}")
    if a.verbose: print(json.dumps(res.to_dict(), indent=2))
if __name__ == "__main__": main()
