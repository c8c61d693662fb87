from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .branching import build_edges
from .snapshot import QUESTION_TYPES, read_snapshot_json, snapshot_from_dict
from .types import ConfigSnapshot
from .validators import partition_key, partitions, validate_publish_snapshot


def _blank_partition() -> dict[str, Any]:
    return {"types": {t: 0 for t in QUESTION_TYPES}, "roots": 0, "leaves": 0, "questions": 0}


def coverage(snapshot: ConfigSnapshot) -> dict[str, dict[str, Any]]:
    out: dict[str, dict[str, Any]] = {}
    for mode, track in partitions():
        edges = build_edges(snapshot, mode, track)
        if not edges:
            continue
        data = _blank_partition()
        for q in snapshot.questions:
            if q.id not in edges:
                continue
            data["questions"] += 1
            data["types"][q.type] = data["types"].get(q.type, 0) + 1
            if not q.parent_question_id:
                data["roots"] += 1
            if not edges[q.id]:
                data["leaves"] += 1
        out[partition_key(mode, track)] = data
    return out


def audit_raw(raw: Any) -> dict[str, Any]:
    report = validate_publish_snapshot(raw)
    # coverage needs a structurally sound snapshot
    cov = coverage(snapshot_from_dict(raw)) if report["branching"] else {}
    return {"coverage": cov, "report": report}


def print_report(summary: dict[str, Any]) -> None:
    print("=== Snapshot Coverage ===")
    for key, data in summary["coverage"].items():
        print(f"\nPartition: {key}")
        print(f"  questions: {data['questions']}  roots: {data['roots']}  leaves: {data['leaves']}")
        print("  " + "  ".join(f"{t}:{n:3d}" for t, n in data["types"].items()))

    report = summary["report"]
    for label in ("errors", "warnings"):
        msgs = report.get(label) or []
        if msgs:
            print(f"\n{label.capitalize()}:")
            for msg in msgs:
                print(f" - {msg}")
    if report.get("valid"):
        print("\nSnapshot is publishable.")


def write_summary(summary: dict[str, Any], path: Path = Path("/tmp/snapshot_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    path = argv[0] if argv else None
    summary = audit_raw(read_snapshot_json(path))
    print_report(summary)
    write_summary(summary)
    return 0 if summary["report"]["valid"] else 2


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
