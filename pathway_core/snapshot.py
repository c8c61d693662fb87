from __future__ import annotations
import json, importlib.resources as ir
from pathlib import Path
from typing import Any, Mapping, Optional
from . import config
from .types import TRAIT_IDS, Cluster, ConfigSnapshot, Option, Question, Trait

MODES = ("JSS", "SSS")
TRACKS = ("SCIENCE", "ARTS", "COMMERCIAL")
QUESTION_TYPES = ("mcq", "image_select", "scenario", "drag_rank", "open_short")


def snapshot_from_dict(raw: Mapping[str, Any]) -> ConfigSnapshot:
    return ConfigSnapshot(
        questions=tuple(Question.from_dict(q) for q in (raw.get("questions") or ())),
        options=tuple(Option.from_dict(o) for o in (raw.get("options") or ())),
        traits=tuple(Trait.from_dict(t) for t in (raw.get("traits") or ())),
        clusters=tuple(Cluster.from_dict(c) for c in (raw.get("clusters") or ())),
    )


def read_snapshot_json(path: Optional[str] = None) -> Any:
    """Raw JSON of the active snapshot: explicit path, SNAPSHOT_PATH, else the bundled file."""

    target = path or config.SNAPSHOT_PATH
    if target:
        return json.loads(Path(target).read_text(encoding="utf-8"))
    # namespace package readers take one segment per joinpath before 3.12
    data = ir.files(__package__).joinpath("data").joinpath("snapshot.json").read_text(encoding="utf-8")
    return json.loads(data)


def load_snapshot(path: Optional[str] = None) -> ConfigSnapshot:
    from .validators import validate_config_snapshot

    raw = read_snapshot_json(path)
    report = validate_config_snapshot(raw)
    if not report["valid"]:
        raise ValueError("invalid snapshot: " + "; ".join(report["errors"]))
    return snapshot_from_dict(raw)
