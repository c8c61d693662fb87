from __future__ import annotations
from typing import Any, Dict, List
import logging

from . import config
from .branching import validate_branching
from .snapshot import MODES, QUESTION_TYPES, TRACKS, snapshot_from_dict
from .types import ConfigSnapshot

log = logging.getLogger(__name__)

QUESTION_REQUIRED = ("id", "prompt", "type", "mode")
OPTION_REQUIRED = ("id", "question_id", "label")
TRAIT_REQUIRED = ("id",)
CLUSTER_REQUIRED = ("id",)

# fields that must hold an id string when present
QUESTION_REFS = ("parent_question_id", "track")
OPTION_REFS = ("next_question_id",)
SECTIONS = ("questions", "options", "traits", "clusters")

_IMAGE_TYPE = "image_select"
_FREE_TEXT = "open_short"


def _has_fields(entry: Any, keys) -> bool:
    return isinstance(entry, dict) and all(entry.get(k) for k in keys)


def _bad_refs(entry: Any, keys) -> List[str]:
    if not isinstance(entry, dict):
        return []
    return [k for k in keys if entry.get(k) is not None and not isinstance(entry.get(k), str)]


def _check_entries(data: Dict[str, Any], section: str, label: str, required, refs, errors: List[str]) -> None:
    if not isinstance(data.get(section), list):
        return
    for idx, entry in enumerate(data[section]):
        if not _has_fields(entry, required):
            errors.append(f"{label} {idx + 1} is missing required fields.")
            continue
        for key in _bad_refs(entry, refs):
            errors.append(f"{label} {idx + 1} has a malformed {key}.")


def validate_config_snapshot(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {"valid": False, "errors": ["Config is not an object."]}
    errors: List[str] = []
    for name in SECTIONS:
        if not isinstance(data.get(name), list):
            errors.append(f"Missing {name} array.")

    _check_entries(data, "questions", "Question", QUESTION_REQUIRED, QUESTION_REFS, errors)
    _check_entries(data, "options", "Option", OPTION_REQUIRED, OPTION_REFS, errors)
    _check_entries(data, "traits", "Trait", TRAIT_REQUIRED, (), errors)
    _check_entries(data, "clusters", "Cluster", CLUSTER_REQUIRED, (), errors)

    return {"valid": not errors, "errors": errors}


def partitions() -> List[tuple]:
    out = [(config.ROOT_MODE, None), (config.BRANCHING_MODE, None)]
    out.extend((config.BRANCHING_MODE, t) for t in TRACKS)
    return out


def partition_key(mode: str, track) -> str:
    return f"{mode}:{track}" if track else mode


def _has_rubric(tags) -> bool:
    return any(t == config.RUBRIC_TAG or t.startswith(config.RUBRIC_TAG + ":") for t in tags)


def _question_checks(snap: ConfigSnapshot, errors: List[str], warnings: List[str]) -> None:
    question_ids = {q.id for q in snap.questions}
    active_ids = {q.id for q in snap.questions if q.status == "active"}
    for q in snap.questions:
        if q.mode not in MODES:
            errors.append(f"Question {q.id} has unknown mode {q.mode}.")
        if q.type not in QUESTION_TYPES:
            errors.append(f"Question {q.id} has unknown type {q.type}.")
        if q.branch_level > config.MAX_BRANCH_LEVEL:
            errors.append(f"Question {q.id} exceeds max branch level {config.MAX_BRANCH_LEVEL}.")
        if q.track and q.mode != config.BRANCHING_MODE:
            errors.append(f"Question {q.id} has a track but is not in {config.BRANCHING_MODE} mode.")
        if q.track and q.track not in TRACKS:
            errors.append(f"Question {q.id} has unknown track {q.track}.")
        if q.parent_question_id and q.parent_question_id not in question_ids:
            errors.append(f"Question {q.id} has unknown parent {q.parent_question_id}.")
        if q.status != "active":
            continue
        if not q.tags:
            errors.append(f"Question {q.id} is missing tags.")
        if q.type != _FREE_TEXT and not snap.options_for(q.id):
            errors.append(f"Question {q.id} has no options.")
        if q.type == _FREE_TEXT and not _has_rubric(q.tags):
            warnings.append(f"Open question {q.id} has no rubric tag.")

    types_by_id = {q.id: q.type for q in snap.questions}
    for o in snap.options:
        if o.question_id not in question_ids:
            errors.append(f"Option {o.id} points at unknown question {o.question_id}.")
        if o.next_question_id and o.next_question_id not in active_ids:
            errors.append(f"Option {o.id} links to missing or inactive question {o.next_question_id}.")
        if types_by_id.get(o.question_id) == _IMAGE_TYPE and not o.image_url:
            warnings.append(f"Image option {o.id} is missing image_url.")


def validate_publish_snapshot(data: Any) -> Dict[str, Any]:
    """Everything a snapshot must pass before it can be published.

    Errors block publishing, warnings do not. Structural errors short-circuit
    the remaining checks.
    """

    structural = validate_config_snapshot(data)
    if not structural["valid"]:
        log.warning("snapshot failed structural validation (%d errors)", len(structural["errors"]))
        return {"valid": False, "errors": structural["errors"], "warnings": [], "branching": {}}

    snap = snapshot_from_dict(data)
    errors: List[str] = []
    warnings: List[str] = []
    _question_checks(snap, errors, warnings)

    branching: Dict[str, Any] = {}
    for mode, track in partitions():
        key = partition_key(mode, track)
        report = validate_branching(snap, mode, track)
        branching[key] = report.to_dict()
        if not report.reachable and not report.orphans:
            continue  # nothing in scope
        for cycle in report.cycles:
            errors.append(f"{key}: cycle {' -> '.join(cycle)}.")
        if report.orphans:
            errors.append(f"{key}: orphan questions {', '.join(report.orphans)}.")
        if not report.end_reachable:
            errors.append(f"{key}: no reachable end question.")

    for mode in MODES:
        prefix = config.MODE_PREFIX[mode]
        if not any(c.id.startswith(prefix) for c in snap.clusters):
            warnings.append(f"No clusters defined for {mode}.")

    if errors:
        log.warning("snapshot failed publish validation (%d errors)", len(errors))
    return {"valid": not errors, "errors": errors, "warnings": warnings, "branching": branching}
