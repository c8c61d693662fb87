from __future__ import annotations

from dataclasses import replace

from pathway_core.branching import build_edges, validate_branching
from pathway_core.snapshot import TRACKS, load_snapshot

from tests.conftest import build_synthetic_snapshot, chain_snapshot, make_question


def test_three_node_cycle_reported_once_from_revisited_node():
    snap = chain_snapshot(
        {"Q1": ["Q2"], "Q2": ["Q3"], "Q3": ["Q1"]},
        parents={"Q2": "Q1", "Q3": "Q2"},
    )
    report = validate_branching(snap, "JSS")

    assert report.cycles == [["Q1", "Q2", "Q3", "Q1"]]
    assert report.reachable == ["Q1", "Q2", "Q3"]
    assert report.orphans == []
    assert report.end_reachable is False
    assert not report.publish_safe


def test_cycle_with_exit_still_reaches_end():
    snap = chain_snapshot(
        {"Q1": ["Q2"], "Q2": ["Q1", "Q3"], "Q3": []},
        parents={"Q2": "Q1", "Q3": "Q2"},
    )
    report = validate_branching(snap, "JSS")

    assert report.cycles == [["Q1", "Q2", "Q1"]]
    assert report.end_reachable is True


def test_disconnected_question_is_orphan_not_reachable():
    snap = chain_snapshot({"Q1": ["Q2"], "Q2": [], "Q9": []}, parents={"Q2": "Q1", "Q9": "Q1"})
    report = validate_branching(snap, "JSS")

    assert report.orphans == ["Q9"]
    assert "Q9" not in report.reachable
    assert report.end_reachable is True
    assert not report.publish_safe


def test_parentless_questions_are_roots():
    snap = chain_snapshot({"Q1": [], "Q2": []})
    report = validate_branching(snap, "JSS")

    assert report.reachable == ["Q1", "Q2"]
    assert report.orphans == []
    assert report.publish_safe


def test_duplicate_edges_visit_once():
    snap = chain_snapshot({"Q1": ["Q2", "Q2"], "Q2": []}, parents={"Q2": "Q1"})
    report = validate_branching(snap, "JSS")

    assert report.reachable == ["Q1", "Q2"]
    assert report.cycles == []


def test_edges_leaving_partition_are_ignored():
    snap = chain_snapshot({"Q1": ["Q2"], "Q2": []}, parents={"Q2": "Q1"})
    inactive = replace(snap, questions=(snap.questions[0], replace(snap.questions[1], status="archived")))

    assert build_edges(inactive, "JSS") == {"Q1": []}
    report = validate_branching(inactive, "JSS")
    assert report.reachable == ["Q1"]
    assert report.end_reachable is True


def test_track_questions_need_their_track():
    snap = build_synthetic_snapshot()

    no_track = validate_branching(snap, "SSS")
    assert no_track.reachable == ["SSS_A"]

    science = validate_branching(snap, "SSS", "SCIENCE")
    assert set(science.reachable) == {"SSS_A", "SSS_SCI"}
    assert "SSS_ART" not in science.reachable + science.orphans


def test_empty_partition_has_no_end():
    snap = build_synthetic_snapshot()
    report = validate_branching(snap, "XYZ")
    assert report.reachable == [] and report.orphans == []
    assert report.end_reachable is False


def test_report_wire_keys():
    snap = chain_snapshot({"Q1": []})
    payload = validate_branching(snap, "JSS").to_dict()
    assert set(payload) == {"cycles", "orphans", "reachable", "endReachable"}
    assert payload["endReachable"] is True


def test_mode_mismatch_excluded():
    snap = chain_snapshot({"Q1": []})
    snap = replace(snap, questions=snap.questions + (make_question("S1", mode="SSS"),))
    assert validate_branching(snap, "JSS").reachable == ["Q1"]


def test_bundled_snapshot_partitions_are_publish_safe():
    snap = load_snapshot()
    for mode, track in [("JSS", None), ("SSS", None)] + [("SSS", t) for t in TRACKS]:
        report = validate_branching(snap, mode, track)
        assert report.publish_safe, (mode, track, report.to_dict())
