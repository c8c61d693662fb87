from __future__ import annotations

import json

import autoplay


def test_runs_are_seeded_and_complete():
    first = autoplay.run("SSS", "COMMERCIAL", "random", runs=4, seed=99)
    second = autoplay.run("SSS", "COMMERCIAL", "random", runs=4, seed=99)

    assert [r["report_code"] for r in first] == [r["report_code"] for r in second]
    for res in first:
        assert res["mode"] == "SSS"
        assert "SSS_COM_Q1" in res["asked"]
        assert len(res["top_clusters"]) == 5


def test_disengaged_profile_lowers_engagement():
    results = autoplay.run("JSS", None, "disengaged", runs=3, seed=1)
    summary = autoplay.summarize(results)

    assert summary["runs"] == 3
    assert set(summary["engagement"]) <= {"LOW", "MEDIUM"}


def test_main_writes_results(tmp_path, capsys):
    out = tmp_path / "runs.json"
    assert autoplay.main(["--mode", "JSS", "--runs", "2", "--out", str(out)]) == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["summary"]["runs"] == 2
    assert len(payload["results"]) == 2
    assert "primary_cluster" in capsys.readouterr().out
