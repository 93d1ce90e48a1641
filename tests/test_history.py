"""Tests for conncheck.logic.history"""

import json

from conncheck.logic.history import load_runs, markdown_history


def _write_run(logs_dir, run_id, status, profile_name, error=None):
    run_dir = logs_dir / run_id
    run_dir.mkdir(parents=True)
    payload = {
        "meta": {"run_id": run_id, "profile_name": profile_name, "device_serial": "emulator-5554"},
        "status": status,
        "error": error,
        "elapsed_s": 1.25,
        "steps": [],
    }
    (run_dir / "run.json").write_text(json.dumps(payload), encoding="utf-8")


def test_load_runs_newest_first_with_limit(tmp_path):
    _write_run(tmp_path, "20240101T000000Z", "success", "Ubuntu")
    _write_run(tmp_path, "20240102T000000Z", "error", "Kuketz", error="device offline")
    _write_run(tmp_path, "20240103T000000Z", "success", "Cloudflare")
    runs = load_runs(tmp_path, limit=2)
    assert [r["_run_id"] for r in runs] == ["20240103T000000Z", "20240102T000000Z"]


def test_load_runs_skips_broken_files(tmp_path):
    broken = tmp_path / "20240101T000000Z"
    broken.mkdir()
    (broken / "run.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "empty").mkdir()
    assert load_runs(tmp_path, limit=10) == []


def test_load_runs_missing_dir(tmp_path):
    assert load_runs(tmp_path / "nope", limit=10) == []


def test_markdown_history(tmp_path):
    _write_run(tmp_path, "20240101T000000Z", "success", "Ubuntu")
    _write_run(tmp_path, "20240102T000000Z", "error", "Kuketz", error="device offline")
    text = markdown_history(load_runs(tmp_path, limit=10))
    assert "Success rate: 50.0% (1/2)" in text
    assert "| 20240102T000000Z | emulator-5554 | Kuketz | error | 1.250 | device offline |" in text
    assert "| Ubuntu | 1 |" in text


def test_markdown_history_empty():
    assert markdown_history([]) == "No valid runs found."
