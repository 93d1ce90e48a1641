"""Tests for conncheck.logic.runlog and the workbook export"""

import json

import openpyxl
import pytest

from conncheck.logic.adb import CommandResult
from conncheck.logic.runlog import RunLogger, run_step


def _ok():
    return CommandResult(["adb"], 0, "done", "")


def _fail():
    return CommandResult(["adb"], 1, "", "device offline")


class TestRunLogger:
    def test_write_payload(self, tmp_path):
        logger = RunLogger(tmp_path / "run")
        logger.set_meta(run_id="r1", profile_name="Ubuntu")
        run_step(logger, "adb_devices", _ok)
        out = logger.write(status="success")
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["status"] == "success"
        assert payload["error"] is None
        assert payload["meta"]["profile_name"] == "Ubuntu"
        assert payload["steps"][0]["name"] == "adb_devices"
        assert payload["steps"][0]["details"]["stdout"] == "done"

    def test_empty_step_name_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            RunLogger(tmp_path / "run").begin_step("")


class TestRunStep:
    def test_failure_is_logged_and_raised(self, tmp_path):
        logger = RunLogger(tmp_path / "run")
        with pytest.raises(RuntimeError, match="device offline"):
            run_step(logger, "wait_for_device", _fail)
        step = logger.steps[0]
        assert step["ok"] is False
        assert step["error"] == "wait_for_device failed with return code 1"

    def test_without_logger(self):
        assert run_step(None, "anything", _ok).stdout == "done"
        with pytest.raises(RuntimeError):
            run_step(None, "anything", _fail)


def test_workbook_export(tmp_path):
    workbook = tmp_path / "results.xlsx"
    logger = RunLogger(tmp_path / "run", results_workbook=workbook)
    logger.set_meta(run_id="r1", command="apply", profile_id=8, profile_name="Ubuntu")
    run_step(logger, "adb_devices", _ok)
    logger.write(status="success")
    logger.write(status="success")

    wb = openpyxl.load_workbook(workbook)
    assert {"Runs", "Steps", "Summary", "Easy Read"} <= set(wb.sheetnames)
    runs = list(wb["Runs"].iter_rows(min_row=2, values_only=True))
    assert len(runs) == 1
    assert runs[0][6] == "Ubuntu"
    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(values_only=True) if row and row[0]}
    assert summary["Total runs"] == 1
    assert summary["Ubuntu"] == 1
