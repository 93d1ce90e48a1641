"""Excel workbook writer for the cumulative history of applied profiles."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

RUN_HEADERS = [
    "logged_utc",
    "run_key",
    "run_id",
    "command",
    "device_serial",
    "profile_id",
    "profile_name",
    "status",
    "elapsed_s",
    "step_count",
    "failed_step_count",
    "error",
    "run_json",
]
STEP_HEADERS = [
    "logged_utc",
    "run_key",
    "run_id",
    "step_index",
    "step_name",
    "ok",
    "duration_ms",
    "error",
    "details_json",
]
EASY_HEADERS = [
    "Logged (UTC)",
    "Run ID",
    "Device",
    "Profile",
    "Result",
    "Duration (s)",
    "Main Issue",
    "Run File",
]


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _ensure_sheet(wb, name: str, headers: list[str]):
    if name in wb.sheetnames:
        ws = wb[name]
    else:
        ws = wb.create_sheet(name)
    if ws.max_row == 1 and all(c.value is None for c in ws[1]):
        ws.delete_rows(1)
        ws.append(headers)
    else:
        existing = [cell.value for cell in ws[1]]
        if existing != headers:
            ws.delete_rows(1, ws.max_row)
            ws.append(headers)
    return ws


def _delete_existing_run(ws, run_key: str, key_col: int) -> None:
    for row in range(ws.max_row, 1, -1):
        value = ws.cell(row=row, column=key_col).value
        if str(value) == run_key:
            ws.delete_rows(row, 1)


def _friendly_status(status: str) -> str:
    s = (status or "").strip().lower()
    if s == "success":
        return "Success"
    if s == "error":
        return "Error"
    if s == "restricted":
        return "Blocked by admin policy"
    return status or "Unknown"


def _main_issue(payload: dict[str, Any]) -> str:
    err = str(payload.get("error", "") or "").strip()
    if err:
        return err
    for step in payload.get("steps", []) or []:
        if not bool(step.get("ok")):
            step_name = str(step.get("name", "") or "unknown_step")
            step_err = str(step.get("error", "") or "").strip()
            return f"{step_name}: {step_err}" if step_err else f"{step_name} failed"
    return ""


def _style_sheet(ws) -> None:
    try:
        from openpyxl.styles import Font, PatternFill
    except Exception:
        return
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = ws.dimensions
    header_font = Font(bold=True, color="FFFFFF", size=12, name="Calibri")
    header_fill = PatternFill("solid", fgColor="1F4E78")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
    for col_cells in ws.columns:
        max_len = max(len(str(cell.value or "")) for cell in col_cells[:500])
        ws.column_dimensions[col_cells[0].column_letter].width = min(max(14, max_len + 4), 64)


def _rebuild_summary(runs_ws, summary_ws) -> None:
    statuses: list[str] = []
    profiles: Counter[str] = Counter()
    for row in runs_ws.iter_rows(min_row=2, values_only=True):
        if row[1] is None:
            continue
        statuses.append(str(row[7] or ""))
        if str(row[7] or "") == "success" and row[6]:
            profiles[str(row[6])] += 1

    total_runs = len(statuses)
    success_count = sum(1 for s in statuses if s == "success")
    success_rate = (success_count / total_runs * 100.0) if total_runs else 0.0

    summary_ws.delete_rows(1, summary_ws.max_row)
    summary_ws.append(["Metric", "Value"])
    summary_ws.append(["Last updated UTC", datetime.now(timezone.utc).isoformat()])
    summary_ws.append(["Total runs", total_runs])
    summary_ws.append(["Successes", success_count])
    summary_ws.append(["Success rate (%)", round(success_rate, 2)])
    summary_ws.append([])
    summary_ws.append(["Profile", "Successful applies"])
    for name, count in profiles.most_common():
        summary_ws.append([name, count])
    _style_sheet(summary_ws)


def append_run_to_workbook(workbook_path: Path, run_json_path: Path, payload: dict[str, Any]) -> bool:
    """Append/update one run in a cumulative .xlsx workbook.

    Returns False when openpyxl is unavailable; True on success.
    """
    try:
        from openpyxl import Workbook, load_workbook
    except Exception:
        return False

    workbook_path = Path(workbook_path)
    workbook_path.parent.mkdir(parents=True, exist_ok=True)
    run_json_path = Path(run_json_path)
    run_key = run_json_path.resolve().as_posix()
    meta = payload.get("meta", {}) or {}

    if workbook_path.exists():
        wb = load_workbook(workbook_path)
    else:
        wb = Workbook()
        wb.active.title = "Runs"

    runs_ws = _ensure_sheet(wb, "Runs", RUN_HEADERS)
    steps_ws = _ensure_sheet(wb, "Steps", STEP_HEADERS)
    summary_ws = _ensure_sheet(wb, "Summary", ["Metric", "Value"])
    easy_ws = _ensure_sheet(wb, "Easy Read", EASY_HEADERS)

    _delete_existing_run(runs_ws, run_key=run_key, key_col=2)
    _delete_existing_run(steps_ws, run_key=run_key, key_col=2)
    _delete_existing_run(easy_ws, run_key=run_key, key_col=len(EASY_HEADERS))

    steps = payload.get("steps", []) or []
    failed_steps = sum(1 for s in steps if not bool(s.get("ok")))
    now = datetime.now(timezone.utc).isoformat()
    run_id = str(meta.get("run_id", ""))

    runs_ws.append(
        [
            now,
            run_key,
            run_id,
            str(meta.get("command", "")),
            str(meta.get("device_serial", "")),
            meta.get("profile_id"),
            str(meta.get("profile_name", "")),
            str(payload.get("status", "")),
            _to_float(payload.get("elapsed_s"), 0.0),
            len(steps),
            failed_steps,
            str(payload.get("error", "") or ""),
            run_json_path.as_posix(),
        ]
    )

    for idx, step in enumerate(steps, start=1):
        steps_ws.append(
            [
                now,
                run_key,
                run_id,
                idx,
                str(step.get("name", "")),
                bool(step.get("ok")),
                _to_float(step.get("duration_ms"), 0.0),
                str(step.get("error", "") or ""),
                str(step.get("details", "") or ""),
            ]
        )

    easy_ws.append(
        [
            now,
            run_id,
            str(meta.get("device_serial", "") or "default"),
            str(meta.get("profile_name", "")),
            _friendly_status(str(payload.get("status", ""))),
            round(_to_float(payload.get("elapsed_s"), 0.0), 3),
            _main_issue(payload),
            run_key,
        ]
    )

    _rebuild_summary(runs_ws, summary_ws)
    _style_sheet(runs_ws)
    _style_sheet(steps_ws)
    _style_sheet(easy_ws)
    wb.save(workbook_path)
    return True
