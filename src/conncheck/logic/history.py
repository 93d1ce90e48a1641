"""Summarise run.json artefacts of previous applies into a results table."""
from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any


def _safe_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def load_runs(logs_dir: Path, limit: int) -> list[dict[str, Any]]:
    """Newest-first run payloads; unreadable run.json files are skipped."""
    logs_dir = Path(logs_dir)
    if not logs_dir.exists():
        return []
    candidates = sorted((p for p in logs_dir.iterdir() if p.is_dir()), reverse=True)
    rows: list[dict[str, Any]] = []
    for run_dir in candidates:
        run_json = run_dir / "run.json"
        if not run_json.exists():
            continue
        try:
            payload = json.loads(run_json.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            continue
        payload["_run_id"] = run_dir.name
        rows.append(payload)
        if len(rows) >= limit:
            break
    return rows


def markdown_history(runs: list[dict[str, Any]]) -> str:
    if not runs:
        return "No valid runs found."

    successes = sum(1 for r in runs if r.get("status") == "success")
    success_rate = (successes / len(runs)) * 100
    applied = Counter(
        str((r.get("meta") or {}).get("profile_name", "")) for r in runs if r.get("status") == "success"
    )

    lines = [
        f"Runs analysed: {len(runs)}",
        f"Success rate: {success_rate:.1f}% ({successes}/{len(runs)})",
        "",
        "| Run | Device | Profile | Status | Elapsed (s) | Error |",
        "|---|---|---|---|---:|---|",
    ]
    for run in runs:
        meta = run.get("meta") or {}
        lines.append(
            f"| {run['_run_id']} | {meta.get('device_serial') or 'default'} | "
            f"{meta.get('profile_name', '')} | {run.get('status', '')} | "
            f"{_safe_float(run.get('elapsed_s')):.3f} | {run.get('error') or ''} |"
        )
    if applied:
        lines.append("")
        lines.append("| Profile | Successful applies |")
        lines.append("|---|---:|")
        for name, count in applied.most_common():
            lines.append(f"| {name} | {count} |")
    return "\n".join(lines)
