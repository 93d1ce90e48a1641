"""Command line entry point for connectivity-check settings on an adb device."""
from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

SRC_DIR = Path(__file__).resolve().parents[1]
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from conncheck.logic.apply_run import run_apply_profile
from conncheck.logic.connectivity_check import Availability, ConnectivityCheckController
from conncheck.logic.device import adb_from_config, gate_from_config, revision_from_config
from conncheck.logic.history import load_runs, markdown_history
from conncheck.logic.profiles import CATALOG, apply_profile, resolve_by_id
from conncheck.logic.runlog import RunLogger, say
from conncheck.logic.runtime_paths import build_default_config, load_or_create_config, resolve_config_path, resolve_logs_dir
from conncheck.logic.settings_store import PORTAL_KEYS, AdbSettingsStore


def _controller(adb, cfg: dict[str, Any]) -> ConnectivityCheckController:
    conn_cfg = cfg.get("connectivity", {}) or {}
    store = AdbSettingsStore(adb, namespace=str(conn_cfg.get("namespace", "global")))
    gate = gate_from_config(adb, cfg)
    return ConnectivityCheckController(store, is_restricted=gate)


def _cmd_profiles(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    print("| Id | Name | Mode | HTTP probe |")
    print("|---:|---|---|---|")
    for profile in CATALOG:
        print(f"| {profile.id} | {profile.name} | {profile.mode.name} | {profile.http_url} |")
    return 0


def _cmd_status(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    adb = adb_from_config(cfg, args.serial)
    controller = _controller(adb, cfg)
    availability = controller.availability_status()
    say(f"Availability: {availability.value}")
    snapshot = controller.store.snapshot()
    for key in PORTAL_KEYS:
        print(f"  {key} = {snapshot[key] if snapshot[key] is not None else '<unset>'}")
    selected = controller.display()
    if selected is None:
        say("Selection: unrecognised (stored HTTP URL matches no known profile)")
    else:
        say(f"Selection: {selected} ({resolve_by_id(selected).name})")
    return 0


def _cmd_apply(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    profile = resolve_by_id(args.profile_id)
    if args.dry_run:
        settings = apply_profile(profile)
        say(f"Dry run for profile {profile.id} ({profile.name})")
        print(f"  captive_portal_http_url = {settings.http_url}")
        print(f"  captive_portal_https_url = {settings.https_url}")
        print(f"  captive_portal_fallback_url = {settings.fallback_url}")
        print(f"  captive_portal_other_fallback_urls = {settings.other_fallback_urls}")
        print(f"  captive_portal_mode = {int(settings.mode)} ({settings.mode.name})")
        return 0

    logs_dir = resolve_logs_dir(cfg)
    logs_dir.mkdir(parents=True, exist_ok=True)
    export_cfg = cfg.get("export", {}) or {}
    results_workbook = logs_dir / "results.xlsx" if export_cfg.get("workbook", True) else None
    conn_cfg = cfg.get("connectivity", {}) or {}

    adb = adb_from_config(cfg, args.serial)
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    logger = RunLogger(logs_dir / run_id, results_workbook=results_workbook)
    logger.set_meta(run_id=run_id, command="apply", device_serial=adb.serial, requested_id=str(args.profile_id))

    status = "success"
    err: str | None = None
    try:
        run_apply_profile(
            adb=adb,
            logger=logger,
            profile_id=args.profile_id,
            is_restricted=gate_from_config(adb, cfg),
            namespace=str(conn_cfg.get("namespace", "global")),
            verify=bool(conn_cfg.get("verify_after_apply", True)) and not args.no_verify,
        )
    except PermissionError as exc:
        status = "restricted"
        err = str(exc)
    except Exception as exc:
        status = "error"
        err = str(exc)

    out = logger.write(status=status, error=err)
    say(f"Apply {profile.id} ({profile.name}) status = {status}")
    say(f"Run saved: {out}")
    if err:
        say(f"Error: {err}")
        return 1
    return 0


def _cmd_resume(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    adb = adb_from_config(cfg, args.serial)
    controller = _controller(adb, cfg)
    if controller.availability_status() is not Availability.AVAILABLE:
        say("Connectivity check settings are restricted by device policy")
        return 1
    profile = controller.on_resume()
    if profile is None:
        say("Nothing to re-apply: stored settings match no known profile")
        return 0
    say(f"Re-applied {profile.id} ({profile.name})")
    return 0


def _cmd_revision(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    revision = revision_from_config(adb_from_config(cfg, args.serial), cfg)
    print(revision.summary())
    return 0


def _cmd_open_revision(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    revision = revision_from_config(adb_from_config(cfg, args.serial), cfg)
    if not revision.handle_click(revision.key):
        say("Revision page not opened (UI exerciser running)")
        return 1
    return 0


def _cmd_history(args: argparse.Namespace, cfg: dict[str, Any]) -> int:
    if args.limit <= 0:
        print("--limit must be > 0")
        return 1
    runs = load_runs(resolve_logs_dir(cfg), limit=args.limit)
    print(markdown_history(runs))
    return 0 if runs else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conncheck",
        description="Pick the captive-portal connectivity-check provider of an Android device over adb.",
    )
    parser.add_argument("--config", default="", help="Config file (default: $CONNCHECK_CONFIG or ~/conncheck-data/config.json)")
    parser.add_argument("--serial", default="", help="adb device serial (default: device_serial from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("profiles", help="List the known connectivity-check profiles")
    p.set_defaults(func=_cmd_profiles)

    p = sub.add_parser("status", help="Show the stored settings and the matching profile")
    p.set_defaults(func=_cmd_status)

    p = sub.add_parser("apply", help="Write a profile to the device")
    p.add_argument("profile_id", help="Profile id (unknown ids apply the standard profile)")
    p.add_argument("--dry-run", action="store_true", help="Print the values without touching a device")
    p.add_argument("--no-verify", action="store_true", help="Skip reading the values back")
    p.set_defaults(func=_cmd_apply)

    p = sub.add_parser("resume", help="Re-write the profile the device currently uses")
    p.set_defaults(func=_cmd_resume)

    p = sub.add_parser("revision", help="Print the firmware revision summary")
    p.set_defaults(func=_cmd_revision)

    p = sub.add_parser("open-revision", help="Open the firmware revision page in a browser on the device")
    p.set_defaults(func=_cmd_open_revision)

    p = sub.add_parser("history", help="Summarise previous apply runs")
    p.add_argument("--limit", type=int, default=20, help="How many latest runs to include (default: 20)")
    p.set_defaults(func=_cmd_history)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_or_create_config(resolve_config_path(args.config), build_default_config())
    try:
        return args.func(args, cfg)
    except (RuntimeError, PermissionError) as exc:
        say(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
