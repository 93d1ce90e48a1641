"""Adapters from `Adb` to the collaborators the controllers expect."""
from __future__ import annotations

from typing import Any, Callable

from conncheck.logic.adb import Adb, parse_activity_count, parse_restrictions, parse_user_id
from conncheck.logic.revision import RevisionController
from conncheck.logic.runlog import RunLogger, run_step

DEFAULT_RESTRICTION = "no_config_private_dns"


class AdbPropertySource:
    def __init__(self, adb: Adb) -> None:
        self.adb = adb

    def get(self, name: str) -> str:
        result = self.adb.getprop(name)
        # Unset properties come back empty; a dead device reads the same way.
        return result.stdout.strip() if result.ok else ""


class AdbIntentLauncher:
    def __init__(self, adb: Adb, logger: RunLogger | None = None) -> None:
        self.adb = adb
        self.logger = logger

    def can_view(self, url: str) -> bool:
        if not url:
            return False
        result = run_step(self.logger, "query_view_activities", lambda: self.adb.query_view_activities(url))
        return parse_activity_count(result.stdout) > 0

    def view(self, url: str) -> None:
        run_step(self.logger, "open_url", lambda: self.adb.open_url(url))


def restriction_gate(
    adb: Adb,
    restriction: str = DEFAULT_RESTRICTION,
    user_id: int | None = None,
) -> Callable[[], bool]:
    """Build a check that is true while an admin enforces `restriction` on one user.

    `user_id` defaults to the device's current foreground user.
    """

    def _check() -> bool:
        target = user_id
        if target is None:
            current = run_step(None, "current_user", adb.current_user)
            target = parse_user_id(current.stdout)
            if target is None:
                raise RuntimeError(f"current_user failed: unexpected output {current.stdout!r}")
        result = run_step(None, "user_restrictions", adb.user_restrictions)
        return restriction in parse_restrictions(result.stdout, target)

    return _check


def monkey_gate(adb: Adb) -> Callable[[], bool]:
    def _check() -> bool:
        result = adb.monkey_running()
        return result.ok and bool(result.stdout.strip())

    return _check


def adb_from_config(cfg: dict[str, Any], serial: str = "") -> Adb:
    return Adb(serial=serial or cfg.get("device_serial", "") or "", adb_bin=cfg.get("adb_bin", "adb") or "adb")


def revision_from_config(adb: Adb, cfg: dict[str, Any], logger: RunLogger | None = None) -> RevisionController:
    rev_cfg = cfg.get("revision", {}) or {}
    kwargs = {name: str(rev_cfg[name]) for name in ("key", "int_prop", "strings_prop", "url_prop") if rev_cfg.get(name)}
    return RevisionController(
        AdbPropertySource(adb),
        AdbIntentLauncher(adb, logger=logger),
        is_monkey_running=monkey_gate(adb),
        **kwargs,
    )


def gate_from_config(adb: Adb, cfg: dict[str, Any]) -> Callable[[], bool]:
    conn_cfg = cfg.get("connectivity", {}) or {}
    user_id = conn_cfg.get("user_id")
    return restriction_gate(
        adb,
        str(conn_cfg.get("restriction") or DEFAULT_RESTRICTION),
        user_id=int(user_id) if user_id not in (None, "") else None,
    )
