"""Small ADB wrapper used to read and write device settings and properties."""
from __future__ import annotations

import re
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

_RESTRICTION_RE = re.compile(r"\bno_[a-z_]+\b")
_USER_RE = re.compile(r"UserInfo\{(\d+):")
_POLICY_SECTIONS = ("Device policy global restrictions", "Device policy local restrictions")


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def settings_value(output: str) -> str | None:
    """Normalise `settings get` output; the tool prints `null` for unset keys."""
    value = output.strip()
    if value in {"", "null"}:
        return None
    return value


class Adb:
    def __init__(self, serial: str = "", adb_bin: str = "adb") -> None:
        self.serial = serial.strip()
        self.adb_bin = adb_bin

    def _base(self) -> list[str]:
        cmd = [self.adb_bin]
        if self.serial:
            cmd.extend(["-s", self.serial])
        return cmd

    def _run(self, args: Sequence[str], timeout_s: float = 30.0) -> CommandResult:
        cmd = self._base() + list(args)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout_s,
            )
            return CommandResult(
                args=cmd,
                returncode=proc.returncode,
                stdout=proc.stdout.strip(),
                stderr=proc.stderr.strip(),
            )
        except FileNotFoundError:
            return CommandResult(args=cmd, returncode=127, stdout="", stderr=f"{self.adb_bin}: command not found")
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                args=cmd,
                returncode=124,
                stdout=(exc.stdout or "").strip() if isinstance(exc.stdout, str) else "",
                stderr=(exc.stderr or "command timed out").strip() if isinstance(exc.stderr, str) else "command timed out",
            )

    def devices(self) -> CommandResult:
        return self._run(["devices", "-l"], timeout_s=10.0)

    def wait_for_device(self, timeout_s: float = 30.0) -> CommandResult:
        return self._run(["wait-for-device"], timeout_s=timeout_s)

    def shell(self, command: str, timeout_s: float = 30.0) -> CommandResult:
        return self._run(["shell", command], timeout_s=timeout_s)

    def settings_get(self, namespace: str, key: str) -> CommandResult:
        return self.shell(f"settings get {shlex.quote(namespace)} {shlex.quote(key)}", timeout_s=10.0)

    def settings_put(self, namespace: str, key: str, value: str) -> CommandResult:
        return self.shell(
            f"settings put {shlex.quote(namespace)} {shlex.quote(key)} {shlex.quote(value)}",
            timeout_s=10.0,
        )

    def getprop(self, name: str) -> CommandResult:
        return self.shell(f"getprop {shlex.quote(name)}", timeout_s=10.0)

    def query_view_activities(self, url: str) -> CommandResult:
        safe_url = shlex.quote(url)
        return self.shell(
            f"cmd package query-activities --brief -a android.intent.action.VIEW -d {safe_url}",
            timeout_s=20.0,
        )

    def open_url(self, url: str) -> CommandResult:
        safe_url = shlex.quote(url)
        return self.shell(f"am start -a android.intent.action.VIEW -d {safe_url}", timeout_s=20.0)

    def user_restrictions(self) -> CommandResult:
        return self.shell("dumpsys user", timeout_s=20.0)

    def current_user(self) -> CommandResult:
        return self.shell("am get-current-user", timeout_s=10.0)

    def monkey_running(self) -> CommandResult:
        # pidof exits non-zero when no process matches.
        return self.shell("pidof com.android.commands.monkey", timeout_s=10.0)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def parse_restrictions(dumpsys_output: str, user_id: int) -> set[str]:
    """Collect admin-enforced restriction keys for one user from `dumpsys user`.

    Only the `Device policy global/local restrictions` sections inside the
    `UserInfo{<user_id>:...}` block count; base restrictions and other users
    (work profiles, secondary users) are ignored.
    """
    found: set[str] = set()
    in_user = False
    user_indent = 0
    section_indent: int | None = None
    for line in dumpsys_output.splitlines():
        if not line.strip():
            continue
        indent = _indent(line)
        match = _USER_RE.search(line)
        if match:
            in_user = int(match.group(1)) == user_id
            user_indent = indent
            section_indent = None
            continue
        if not in_user:
            continue
        if indent <= user_indent:
            in_user = False
            section_indent = None
            continue
        text = line.strip()
        if section_indent is not None and indent <= section_indent:
            section_indent = None
        if section_indent is None:
            if text.startswith(_POLICY_SECTIONS):
                section_indent = indent
            continue
        found.update(_RESTRICTION_RE.findall(text))
    return found


def parse_user_id(output: str) -> int | None:
    text = output.strip()
    return int(text) if text.isdigit() else None


def parse_activity_count(query_output: str) -> int:
    """Count resolved activities in `cmd package query-activities --brief` output."""
    text = query_output.strip()
    if not text or text.lower().startswith("no activities found"):
        return 0
    count = 0
    for line in text.splitlines():
        line = line.strip()
        # --brief prints one "package/.Activity" component per match after a priority line.
        if "/" in line and " " not in line:
            count += 1
    return count
