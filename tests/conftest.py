"""Shared test fixtures for the conncheck test suite."""

import shlex
import sys
from pathlib import Path

import pytest

# Ensure conncheck is importable from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conncheck.logic.adb import Adb, CommandResult
from conncheck.logic.settings_store import InMemorySettingsStore

CHROME_QUERY_OUTPUT = (
    "1 activities found:\n"
    "  Activity #0:\n"
    "    priority=0 preferredOrder=0 match=0x208000 specificIndex=-1 isDefault=true\n"
    "    com.android.chrome/com.google.android.apps.chrome.IntentDispatcher"
)


def dumpsys_user(policy=None, users=(0,), base=("no_install_unknown_sources",)):
    """Render `dumpsys user` output; `policy` maps user id to admin-enforced restrictions."""
    policy = policy or {}
    lines = ["Users:"]
    for user_id in users:
        lines.append(f"  UserInfo{{{user_id}:User {user_id}:c13}} running")
        lines.append("    Restrictions:")
        lines.extend(f"      {name}" for name in base)
        lines.append("    Device policy global restrictions:")
        lines.append("      null")
        lines.append("    Device policy local restrictions:")
        lines.extend(f"      {name}" for name in policy.get(user_id, ["null"]))
        lines.append("    Effective restrictions:")
        lines.extend(f"      {name}" for name in [*base, *policy.get(user_id, [])])
    lines.append("  Device owner id:-10000")
    return "\n".join(lines) + "\n"


class FakeAdb(Adb):
    """Adb double that emulates the shell commands conncheck issues."""

    def __init__(self, serial: str = "") -> None:
        super().__init__(serial=serial)
        self.settings: dict = {}
        self.props: dict = {}
        self.restrictions_output = dumpsys_user()
        self.current_user_output = "0"
        self.activities_output = CHROME_QUERY_OUTPUT
        self.monkey_pid = ""
        self.failing = set()
        self.ignored_keys = set()
        self.calls = []
        self.opened = []

    def _run(self, args, timeout_s: float = 30.0) -> CommandResult:
        cmd = self._base() + list(args)
        self.calls.append(list(args))
        if args[0] != "shell":
            if args[0] in self.failing:
                return CommandResult(cmd, 1, "", "boom")
            return CommandResult(cmd, 0, "List of devices attached" if args[0] == "devices" else "", "")

        tokens = shlex.split(args[1])
        if tokens[0] in self.failing or " ".join(tokens[:2]) in self.failing:
            return CommandResult(cmd, 1, "", f"{tokens[0]}: boom")
        if tokens[:2] == ["settings", "get"]:
            return CommandResult(cmd, 0, self.settings.get(tokens[3], "null"), "")
        if tokens[:2] == ["settings", "put"]:
            if tokens[3] not in self.ignored_keys:
                self.settings[tokens[3]] = tokens[4]
            return CommandResult(cmd, 0, "", "")
        if tokens[0] == "getprop":
            return CommandResult(cmd, 0, self.props.get(tokens[1], ""), "")
        if tokens[:2] == ["cmd", "package"]:
            return CommandResult(cmd, 0, self.activities_output, "")
        if tokens[:2] == ["am", "get-current-user"]:
            return CommandResult(cmd, 0, self.current_user_output, "")
        if tokens[:2] == ["am", "start"]:
            self.opened.append(tokens[-1])
            return CommandResult(cmd, 0, "Starting: Intent { act=android.intent.action.VIEW }", "")
        if tokens[:2] == ["dumpsys", "user"]:
            return CommandResult(cmd, 0, self.restrictions_output, "")
        if tokens[0] == "pidof":
            if self.monkey_pid:
                return CommandResult(cmd, 0, self.monkey_pid, "")
            return CommandResult(cmd, 1, "", "")
        return CommandResult(cmd, 0, "", "")

    def shell_commands(self):
        return [call[1] for call in self.calls if call[0] == "shell"]


@pytest.fixture
def fake_adb():
    return FakeAdb(serial="emulator-5554")


@pytest.fixture
def memory_store():
    return InMemorySettingsStore()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the default data dir at a temporary folder."""
    monkeypatch.setenv("CONNCHECK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("CONNCHECK_CONFIG", raising=False)
    return tmp_path / "data"
