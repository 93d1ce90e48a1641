"""Key-value stores for the captive-portal entries of Settings.Global."""
from __future__ import annotations

from typing import Protocol

from conncheck.logic.adb import Adb, settings_value
from conncheck.logic.runlog import RunLogger, run_step

CAPTIVE_PORTAL_MODE = "captive_portal_mode"
CAPTIVE_PORTAL_HTTPS_URL = "captive_portal_https_url"
CAPTIVE_PORTAL_HTTP_URL = "captive_portal_http_url"
CAPTIVE_PORTAL_FALLBACK_URL = "captive_portal_fallback_url"
CAPTIVE_PORTAL_OTHER_FALLBACK_URLS = "captive_portal_other_fallback_urls"

PORTAL_KEYS = (
    CAPTIVE_PORTAL_MODE,
    CAPTIVE_PORTAL_HTTPS_URL,
    CAPTIVE_PORTAL_HTTP_URL,
    CAPTIVE_PORTAL_FALLBACK_URL,
    CAPTIVE_PORTAL_OTHER_FALLBACK_URLS,
)


class SettingsStore(Protocol):
    def read_int(self, key: str, default: int) -> int: ...

    def read_string(self, key: str) -> str | None: ...

    def write_int(self, key: str, value: int) -> None: ...

    def write_string(self, key: str, value: str) -> None: ...


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


class InMemorySettingsStore:
    """Dict-backed store; values are kept as strings, like the settings provider."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def read_int(self, key: str, default: int) -> int:
        return _parse_int(self.values.get(key), default)

    def read_string(self, key: str) -> str | None:
        return self.values.get(key)

    def write_int(self, key: str, value: int) -> None:
        self.write_string(key, str(int(value)))

    def write_string(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes.append((key, value))


class AdbSettingsStore:
    """Settings store backed by `adb shell settings get|put`."""

    def __init__(self, adb: Adb, namespace: str = "global", logger: RunLogger | None = None) -> None:
        self.adb = adb
        self.namespace = namespace
        self.logger = logger

    def read_string(self, key: str) -> str | None:
        result = run_step(self.logger, f"get_{key}", lambda: self.adb.settings_get(self.namespace, key))
        return settings_value(result.stdout)

    def read_int(self, key: str, default: int) -> int:
        return _parse_int(self.read_string(key), default)

    def write_string(self, key: str, value: str) -> None:
        run_step(self.logger, f"put_{key}", lambda: self.adb.settings_put(self.namespace, key, value))

    def write_int(self, key: str, value: int) -> None:
        self.write_string(key, str(int(value)))

    def snapshot(self) -> dict[str, str | None]:
        return {key: self.read_string(key) for key in PORTAL_KEYS}
