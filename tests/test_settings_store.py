"""Tests for conncheck.logic.settings_store"""

import pytest

from conncheck.logic.runlog import RunLogger
from conncheck.logic.settings_store import (
    CAPTIVE_PORTAL_HTTP_URL,
    CAPTIVE_PORTAL_MODE,
    PORTAL_KEYS,
    AdbSettingsStore,
    InMemorySettingsStore,
)


class TestInMemorySettingsStore:
    def test_unset_values(self):
        store = InMemorySettingsStore()
        assert store.read_string(CAPTIVE_PORTAL_HTTP_URL) is None
        assert store.read_int(CAPTIVE_PORTAL_MODE, 1) == 1

    def test_ints_are_stored_as_strings(self):
        store = InMemorySettingsStore()
        store.write_int(CAPTIVE_PORTAL_MODE, 0)
        assert store.values[CAPTIVE_PORTAL_MODE] == "0"
        assert store.read_int(CAPTIVE_PORTAL_MODE, 1) == 0

    def test_garbage_int_reads_default(self):
        store = InMemorySettingsStore({CAPTIVE_PORTAL_MODE: "prompt"})
        assert store.read_int(CAPTIVE_PORTAL_MODE, 1) == 1

    def test_writes_are_recorded_in_order(self):
        store = InMemorySettingsStore()
        store.write_string("a", "1")
        store.write_int("b", 2)
        assert store.writes == [("a", "1"), ("b", "2")]


class TestAdbSettingsStore:
    def test_get_uses_settings_command(self, fake_adb):
        fake_adb.settings[CAPTIVE_PORTAL_HTTP_URL] = "http://cp.cloudflare.com"
        store = AdbSettingsStore(fake_adb)
        assert store.read_string(CAPTIVE_PORTAL_HTTP_URL) == "http://cp.cloudflare.com"
        assert fake_adb.shell_commands() == ["settings get global captive_portal_http_url"]

    def test_null_reads_as_unset(self, fake_adb):
        store = AdbSettingsStore(fake_adb)
        assert store.read_string(CAPTIVE_PORTAL_HTTP_URL) is None
        assert store.read_int(CAPTIVE_PORTAL_MODE, 1) == 1

    def test_put_quotes_value(self, fake_adb):
        store = AdbSettingsStore(fake_adb)
        store.write_string(CAPTIVE_PORTAL_HTTP_URL, "http://example.com/a b")
        assert fake_adb.settings[CAPTIVE_PORTAL_HTTP_URL] == "http://example.com/a b"
        assert fake_adb.shell_commands() == [
            "settings put global captive_portal_http_url 'http://example.com/a b'"
        ]

    def test_write_int(self, fake_adb):
        AdbSettingsStore(fake_adb).write_int(CAPTIVE_PORTAL_MODE, 0)
        assert fake_adb.settings[CAPTIVE_PORTAL_MODE] == "0"

    def test_namespace_is_configurable(self, fake_adb):
        AdbSettingsStore(fake_adb, namespace="secure").read_string("x")
        assert fake_adb.shell_commands() == ["settings get secure x"]

    def test_failed_put_raises(self, fake_adb):
        fake_adb.failing.add("settings put")
        store = AdbSettingsStore(fake_adb)
        with pytest.raises(RuntimeError, match="put_captive_portal_mode failed"):
            store.write_int(CAPTIVE_PORTAL_MODE, 1)

    def test_logger_records_steps(self, fake_adb, tmp_path):
        logger = RunLogger(tmp_path / "run")
        store = AdbSettingsStore(fake_adb, logger=logger)
        store.write_string(CAPTIVE_PORTAL_HTTP_URL, "http://cp.cloudflare.com")
        store.read_string(CAPTIVE_PORTAL_HTTP_URL)
        names = [step["name"] for step in logger.steps]
        assert names == ["put_captive_portal_http_url", "get_captive_portal_http_url"]
        assert all(step["ok"] for step in logger.steps)

    def test_snapshot_reads_all_keys(self, fake_adb):
        fake_adb.settings[CAPTIVE_PORTAL_MODE] = "1"
        snapshot = AdbSettingsStore(fake_adb).snapshot()
        assert set(snapshot) == set(PORTAL_KEYS)
        assert snapshot[CAPTIVE_PORTAL_MODE] == "1"
        assert snapshot[CAPTIVE_PORTAL_HTTP_URL] is None
