"""Logged sequence that writes one connectivity-check profile to a device."""
from __future__ import annotations

from typing import Callable

from conncheck.logic.adb import Adb
from conncheck.logic.connectivity_check import Availability, ConnectivityCheckController
from conncheck.logic.profiles import Profile, resolve_by_id
from conncheck.logic.runlog import RunLogger, run_step
from conncheck.logic.settings_store import CAPTIVE_PORTAL_HTTP_URL, CAPTIVE_PORTAL_MODE, AdbSettingsStore


def _verify(store: AdbSettingsStore, logger: RunLogger, profile: Profile) -> None:
    started = logger.begin_step("verify_settings")
    stored_url = store.read_string(CAPTIVE_PORTAL_HTTP_URL)
    stored_mode = store.read_int(CAPTIVE_PORTAL_MODE, -1)
    details = {"http_url": stored_url, "mode": stored_mode}
    if stored_url == profile.http_url and stored_mode == int(profile.mode):
        logger.end_step(name="verify_settings", started_perf=started, ok=True, details=details)
        return
    logger.end_step(
        name="verify_settings",
        started_perf=started,
        ok=False,
        details=details,
        error="device did not keep the written values",
    )
    raise RuntimeError(
        f"verify_settings failed: expected {profile.http_url!r}/{int(profile.mode)}, "
        f"device has {stored_url!r}/{stored_mode}"
    )


def run_apply_profile(
    adb: Adb,
    logger: RunLogger,
    profile_id: int | str,
    is_restricted: Callable[[], bool] = lambda: False,
    namespace: str = "global",
    verify: bool = True,
) -> Profile:
    """Write the profile for `profile_id` and log each step.

    Unknown ids apply the standard profile. Raises PermissionError when the
    device policy blocks the setting and RuntimeError when adb fails.
    """
    profile = resolve_by_id(profile_id)
    logger.set_meta(profile_id=profile.id, profile_name=profile.name, mode=profile.mode.name)

    run_step(logger, "adb_devices", adb.devices)
    run_step(logger, "wait_for_device", adb.wait_for_device)

    store = AdbSettingsStore(adb, namespace=namespace, logger=logger)
    controller = ConnectivityCheckController(store, is_restricted=is_restricted)

    started = logger.begin_step("check_restriction")
    try:
        availability = controller.availability_status()
    except RuntimeError as exc:
        logger.end_step(name="check_restriction", started_perf=started, ok=False, error=str(exc))
        raise
    logger.end_step(
        name="check_restriction",
        started_perf=started,
        ok=availability is Availability.AVAILABLE,
        details={"availability": availability.value},
    )
    if availability is not Availability.AVAILABLE:
        raise PermissionError("connectivity check settings are restricted by device policy")

    previous = controller.display()
    logger.set_meta(previous_profile_id=previous)

    controller.on_preference_change(controller.preference_key, profile.id)

    if verify:
        _verify(store, logger, profile)
    return profile
