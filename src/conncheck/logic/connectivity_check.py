"""Controller for the connectivity-check provider selection.

Follows the preference-controller lifecycle of the Settings app: the
selection shown to the user is derived from what the device currently
stores, and every change (or resume) writes the whole profile back.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable

from conncheck.logic.profiles import (
    DISABLED_PROFILE_ID,
    PortalMode,
    Profile,
    apply_profile,
    resolve_by_http_url,
    resolve_by_id,
)
from conncheck.logic.settings_store import (
    CAPTIVE_PORTAL_FALLBACK_URL,
    CAPTIVE_PORTAL_HTTP_URL,
    CAPTIVE_PORTAL_HTTPS_URL,
    CAPTIVE_PORTAL_MODE,
    CAPTIVE_PORTAL_OTHER_FALLBACK_URLS,
    SettingsStore,
)

PREFERENCE_KEY = "connectivity_check_settings"


class Availability(Enum):
    AVAILABLE = "available"
    DISABLED_FOR_USER = "disabled_for_user"


class ConnectivityCheckController:
    def __init__(self, store: SettingsStore, is_restricted: Callable[[], bool] = lambda: False) -> None:
        self.store = store
        self.is_restricted = is_restricted
        self.value: int | None = None

    @property
    def preference_key(self) -> str:
        return PREFERENCE_KEY

    def availability_status(self) -> Availability:
        if self.is_restricted():
            return Availability.DISABLED_FOR_USER
        return Availability.AVAILABLE

    def display(self) -> int | None:
        return self.update_state()

    def update_state(self) -> int | None:
        """Derive the selected profile id from the stored settings.

        An unrecognised HTTP URL keeps the previous selection.
        """
        mode = self.store.read_int(CAPTIVE_PORTAL_MODE, int(PortalMode.PROMPT))
        if mode == PortalMode.IGNORE:
            self.value = DISABLED_PROFILE_ID
            return self.value

        matched = resolve_by_http_url(self.store.read_string(CAPTIVE_PORTAL_HTTP_URL))
        if matched is not None:
            self.value = matched
        return self.value

    def on_resume(self) -> Profile | None:
        self.update_state()
        if self.value is None or self.is_restricted():
            return None
        return self.set_captive_portal_urls(self.value)

    def on_preference_change(self, key: str, value: int | str) -> bool:
        if key != PREFERENCE_KEY:
            return False
        profile = self.set_captive_portal_urls(value)
        self.value = profile.id
        return True

    def set_captive_portal_urls(self, profile_id: int | str) -> Profile:
        if self.is_restricted():
            raise PermissionError("connectivity check settings are restricted by device policy")
        profile = resolve_by_id(profile_id)
        settings = apply_profile(profile)
        self.store.write_string(CAPTIVE_PORTAL_HTTP_URL, settings.http_url)
        self.store.write_string(CAPTIVE_PORTAL_HTTPS_URL, settings.https_url)
        self.store.write_string(CAPTIVE_PORTAL_FALLBACK_URL, settings.fallback_url)
        self.store.write_string(CAPTIVE_PORTAL_OTHER_FALLBACK_URLS, settings.other_fallback_urls)
        self.store.write_int(CAPTIVE_PORTAL_MODE, int(settings.mode))
        return profile
