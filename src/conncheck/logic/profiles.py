"""Captive-portal connectivity-check profiles and the lookups over them."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class PortalMode(IntEnum):
    """Values of Settings.Global.captive_portal_mode."""

    IGNORE = 0
    PROMPT = 1
    AVOID = 2


@dataclass(frozen=True)
class Profile:
    id: int
    name: str
    https_url: str
    http_url: str
    fallback_url: str
    other_fallback_urls: str
    mode: PortalMode = PortalMode.PROMPT


@dataclass(frozen=True)
class PortalSettings:
    """The five values written to the device for one profile."""

    https_url: str
    http_url: str
    fallback_url: str
    other_fallback_urls: str
    mode: PortalMode


DISABLED_PROFILE_ID = 0
DEFAULT_PROFILE_ID = 11

# AOSP NetworkStack defaults
_STANDARD_HTTPS = "https://www.google.com/generate_204"
_STANDARD_HTTP = "http://connectivitycheck.gstatic.com/generate_204"
_STANDARD_FALLBACK = "http://www.google.com/gen_204"
_STANDARD_OTHER_FALLBACK = "http://play.googleapis.com/generate_204"


def _single_host(profile_id: int, name: str, https_url: str, http_url: str) -> Profile:
    # Providers with one probe endpoint reuse the HTTP URL for both fallbacks.
    return Profile(profile_id, name, https_url, http_url, http_url, http_url)


# Ids are persisted on devices; never renumber.
CATALOG: tuple[Profile, ...] = (
    Profile(
        DISABLED_PROFILE_ID,
        "Disabled",
        _STANDARD_HTTPS,
        _STANDARD_HTTP,
        _STANDARD_FALLBACK,
        _STANDARD_OTHER_FALLBACK,
        PortalMode.IGNORE,
    ),
    _single_host(1, "Amazon Fire OS", "https://fireoscaptiveportal.com/generate_204", "http://fireoscaptiveportal.com/generate_204"),
    _single_host(2, "Cloudflare", "https://cp.cloudflare.com", "http://cp.cloudflare.com"),
    _single_host(3, "DivestOS", "https://divestos.org/generate_204", "http://divestos.org/generate_204"),
    _single_host(
        4,
        "Huawei",
        "https://connectivitycheck.platform.hicloud.com/generate_204",
        "http://connectivitycheck.platform.hicloud.com/generate_204",
    ),
    _single_host(5, "Kuketz", "https://captiveportal.kuketz.de", "http://captiveportal.kuketz.de"),
    # Microsoft only publishes a plain HTTP endpoint.
    _single_host(
        6,
        "Microsoft",
        "http://edge-http.microsoft.com/captiveportal/generate_204",
        "http://edge-http.microsoft.com/captiveportal/generate_204",
    ),
    _single_host(7, "openSUSE", "https://conncheck.opensuse.org", "http://conncheck.opensuse.org"),
    _single_host(8, "Ubuntu", "https://connectivity-check.ubuntu.com", "http://connectivity-check.ubuntu.com"),
    _single_host(9, "Xiaomi", "https://connect.rom.miui.com/generate_204", "http://connect.rom.miui.com/generate_204"),
    Profile(
        10,
        "GrapheneOS",
        "https://connectivitycheck.grapheneos.network/generate_204",
        "http://connectivitycheck.grapheneos.network/generate_204",
        "http://grapheneos.online/gen_204",
        "http://grapheneos.online/generate_204",
    ),
    Profile(
        DEFAULT_PROFILE_ID,
        "Standard (Google)",
        _STANDARD_HTTPS,
        _STANDARD_HTTP,
        _STANDARD_FALLBACK,
        _STANDARD_OTHER_FALLBACK,
    ),
)

_BY_ID: dict[int, Profile] = {p.id: p for p in CATALOG}


def _coerce_id(value: int | str | None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def resolve_by_id(profile_id: int | str | None) -> Profile:
    """Return the profile for `profile_id`, or the standard profile when unknown.

    Accepts the string ids carried by selection lists and command lines;
    anything that does not parse as an integer is treated as unknown.
    """
    key = _coerce_id(profile_id)
    if key is None:
        return _BY_ID[DEFAULT_PROFILE_ID]
    return _BY_ID.get(key, _BY_ID[DEFAULT_PROFILE_ID])


def resolve_by_http_url(url: str | None) -> int | None:
    """Map a stored HTTP probe URL back to a profile id.

    Returns None when the URL matches no enabled profile, meaning the caller
    keeps whatever selection it already has.
    """
    if url is None:
        return None
    for profile in CATALOG:
        if profile.mode is not PortalMode.PROMPT:
            continue
        if profile.http_url == url:
            return profile.id
    return None


def apply_profile(profile: Profile) -> PortalSettings:
    return PortalSettings(
        https_url=profile.https_url,
        http_url=profile.http_url,
        fallback_url=profile.fallback_url,
        other_fallback_urls=profile.other_fallback_urls,
        mode=profile.mode,
    )


def profile_choices() -> list[tuple[int, str]]:
    """(id, label) pairs in catalog order, for selection lists."""
    return [(p.id, p.name) for p in CATALOG]


def step_choice(current: int | None, delta: int) -> int:
    """Move `delta` places through the catalog order, wrapping at both ends.

    An id outside the catalog (nothing selected yet) lands on the first entry
    when moving forward and on the last when moving back.
    """
    ids = [p.id for p in CATALOG]
    if current not in ids:
        return ids[0] if delta > 0 else ids[-1]
    return ids[(ids.index(current) + delta) % len(ids)]
