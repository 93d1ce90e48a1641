"""Firmware revision entry: summary text plus a link to the release notes."""
from __future__ import annotations

from typing import Callable, Protocol

from conncheck.logic.connectivity_check import Availability
from conncheck.logic.runlog import say

REVISION_INT_PROP = "ro.remix.revision.int"
REVISION_STRINGS_PROP = "ro.remix.revision.strings"
REVISION_URL_PROP = "ro.remix.revision.url"
REVISION_KEY = "remix_revision"


class PropertySource(Protocol):
    def get(self, name: str) -> str: ...


class IntentLauncher(Protocol):
    def can_view(self, url: str) -> bool: ...

    def view(self, url: str) -> None: ...


class RevisionController:
    def __init__(
        self,
        props: PropertySource,
        launcher: IntentLauncher,
        key: str = REVISION_KEY,
        is_monkey_running: Callable[[], bool] = lambda: False,
        int_prop: str = REVISION_INT_PROP,
        strings_prop: str = REVISION_STRINGS_PROP,
        url_prop: str = REVISION_URL_PROP,
    ) -> None:
        self.props = props
        self.launcher = launcher
        self.key = key
        self.is_monkey_running = is_monkey_running
        self.int_prop = int_prop
        self.strings_prop = strings_prop
        # Read once; the property is read-only for the lifetime of a boot.
        self.url = props.get(url_prop)

    def availability_status(self) -> Availability:
        return Availability.AVAILABLE

    def summary(self) -> str:
        revision = self.props.get(self.int_prop)
        strings = self.props.get(self.strings_prop)
        return f"{revision} ({strings})"

    def handle_click(self, key: str) -> bool:
        """Open the revision URL in a browser on the device.

        Returns True when the click was consumed, even if nothing could
        handle the URL.
        """
        if key != self.key:
            return False
        if self.is_monkey_running():
            return False
        if not self.launcher.can_view(self.url):
            say(f"WARNING: no activity can view {self.url or '<empty url>'}; not launching")
            return True
        self.launcher.view(self.url)
        return True
