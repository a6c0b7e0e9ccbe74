"""Push-based fix delivery from the device location subsystem.

Device adapters call ``LocationFeed.push`` for every fix they acquire. The
trip lifecycle subscribes with ``watch`` while a trip is in flight and
cancels the returned handle when the trip ends.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from geo.fix import Fix

logger = logging.getLogger(__name__)

FixCallback = Callable[[Fix], None]


class LocationWatch(Protocol):
    """Handle for an active fix subscription."""

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class FixSource(Protocol):
    """Anything that can deliver fixes to a callback."""

    @property
    def latest_fix(self) -> Fix | None: ...

    def watch(self, callback: FixCallback) -> LocationWatch: ...


class FeedWatch:
    """Subscription to a LocationFeed. Cancelling twice is harmless."""

    def __init__(self, feed: "LocationFeed", callback: FixCallback) -> None:
        self._feed = feed
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._remove(self)

    def deliver(self, fix: Fix) -> None:
        if self._active:
            self._callback(fix)


class LocationFeed:
    """Device fix stream. Remembers the most recent fix for start checks."""

    def __init__(self) -> None:
        self._watches: list[FeedWatch] = []
        self._latest_fix: Fix | None = None

    @property
    def latest_fix(self) -> Fix | None:
        return self._latest_fix

    @property
    def watcher_count(self) -> int:
        return len(self._watches)

    def watch(self, callback: FixCallback) -> FeedWatch:
        handle = FeedWatch(self, callback)
        self._watches.append(handle)
        return handle

    def push(self, fix: Fix) -> None:
        """Record a new device fix and deliver it to every active watch."""
        self._latest_fix = fix
        for handle in list(self._watches):
            handle.deliver(fix)

    def _remove(self, handle: FeedWatch) -> None:
        try:
            self._watches.remove(handle)
        except ValueError:
            logger.debug("Watch already detached from feed")
