"""A small condition-based box for coordinating events between threads."""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable


class EventBox:
    """Holds pending events and wakes waiters when watched events arrive."""

    def __init__(self) -> None:
        self._events: dict[Hashable, Any] = {}
        self._cond = threading.Condition()
        self._ignore: set[Hashable] = set()

    def wait(self, callback: Callable[[dict[Hashable, Any]], None]) -> None:
        """Block until signalled if empty, then call ``callback`` with the events.

        The callback runs under the lock and may mutate the dict (e.g. ``clear()``).
        """
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Record ``event`` with ``value`` and notify waiters unless ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        """Return True if ``event`` is currently set."""
        with self._cond:
            return event in self._events

    def watch(self, *events: Hashable) -> None:
        """Remove events from the ignore list."""
        with self._cond:
            self._ignore.difference_update(events)

    def unwatch(self, *events: Hashable) -> None:
        """Add events to the ignore list."""
        with self._cond:
            self._ignore.update(events)

    def wait_for(self, event: Hashable) -> None:
        """Block until ``event`` has been set."""
        found = False

        def _check(events: dict[Hashable, Any]) -> None:
            nonlocal found
            found = event in events

        while not found:
            self.wait(_check)