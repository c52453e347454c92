"""Wall-clock abstractions used by the session and scheduling logic.

The session clock and the seasonal filter both need "now" in local time:
quota days roll over at a local hour and seasonal windows are local
calendar dates. Everything that reads the time goes through a
:class:`Clock` so tests can pin it.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from threading import Lock
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol implemented by clock providers."""

    def now(self) -> datetime:
        """Return the current local time as a naive datetime."""

    def today(self) -> str:
        """Return the current local date as ``YYYY-MM-DD``."""


class SystemClock:
    """Clock backed by the host's local time."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> str:
        return self.now().date().isoformat()


class SteppedClock:
    """Deterministic clock used for tests and previews.

    Time advances only when :meth:`advance` or :meth:`set` is called.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2025, 1, 1, 12, 0, 0)
        self._lock = Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._current

    def today(self) -> str:
        return self.now().date().isoformat()

    def set(self, when: datetime) -> None:
        with self._lock:
            self._current = when

    def advance(self, seconds: float) -> datetime:
        """Advance the clock by ``seconds`` (must be non-negative)."""
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        with self._lock:
            self._current += timedelta(seconds=seconds)
            return self._current
