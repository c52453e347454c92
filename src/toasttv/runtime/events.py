"""
In-process event broadcaster for UI synchronisation.

Subscribers are plain callables receiving one event dict. Event dicts use
camelCase keys because they are forwarded unchanged to browser clients:

    {"type": "trackStart", "trackId": 3, "filename": "show.mp4",
     "duration": 600, "queue": [{"id": 4, "filename": "...", "isInterlude": False}]}
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Iterable

from toasttv.domain.entities import MediaItem

EventCallback = Callable[[dict[str, Any]], None]

_logger = logging.getLogger(__name__)


def queue_snapshot(items: Iterable[MediaItem]) -> list[dict[str, Any]]:
    """Serialize upcoming items the way UI events carry them."""
    return [{"id": item.id, "filename": item.filename, "isInterlude": item.is_interlude} for item in items]


class EventBroadcaster:
    """EventSink that fans events out to registered callbacks."""

    def __init__(self) -> None:
        self._subscribers: list[EventCallback] = []
        self._lock = Lock()
        self._last_playing_state: bool | None = None

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def broadcast(self, event: dict[str, Any]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        failed: list[EventCallback] = []
        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                _logger.warning("Dropping event subscriber after error: %s", e)
                failed.append(callback)

        if failed:
            with self._lock:
                self._subscribers = [cb for cb in self._subscribers if cb not in failed]

    def broadcast_playing_state(self, is_playing: bool) -> None:
        """Emit playing/paused only when the state actually changed."""
        if self._last_playing_state == is_playing:
            return
        self._last_playing_state = is_playing
        self.broadcast({"type": "playing" if is_playing else "paused", "isPlaying": is_playing})

    def reset_playing_state(self) -> None:
        self._last_playing_state = None
