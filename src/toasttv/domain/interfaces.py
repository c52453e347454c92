"""Domain interfaces for the collaborators the playback core consumes."""

from __future__ import annotations

from typing import Any, Protocol

from .entities import MediaItem, MediaType


class MediaRepository(Protocol):
    """Read-only view of the media index.

    Writes happen only through the indexing collaborator, never from the
    playback core.
    """

    def get_all(self) -> list[MediaItem]:
        """Return every indexed item, sorted by filename."""
        ...

    def get_by_id(self, media_id: int) -> MediaItem | None:
        """Return a single item, or None if the id is unknown."""
        ...

    def get_interludes(self, current_date: str) -> list[MediaItem]:
        """
        Return interludes whose seasonal window includes the given date.

        Args:
            current_date: Date in ``YYYY-MM-DD`` form
        """
        ...

    def get_by_type(self, media_type: MediaType) -> MediaItem | None:
        """Return the singleton item of a type (intro/outro), if any."""
        ...


class EventSink(Protocol):
    """Push-only receiver for UI synchronisation events."""

    def broadcast(self, event: dict[str, Any]) -> None:
        ...

    def broadcast_playing_state(self, is_playing: bool) -> None:
        ...

    def reset_playing_state(self) -> None:
        ...
