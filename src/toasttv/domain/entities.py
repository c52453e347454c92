"""
Value objects shared by the scheduler, the playback loop and the players.

MediaItem is owned by the external media index; the core treats it as
read-only. PlaybackStatus is a point-in-time snapshot produced on every
poll and never cached beyond one loop iteration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MediaType(str, Enum):
    """Role a media file plays in the rotation."""

    VIDEO = "video"
    INTERLUDE = "interlude"
    INTRO = "intro"
    OUTRO = "outro"
    OFFAIR = "offair"


SPECIAL_MEDIA_TYPES = frozenset({MediaType.INTRO, MediaType.OUTRO})
NON_ROTATION_TYPES = frozenset(
    {MediaType.INTERLUDE, MediaType.INTRO, MediaType.OUTRO, MediaType.OFFAIR}
)


@dataclass(frozen=True)
class MediaItem:
    """An indexed media file.

    ``date_start``/``date_end`` are optional ``MM-DD`` strings bounding the
    seasonal window in which an interlude may be scheduled.
    """

    id: int
    path: str
    filename: str
    duration_seconds: float
    media_type: MediaType = MediaType.VIDEO
    date_start: str | None = None
    date_end: str | None = None

    @property
    def is_interlude(self) -> bool:
        return self.media_type is MediaType.INTERLUDE

    @property
    def is_regular_video(self) -> bool:
        return self.media_type is MediaType.VIDEO

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MediaItem:
        """Deserialize from a catalog entry."""
        return cls(
            id=int(data["id"]),
            path=data["path"],
            filename=data.get("filename") or data["path"].rsplit("/", 1)[-1],
            duration_seconds=float(data.get("duration_seconds", 0) or 0),
            media_type=MediaType(data.get("media_type", MediaType.VIDEO.value)),
            date_start=data.get("date_start"),
            date_end=data.get("date_end"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "filename": self.filename,
            "duration_seconds": self.duration_seconds,
            "media_type": self.media_type.value,
            "date_start": self.date_start,
            "date_end": self.date_end,
        }


class PlayerState(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class PlaybackStatus:
    """Snapshot of what the external player reports right now."""

    is_playing: bool
    state: PlayerState
    current_file: str | None
    position_seconds: int
    duration_seconds: int

    @classmethod
    def stopped(cls) -> PlaybackStatus:
        return cls(
            is_playing=False,
            state=PlayerState.STOPPED,
            current_file=None,
            position_seconds=0,
            duration_seconds=0,
        )

    @property
    def is_paused(self) -> bool:
        return self.state is PlayerState.PAUSED
