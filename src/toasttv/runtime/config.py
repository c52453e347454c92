"""
Runtime configuration data structures and protocols.

Defines AppConfig (the UI-editable settings the scheduler and playback
loop read), the RuntimeConfigStore protocol for accessing it, and
ConfigService, which validates edits before they reach the store.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Protocol

from toasttv.domain.entities import MediaItem, MediaType
from toasttv.domain.interfaces import MediaRepository
from toasttv.infra.exceptions import ValidationError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSettings:
    limit_minutes: int = 30  # 0 = unlimited
    reset_hour: int = 6
    intro_video_id: int | None = None
    outro_video_id: int | None = None
    off_air_asset_id: int | None = None


@dataclass(frozen=True)
class InterludeSettings:
    enabled: bool = True
    frequency: int = 1  # regular videos between interludes


@dataclass(frozen=True)
class LogoConfig:
    """
    Channel-logo overlay settings.

    ``position`` is the grid code used by the admin UI (0 = centre,
    5 = top-left, 6 = top-right, 9 = bottom-left, 10 = bottom-right, ...);
    ``opacity`` is 0-255.
    """
    enabled: bool = True
    image_path: str | None = "./data/logo.png"
    opacity: int = 128
    position: int = 6
    x: int = 8
    y: int = 8


@dataclass(frozen=True)
class AppConfig:
    session: SessionSettings = field(default_factory=SessionSettings)
    interlude: InterludeSettings = field(default_factory=InterludeSettings)
    logo: LogoConfig = field(default_factory=LogoConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """
        Deserialize from dict (e.g. loaded from JSON).

        Missing sections and keys fall back to defaults; unknown keys are
        ignored so older config files keep loading.
        """
        return cls(
            session=_build(SessionSettings, data.get("session")),
            interlude=_build(InterludeSettings, data.get("interlude")),
            logo=_build(LogoConfig, data.get("logo")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        """
        Check the values the scheduler and session clock depend on.

        Raises:
            ValidationError: If any value is out of range
        """
        if self.session.limit_minutes < 0:
            raise ValidationError("Session limit cannot be negative")
        if not 0 <= self.session.reset_hour <= 23:
            raise ValidationError(f"Reset hour must be between 0 and 23, got {self.session.reset_hour}")
        if self.interlude.frequency < 1:
            raise ValidationError("Interlude frequency must be at least 1")
        if not 0 <= self.logo.opacity <= 255:
            raise ValidationError(f"Logo opacity must be between 0 and 255, got {self.logo.opacity}")


def _build(kind: type, data: dict[str, Any] | None) -> Any:
    if not data:
        return kind()
    known = {name for name in kind.__dataclass_fields__}
    return kind(**{k: v for k, v in data.items() if k in known})


def merge_config(base: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``partial`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in partial.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


class RuntimeConfigStore(Protocol):
    """Protocol for reading and updating runtime configuration."""

    def get(self) -> AppConfig:
        """Return the current configuration snapshot."""
        ...

    def update(self, partial: dict[str, Any]) -> None:
        """
        Deep-merge a partial configuration and persist it.

        Args:
            partial: Nested dict shaped like ``AppConfig.to_dict()``
        """
        ...


# Filename fragments used to auto-configure special media on first start.
INTRO_FILENAME_HINTS = ("_intro", "penny_and_chip_splash")
OUTRO_FILENAME_HINTS = ("_outro",)
OFF_AIR_FILENAME_HINTS = ("bedtime",)


class ConfigService:
    """Business rules around runtime configuration edits."""

    def __init__(self, store: RuntimeConfigStore) -> None:
        self._store = store

    def get(self) -> AppConfig:
        return self._store.get()

    def update(self, partial: dict[str, Any]) -> None:
        """Validate the merged result, then hand the partial to the store."""
        AppConfig.from_dict(merge_config(self._store.get().to_dict(), partial)).validate()
        self._store.update(partial)

    def set_session_limit(self, minutes: int) -> None:
        self.update({"session": {"limit_minutes": minutes}})

    def set_reset_hour(self, hour: int) -> None:
        self.update({"session": {"reset_hour": hour}})

    def set_interlude_config(self, enabled: bool, frequency: int) -> None:
        self.update({"interlude": {"enabled": enabled, "frequency": frequency}})

    def set_logo_config(self, image_path: str, opacity: int, position: int) -> None:
        self.update(
            {"logo": {"image_path": image_path, "opacity": opacity, "position": position, "enabled": True}}
        )

    def disable_logo(self) -> None:
        self._store.update({"logo": {"enabled": False}})

    def discover_special_media(
        self,
        repository: MediaRepository,
        all_media: Iterable[MediaItem] | None = None,
    ) -> None:
        """
        Fill in unset intro/outro/off-air ids.

        Items typed intro/outro in the index win; otherwise filenames are
        matched against well-known fragments.
        """
        media = list(all_media) if all_media is not None else repository.get_all()
        current = self._store.get().session
        updates: dict[str, Any] = {}

        if not current.intro_video_id:
            intro = repository.get_by_type(MediaType.INTRO) or _find_by_hint(media, INTRO_FILENAME_HINTS)
            if intro:
                updates["intro_video_id"] = intro.id
                _logger.info("Auto-configured intro video: %s", intro.filename)

        if not current.outro_video_id:
            outro = repository.get_by_type(MediaType.OUTRO) or _find_by_hint(media, OUTRO_FILENAME_HINTS)
            if outro:
                updates["outro_video_id"] = outro.id
                _logger.info("Auto-configured outro video: %s", outro.filename)

        if not current.off_air_asset_id:
            off_air = next((m for m in media if m.media_type is MediaType.OFFAIR), None) or _find_by_hint(
                media, OFF_AIR_FILENAME_HINTS
            )
            if off_air:
                updates["off_air_asset_id"] = off_air.id
                _logger.info("Auto-configured off-air screen: %s", off_air.filename)

        if updates:
            self._store.update({"session": updates})


def _find_by_hint(media: Iterable[MediaItem], hints: tuple[str, ...]) -> MediaItem | None:
    for item in media:
        if any(hint in item.filename for hint in hints):
            return item
    return None
