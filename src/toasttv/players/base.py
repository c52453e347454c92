"""
Media player contract.

The playback core never decodes media itself; it drives an external player
process over that player's control socket. Two variants exist (mpv JSON IPC
and the VLC RC interface). The variant is picked once at composition time
through :func:`create_player`; callers only see :class:`MediaPlayer`.

Boundaries:
- A player IS allowed to: load, queue and control files, report status
- A player IS NOT allowed to: pick content, track sessions, decide transitions
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable

from toasttv.domain.entities import PlaybackStatus
from toasttv.infra.exceptions import PlayerConnectionError
from toasttv.runtime.config import LogoConfig


class PlayerKind(Enum):
    """Supported player control protocols"""

    MPV = "mpv"
    VLC = "vlc"


class MediaPlayer(ABC):
    """
    Base class for external-player control clients.

    Subclasses implement :meth:`_open_connection` for a single attempt; the
    bounded retry loop lives here so both variants back off identically.
    """

    def __init__(
        self,
        *,
        reconnect_attempts: int = 10,
        reconnect_delay_s: float = 2.0,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self.reconnect_attempts = reconnect_attempts
        self.reconnect_delay_s = reconnect_delay_s
        self._sleep = sleep_fn
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def connect(self, max_attempts: int | None = None) -> None:
        """
        Connect to the player, retrying with a fixed delay.

        Args:
            max_attempts: Override for the configured attempt count

        Raises:
            PlayerConnectionError: If every attempt failed
        """
        attempts = max_attempts or self.reconnect_attempts
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                self._open_connection()
                self._logger.info("Connected to player (attempt %d/%d)", attempt, attempts)
                return
            except (OSError, PlayerConnectionError) as e:
                last_error = e
                self._logger.debug("Player connection attempt %d/%d failed: %s", attempt, attempts, e)
                if attempt < attempts:
                    self._sleep(self.reconnect_delay_s)

        raise PlayerConnectionError(f"Failed to connect to player after {attempts} attempts: {last_error}")

    @abstractmethod
    def _open_connection(self) -> None:
        """Single connection attempt; raise OSError or PlayerConnectionError on failure."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    def play(self, path: str) -> None:
        """Replace current playback with ``path`` and start playing."""
        pass

    @abstractmethod
    def enqueue(self, path: str) -> None:
        """Append ``path`` to the player's native playlist (gapless pre-queue)."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def pause(self) -> None:
        """Toggle pause."""
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def next(self) -> None:
        pass

    @abstractmethod
    def set_loop(self, enabled: bool) -> None:
        """Enable or disable native playlist looping."""
        pass

    @abstractmethod
    def get_status(self) -> PlaybackStatus:
        pass

    @abstractmethod
    def update_logo(self, logo: LogoConfig) -> None:
        """Apply the channel-logo overlay; failures degrade to no overlay."""
        pass


def create_player(settings) -> MediaPlayer:
    """Build the player client selected by ``settings.player_kind``."""
    kind = PlayerKind(settings.player_kind)
    common = {
        "reconnect_attempts": settings.player_reconnect_attempts,
        "reconnect_delay_s": settings.player_reconnect_delay_ms / 1000,
    }

    if kind is PlayerKind.MPV:
        from .mpv_client import MpvClient

        return MpvClient(
            settings.mpv_ipc_socket,
            request_timeout_s=settings.player_request_timeout_ms / 1000,
            logo_cache_dir=settings.logo_cache_dir,
            logo_max_height=settings.logo_max_height,
            **common,
        )

    from .vlc_client import VlcClient

    return VlcClient(
        settings.vlc_host,
        settings.vlc_port,
        settle_delay_s=settings.vlc_settle_delay_ms / 1000,
        **common,
    )
