"""
ToastTV daemon: composition root for the playback core.

Wires the media catalog, the runtime config store, the player client, the
session clock, the queue scheduler and the playback orchestrator together,
and runs the polling loop on a background thread.
"""

from __future__ import annotations

import threading
from pathlib import Path

from toasttv.catalog.static_media_catalog import StaticMediaCatalog
from toasttv.infra.exceptions import PlayerError
from toasttv.infra.logging import get_logger
from toasttv.infra.settings import Settings
from toasttv.players.base import MediaPlayer, create_player

from .clock import Clock, SystemClock
from .config import ConfigService
from .constants import LoopThresholds
from .events import EventBroadcaster
from .playback_orchestrator import PlaybackOrchestrator
from .providers.file_config_provider import JsonRuntimeConfigStore
from .queue_scheduler import QueueScheduler
from .session_clock import SessionClock

LOOP_JOIN_TIMEOUT_S = 10.0


class ToastTVDaemon:
    """Owns every long-lived playback component for one process."""

    def __init__(
        self,
        settings: Settings,
        *,
        player: MediaPlayer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings
        self._logger = get_logger(__name__)

        self.catalog = StaticMediaCatalog(Path(settings.catalog_path))
        self.config_store = JsonRuntimeConfigStore(Path(settings.config_path))
        self.config_service = ConfigService(self.config_store)
        self.config_service.discover_special_media(self.catalog)

        self.clock = clock or SystemClock()
        app_config = self.config_store.get()
        self.session = SessionClock(
            self.clock,
            limit_minutes=app_config.session.limit_minutes,
            reset_hour=app_config.session.reset_hour,
        )
        self.scheduler = QueueScheduler(self.config_store, self.catalog, self.session, self.clock)
        self.events = EventBroadcaster()
        self.player = player or create_player(settings)
        self.orchestrator = PlaybackOrchestrator(
            self.player,
            self.scheduler,
            self.config_store,
            self.catalog,
            events=self.events,
            thresholds=LoopThresholds.from_settings(settings),
        )
        self._loop_thread: threading.Thread | None = None

    def start(self) -> None:
        """Connect to the player and start the polling loop thread."""
        self._logger.info("daemon_starting", player=self.settings.player_kind)
        self.player.connect()

        try:
            self.orchestrator.update_logo()
        except PlayerError as e:
            self._logger.warning("logo_update_failed", error=str(e))

        self._loop_thread = threading.Thread(
            target=self.orchestrator.run_forever,
            name="toasttv-playback-loop",
            daemon=True,
        )
        self._loop_thread.start()
        self._logger.info("daemon_started")

    def rescan(self) -> None:
        """Reload the catalog file and refresh the scheduler snapshot."""
        self.catalog.reload()
        self.config_service.discover_special_media(self.catalog)
        self.orchestrator.on_library_rescanned()

    def stop(self) -> None:
        """Stop the loop and release the player; errors here are logged only."""
        self._logger.info("daemon_stopping")
        self.orchestrator.stop_loop()
        if self._loop_thread is not None:
            self._loop_thread.join(timeout=LOOP_JOIN_TIMEOUT_S)
            self._loop_thread = None

        if self.scheduler.is_session_active:
            self.scheduler.end_session()

        try:
            self.player.stop()
        except PlayerError as e:
            self._logger.debug("player_stop_failed", error=str(e))
        try:
            self.player.disconnect()
        except OSError as e:
            self._logger.debug("player_disconnect_failed", error=str(e))
        self._logger.info("daemon_stopped")
