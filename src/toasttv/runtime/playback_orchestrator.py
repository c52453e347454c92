"""
Playback orchestrator: drives the external player from the queue scheduler.

The players expose no reliable "track changed" notification, so the
orchestrator samples player status on a fixed cadence and infers
transitions:

- position-reset: the previous sample was past the late threshold and the
  current one is near zero;
- beyond-expected: the position ran past the tracked item's duration plus a
  margin, meaning the player already auto-advanced past a short asset.

While an item plays, the next one is pre-queued into the player's native
playlist so its own auto-advance is gapless. When the schedule runs dry the
configured off-air asset is looped until a new session starts.

Every command and every loop iteration runs under one re-entrant lock, so
scheduler and session-clock state are never mutated concurrently.

States: Idle -> SessionActive -> OffAir -> Idle (on stop), with a
disconnected sub-state while the player cannot be reached.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable

from toasttv.domain.entities import MediaItem, PlaybackStatus
from toasttv.domain.interfaces import EventSink, MediaRepository
from toasttv.infra.exceptions import PlayerConnectionError, PlayerError, ResourceError
from toasttv.players.base import MediaPlayer

from .config import RuntimeConfigStore
from .constants import LoopThresholds
from .events import EventBroadcaster, queue_snapshot
from .queue_scheduler import QueueScheduler

# Upcoming items included in UI events.
EVENT_QUEUE_LENGTH = 10


class LoopOutcome(Enum):
    """Result of one polling iteration"""

    IDLE = "idle"
    POLLED = "polled"
    TRANSITION = "transition"
    OFF_AIR = "off_air"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class PlaybackOrchestrator:
    def __init__(
        self,
        player: MediaPlayer,
        scheduler: QueueScheduler,
        config: RuntimeConfigStore,
        repository: MediaRepository,
        *,
        events: EventSink | None = None,
        thresholds: LoopThresholds | None = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self._player = player
        self._scheduler = scheduler
        self._config = config
        self._repository = repository
        self._events = events if events is not None else EventBroadcaster()
        self._thresholds = thresholds or LoopThresholds()
        self._sleep = sleep_fn
        self._logger = logging.getLogger(__name__)

        self._lock = threading.RLock()
        self._running = threading.Event()

        self._current_item: MediaItem | None = None
        self._last_position = 0
        self._last_is_playing: bool | None = None
        self._off_air = False
        self._disconnected = False

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def events(self) -> EventSink:
        return self._events

    @property
    def current_item(self) -> MediaItem | None:
        return self._current_item

    @property
    def is_off_air(self) -> bool:
        return self._off_air

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def peek_queue(self, count: int = 5) -> list[MediaItem]:
        with self._lock:
            return self._scheduler.peek_queue(count)

    def get_status(self) -> PlaybackStatus | None:
        """Current player status, or None when the player cannot answer."""
        try:
            return self._player.get_status()
        except PlayerError as e:
            self._logger.warning("Could not read player status: %s", e)
            return None

    def get_quota_remaining_minutes(self) -> int | None:
        return self._scheduler.get_quota_remaining_minutes()

    def is_quota_skipped(self) -> bool:
        return self._scheduler.is_quota_skipped()

    def sync_snapshot(self) -> dict[str, Any]:
        """Full UI state, as sent to a freshly connected client."""
        with self._lock:
            info = self._scheduler.session_info
            item = self._current_item
            return {
                "type": "sync",
                "sessionActive": info.is_active,
                "isOffAir": self._off_air,
                "resetHour": info.reset_hour,
                "trackId": item.id if item else None,
                "filename": item.filename if item else None,
                "duration": item.duration_seconds if item else 0,
                "position": self._last_position,
                "isPlaying": bool(self._last_is_playing),
                "sessionRemainingMs": self._session_remaining_ms(),
                "queue": [] if self._off_air else queue_snapshot(self._scheduler.peek_queue(EVENT_QUEUE_LENGTH)),
            }

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        with self._lock:
            if self._scheduler.is_session_active:
                self._logger.warning("Session already active")
                return

            first = self._scheduler.start_session()
            self._player.set_loop(False)
            self._off_air = False
            if first is None:
                self._logger.warning("Session produced nothing to play")
                self._enter_off_air()
                return

            self._play_item(first)
            self._prequeue_following()

            self._events.reset_playing_state()
            self._last_is_playing = None
            self._events.broadcast(
                {
                    "type": "sessionStart",
                    "sessionRemainingMs": self._session_remaining_ms(),
                    "queue": queue_snapshot(self._scheduler.peek_queue(EVENT_QUEUE_LENGTH)),
                }
            )
            self._broadcast_track_start(first)

    def skip(self) -> None:
        """Play the next scheduled item immediately."""
        with self._lock:
            if not self._scheduler.is_session_active:
                self._logger.info("Skip ignored: no active session")
                return
            next_item = self._scheduler.get_next_video()
            if next_item is None:
                self._enter_off_air()
                return
            self._play_item(next_item)
            self._prequeue_following()
            self._broadcast_track_start(next_item)

    play_next = skip

    def pause(self) -> None:
        """Toggle pause and broadcast the resulting state."""
        with self._lock:
            self._player.pause()
            status = self._player.get_status()
            self._last_is_playing = status.is_playing
            self._events.broadcast_playing_state(status.is_playing)

    def stop(self) -> None:
        with self._lock:
            try:
                self._player.stop()
            except PlayerError as e:
                self._logger.warning("Player did not accept stop: %s", e)
            self._scheduler.end_session()
            self._off_air = False
            self._current_item = None
            self._last_position = 0
            self._events.reset_playing_state()
            self._events.broadcast({"type": "sessionEnd"})
            self._logger.info("Session stopped")

    end_session = stop

    def skip_quota_and_resume(self) -> None:
        """Ignore today's quota and, when off-air, start a fresh session."""
        with self._lock:
            if self._off_air:
                self._config.get().validate()
            self._scheduler.skip_quota_for_today()
            if self._off_air:
                self.start_session()

    def shuffle_queue(self) -> None:
        with self._lock:
            self._scheduler.shuffle_queue()
            self._events.broadcast(
                {
                    "type": "queueUpdate",
                    "queue": queue_snapshot(self._scheduler.peek_queue(EVENT_QUEUE_LENGTH)),
                }
            )

    def update_logo(self) -> None:
        with self._lock:
            self._player.update_logo(self._config.get().logo)

    def on_library_rescanned(self) -> None:
        """Refresh the scheduler snapshot after the media index changed."""
        with self._lock:
            self._scheduler.refresh_cache()
            if self._scheduler.is_session_active:
                self._events.broadcast(
                    {
                        "type": "queueUpdate",
                        "queue": queue_snapshot(self._scheduler.peek_queue(EVENT_QUEUE_LENGTH)),
                    }
                )

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run_forever(self) -> None:
        """Poll until :meth:`stop_loop` is called. Never raises on player errors."""
        self._running.set()
        self._logger.info("Playback loop started")
        while self._running.is_set():
            outcome = self.run_once()
            self._sleep(self._delay_for(outcome))
        self._logger.info("Playback loop stopped")

    def stop_loop(self) -> None:
        self._running.clear()

    def run_once(self) -> LoopOutcome:
        """Execute a single polling iteration."""
        with self._lock:
            if self._off_air or not self._scheduler.is_session_active:
                return LoopOutcome.IDLE
            try:
                return self._poll()
            except (PlayerConnectionError, ConnectionError) as e:
                if not self._disconnected:
                    self._logger.warning("Player unreachable, backing off: %s", e)
                    self._disconnected = True
                return LoopOutcome.DISCONNECTED
            except Exception as e:
                self._logger.exception("Playback loop iteration failed: %s", e)
                return LoopOutcome.ERROR

    def _delay_for(self, outcome: LoopOutcome) -> float:
        if outcome is LoopOutcome.IDLE:
            return self._thresholds.idle_interval_s
        if outcome is LoopOutcome.DISCONNECTED:
            return self._thresholds.disconnect_backoff_s
        return self._thresholds.poll_interval_s

    def _poll(self) -> LoopOutcome:
        t = self._thresholds

        if not self._player.is_connected:
            self._player.connect(max_attempts=1)

        status = self._player.get_status()
        if self._disconnected:
            self._logger.info("Player connection restored")
            self._disconnected = False

        current = self._current_item
        if current is None:
            self._note_playing_state(status)
            self._last_position = status.position_seconds
            return LoopOutcome.POLLED

        # Stop detection runs first; a brief not-playing gap between tracks
        # is ruled out by confirming after a short delay. Playing state is
        # only reported once the confirmed status is known.
        if not status.is_playing and not status.is_paused and self._last_position > t.stop_min_position_s:
            self._sleep(t.stop_confirm_delay_s)
            status = self._player.get_status()
            if not status.is_playing and not status.is_paused:
                self._logger.info("Player stopped during %s, going off-air", current.filename)
                self._enter_off_air()
                return LoopOutcome.OFF_AIR

        self._note_playing_state(status)

        position = status.position_seconds
        late_threshold = t.late_threshold(current.duration_seconds)
        position_reset = (
            self._last_position > late_threshold and position < t.reset_position_s and status.is_playing
        )
        beyond_expected = position > current.duration_seconds + t.beyond_expected_margin_s and status.is_playing

        if position_reset or beyond_expected:
            self._logger.debug(
                "Transition detected after %s (last=%ds, now=%ds, %s)",
                current.filename,
                self._last_position,
                position,
                "reset" if position_reset else "beyond-expected",
            )
            return self._advance(status)

        self._last_position = position
        return LoopOutcome.POLLED

    def _advance(self, status: PlaybackStatus) -> LoopOutcome:
        next_item = self._scheduler.get_next_video()
        if next_item is None:
            self._enter_off_air()
            return LoopOutcome.OFF_AIR

        self._current_item = next_item
        self._last_position = status.position_seconds
        if status.current_file and status.current_file != next_item.path:
            self._logger.info(
                "Player moved to %s but %s is scheduled; replacing",
                status.current_file,
                next_item.filename,
            )
            self._player.play(next_item.path)
            self._last_position = 0

        self._broadcast_track_start(next_item)
        self._prequeue_following()
        return LoopOutcome.TRANSITION

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _note_playing_state(self, status: PlaybackStatus) -> None:
        if status.is_playing != self._last_is_playing:
            self._last_is_playing = status.is_playing
            self._events.broadcast_playing_state(status.is_playing)

    def _play_item(self, item: MediaItem) -> None:
        self._current_item = item
        self._last_position = 0
        self._player.play(item.path)

    def _prequeue_following(self) -> None:
        """Load the next item (or the off-air asset) into the player's playlist."""
        upcoming = self._scheduler.peek_queue(1)
        if upcoming:
            self._player.enqueue(upcoming[0].path)
            return
        try:
            off_air = self._resolve_off_air_item()
        except ResourceError as e:
            self._logger.debug("Nothing to pre-queue after the last item: %s", e)
            return
        if off_air is not None:
            self._player.enqueue(off_air.path)

    def _resolve_off_air_item(self) -> MediaItem | None:
        """
        The configured off-air asset, or None when none is configured.

        Raises:
            ResourceError: The configured id is not in the media index
        """
        asset_id = self._config.get().session.off_air_asset_id
        if not asset_id:
            return None
        item = self._repository.get_by_id(asset_id)
        if item is None:
            raise ResourceError(f"Off-air asset {asset_id} not found in media index")
        return item

    def _enter_off_air(self) -> None:
        if self._scheduler.is_session_active:
            self._scheduler.end_session()

        try:
            item = self._resolve_off_air_item()
            if item is None:
                self._logger.info("No off-air asset configured")
        except ResourceError as e:
            self._logger.warning("%s; stopping playback instead", e)
            item = None
        if item is None:
            self._current_item = None
            self._last_position = 0
            self._player.stop()
            self._events.broadcast({"type": "sessionEnd"})
            return

        self._off_air = True
        self._current_item = item
        self._last_position = 0
        self._logger.info("Entering off-air mode with %s", item.filename)

        self._player.play(item.path)
        self._player.set_loop(True)

        self._last_is_playing = True
        self._events.broadcast(
            {
                "type": "sync",
                "sessionActive": False,
                "isOffAir": True,
                "resetHour": self._scheduler.session_info.reset_hour,
                "trackId": item.id,
                "filename": item.filename,
                "duration": item.duration_seconds,
                "position": 0,
                "isPlaying": True,
                "sessionRemainingMs": 0,
                "queue": [],
            }
        )

    def _broadcast_track_start(self, item: MediaItem) -> None:
        self._events.broadcast(
            {
                "type": "trackStart",
                "trackId": item.id,
                "filename": item.filename,
                "duration": item.duration_seconds,
                "queue": queue_snapshot(self._scheduler.peek_queue(EVENT_QUEUE_LENGTH)),
            }
        )

    def _session_remaining_ms(self) -> int | None:
        info = self._scheduler.session_info
        if info.limit_minutes == 0:
            return None
        return int(info.remaining_ms)
