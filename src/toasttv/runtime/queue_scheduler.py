"""
Queue scheduler: builds and refills the upcoming-playback queue.

The scheduler owns a cached snapshot of the media index (regular videos,
seasonally eligible interludes and the intro/outro specials), a
:class:`ShuffleDeck` over the regular videos, and the :class:`QueueState`.
It never tracks what is currently playing, only what comes next.

Finite sessions (``limit_minutes > 0``) are built up front until the queued
duration reaches the limit, then closed with the outro. Infinite sessions
(``limit_minutes == 0`` or quota skipped for today) keep a small buffer and
are topped up on every :meth:`QueueScheduler.get_next_video` call.

The snapshot is refreshed at session start and when
:meth:`QueueScheduler.refresh_cache` is called after a rescan, never
implicitly.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from toasttv.domain.entities import NON_ROTATION_TYPES, SPECIAL_MEDIA_TYPES, MediaItem
from toasttv.domain.interfaces import MediaRepository

from .clock import Clock
from .config import AppConfig, RuntimeConfigStore
from .session_clock import SessionClock, SessionInfo
from .shuffle_deck import ShuffleDeck

# Items kept queued ahead in infinite mode.
QUEUE_BUFFER_SIZE = 5
# Generation iterations per fill before giving up (guards misconfiguration).
FILL_SAFETY_LIMIT = 50


@dataclass
class QueueState:
    queue: list[MediaItem] = field(default_factory=list)
    shows_since_interlude: int = 0
    videos_played: int = 0
    is_queue_complete: bool = False


class QueueScheduler:
    def __init__(
        self,
        config: RuntimeConfigStore,
        repository: MediaRepository,
        session: SessionClock,
        clock: Clock,
        *,
        rng: random.Random | None = None,
        buffer_size: int = QUEUE_BUFFER_SIZE,
        safety_limit: int = FILL_SAFETY_LIMIT,
    ) -> None:
        self._config = config
        self._repository = repository
        self._session = session
        self._clock = clock
        self._rng = rng or random.Random()
        self._buffer_size = buffer_size
        self._safety_limit = safety_limit
        self._logger = logging.getLogger(__name__)

        self._state = QueueState()
        self._cached_videos: list[MediaItem] = []
        self._cached_interludes: list[MediaItem] = []
        self._cached_specials: list[MediaItem] = []
        self._deck: ShuffleDeck[MediaItem] | None = None
        self._app_config = AppConfig()

    # ------------------------------------------------------------------
    # Session info passthrough
    # ------------------------------------------------------------------

    @property
    def is_session_active(self) -> bool:
        return self._session.active

    @property
    def session_info(self) -> SessionInfo:
        return self._session.info()

    @property
    def state(self) -> QueueState:
        """Copy of the queue state (for inspection only)."""
        return QueueState(
            queue=list(self._state.queue),
            shows_since_interlude=self._state.shows_since_interlude,
            videos_played=self._state.videos_played,
            is_queue_complete=self._state.is_queue_complete,
        )

    @property
    def app_config(self) -> AppConfig:
        """Configuration snapshot read at the last refresh/top-up."""
        return self._app_config

    def get_quota_remaining_minutes(self) -> int | None:
        return self._session.get_remaining_quota()

    def is_quota_skipped(self) -> bool:
        return self._session.is_quota_skipped

    def is_quota_exhausted(self) -> bool:
        return self._session.quota_exhausted

    def skip_quota_for_today(self) -> None:
        self._session.skip_quota_for_today()
        # A queue closed by the limit reopens as an infinite one.
        self._state.is_queue_complete = False

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> MediaItem | None:
        """
        Refresh the snapshot, build a fresh queue and pop its first item.

        Raises:
            ValidationError: If the current config is out of range; nothing
                is changed in that case
        """
        self._config.get().validate()
        self.refresh_cache()
        self._state = QueueState()

        session_cfg = self._app_config.session
        self._session.start(session_cfg.limit_minutes, session_cfg.reset_hour)

        self._deck = ShuffleDeck(self._cached_videos, rng=self._rng)
        self.fill_queue()

        self._logger.info(
            "Session started: limit=%dm, %d queued",
            session_cfg.limit_minutes,
            len(self._state.queue),
        )
        return self._pop_next()

    def get_next_video(self) -> MediaItem | None:
        """Pop the next item, ending the session when a finite queue is spent."""
        if not self._session.active:
            return None

        # Limit or frequency may have changed mid-session.
        self._app_config = self._config.get()

        if not self._state.queue and self._state.is_queue_complete:
            self.end_session()
            return None

        self.fill_queue()
        return self._pop_next()

    def end_session(self) -> None:
        self._session.end()
        self._state.queue = []
        self._logger.info("Session ended")

    def peek_queue(self, count: int = 5) -> list[MediaItem]:
        return list(self._state.queue[:count])

    def shuffle_queue(self) -> None:
        """Drop every not-yet-played item and regenerate from a reshuffled deck."""
        self._state.queue = []
        self._state.is_queue_complete = False
        if self._deck is not None:
            self._deck.reshuffle()
        self.fill_queue()

    # ------------------------------------------------------------------
    # Queue generation
    # ------------------------------------------------------------------

    def fill_queue(self) -> None:
        state = self._state
        if state.is_queue_complete:
            return

        session_cfg = self._app_config.session
        interlude_cfg = self._app_config.interlude
        queue_duration = sum(item.duration_seconds for item in state.queue)
        infinite = session_cfg.limit_minutes == 0 or self._session.is_quota_skipped
        limit_seconds = session_cfg.limit_minutes * 60
        iterations = 0

        while True:
            if not infinite and queue_duration >= limit_seconds:
                outro = self._find_special(session_cfg.outro_video_id, "outro")
                if outro is not None:
                    state.queue.append(outro)
                state.is_queue_complete = True
                break

            if infinite and len(state.queue) >= self._buffer_size:
                break

            if iterations >= self._safety_limit:
                self._logger.warning(
                    "Queue fill stopped after %d iterations (%d queued)",
                    iterations,
                    len(state.queue),
                )
                break
            iterations += 1

            if state.videos_played == 0 and not state.queue and session_cfg.intro_video_id:
                intro = self._find_special(session_cfg.intro_video_id, "intro")
                if intro is not None:
                    state.queue.append(intro)
                    queue_duration += intro.duration_seconds
                    continue

            # Without regular videos only intro/outro can be served.
            if self._deck is None or self._deck.size == 0:
                state.is_queue_complete = True
                break

            if interlude_cfg.enabled and self._virtual_shows_since_interlude() >= interlude_cfg.frequency:
                interlude = self._pick_interlude()
                if interlude is not None:
                    state.queue.append(interlude)
                    queue_duration += interlude.duration_seconds
                    continue

            video = self._deck.draw()
            if video is None:
                break
            state.queue.append(video)
            queue_duration += video.duration_seconds

    def _virtual_shows_since_interlude(self) -> int:
        """Shows-since-interlude as it will be once the pending queue has played."""
        count = self._state.shows_since_interlude
        for item in self._state.queue:
            if item.is_interlude:
                count = 0
            elif item.is_regular_video:
                count += 1
        return count

    def _pop_next(self) -> MediaItem | None:
        if not self._state.queue:
            return None
        item = self._state.queue.pop(0)
        self._state.videos_played += 1
        if item.is_interlude:
            self._state.shows_since_interlude = 0
        elif item.is_regular_video:
            self._state.shows_since_interlude += 1
        self._logger.info("Next video: %s", item.filename)
        return item

    def _pick_interlude(self) -> MediaItem | None:
        if not self._cached_interludes:
            return None
        return self._rng.choice(self._cached_interludes)

    def _find_special(self, media_id: int | None, role: str) -> MediaItem | None:
        if not media_id:
            return None
        for item in (*self._cached_specials, *self._cached_videos, *self._cached_interludes):
            if item.id == media_id:
                return item
        self._logger.warning("Configured %s id %s not found in media index", role, media_id)
        return None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def refresh_cache(self) -> None:
        """Re-read the media index and runtime config into the snapshot."""
        all_media = self._repository.get_all()
        self._cached_videos = [m for m in all_media if m.media_type not in NON_ROTATION_TYPES]
        self._cached_specials = [m for m in all_media if m.media_type in SPECIAL_MEDIA_TYPES]
        self._cached_interludes = self._repository.get_interludes(self._clock.today())
        self._app_config = self._config.get()

        if self._deck is not None and self._session.active:
            self._deck.set_items(self._cached_videos)

        self._logger.info(
            "Cache refreshed: %d videos, %d interludes. Limit=%dm",
            len(self._cached_videos),
            len(self._cached_interludes),
            self._app_config.session.limit_minutes,
        )
