"""Session clock: viewing-session lifecycle plus the daily watched-minutes quota.

Two limits are tracked separately:

- the *session limit* (``limit_minutes``) bounds how much content the
  scheduler builds for one session, and drives ``remaining_ms``/``is_expired``;
- the *daily quota* accumulates wall-clock minutes across sessions within one
  quota day. A quota day starts at ``reset_hour`` local time rather than at
  midnight, so a session started at 05:59 with ``reset_hour=6`` is charged to
  the previous day.

Transitions happen only through :meth:`SessionClock.start` and
:meth:`SessionClock.end`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from toasttv.infra.exceptions import ValidationError

from .clock import Clock

_MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class SessionInfo:
    is_active: bool
    started_at: datetime | None
    limit_minutes: int
    reset_hour: int
    elapsed_ms: int
    remaining_ms: float  # math.inf when unlimited
    is_expired: bool
    minutes_watched_today: int
    daily_quota_remaining: int | None  # None = unlimited


class SessionClock:
    def __init__(self, clock: Clock, *, limit_minutes: int = 30, reset_hour: int = 6) -> None:
        self._clock = clock
        self._is_active = False
        self._started_at: datetime | None = None
        self._limit_minutes = limit_minutes
        self._reset_hour = reset_hour

        self._minutes_watched_today = 0
        self._last_reset_date: date | None = None
        self._quota_skipped_for_today = False
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, limit_minutes: int, reset_hour: int) -> None:
        """Start a session, rolling the quota day over first if needed."""
        if limit_minutes < 0:
            raise ValidationError("Session limit cannot be negative")
        if not 0 <= reset_hour <= 23:
            raise ValidationError(f"reset_hour must be between 0 and 23, got {reset_hour}")

        self.check_and_reset_if_needed(reset_hour)

        self._is_active = True
        self._started_at = self._clock.now()
        self._limit_minutes = limit_minutes
        self._reset_hour = reset_hour

    def end(self) -> None:
        """End the session and charge whole elapsed minutes to the quota."""
        if self._is_active and self._started_at is not None:
            minutes = self._elapsed_ms() // _MS_PER_MINUTE
            self.add_watched_time(minutes)
            self._logger.info(
                "Session ended after %d min (%d min watched this quota day)",
                minutes,
                self._minutes_watched_today,
            )

        self._is_active = False
        self._started_at = None

    def check_and_reset_if_needed(self, reset_hour: int) -> None:
        """Zero the quota when the current quota day differs from the stored one."""
        now = self._clock.now()
        quota_date = now.date() if now.hour >= reset_hour else now.date() - timedelta(days=1)

        if self._last_reset_date != quota_date:
            if self._last_reset_date is not None:
                self._logger.info("Quota day rolled over to %s", quota_date.isoformat())
            self._minutes_watched_today = 0
            self._last_reset_date = quota_date
            self._quota_skipped_for_today = False

    # ------------------------------------------------------------------
    # Quota
    # ------------------------------------------------------------------

    def add_watched_time(self, minutes: int) -> None:
        self._minutes_watched_today += minutes

    def get_remaining_quota(self) -> int | None:
        """Remaining daily minutes, or None for unlimited sessions."""
        if self._limit_minutes == 0:
            return None
        return max(0, self._limit_minutes - self._minutes_watched_today)

    @property
    def quota_exhausted(self) -> bool:
        if self._quota_skipped_for_today:
            return False
        if self._limit_minutes == 0:
            return False
        return self._minutes_watched_today >= self._limit_minutes

    def skip_quota_for_today(self) -> None:
        """Ignore the quota until the next quota-day rollover."""
        self._quota_skipped_for_today = True

    @property
    def is_quota_skipped(self) -> bool:
        return self._quota_skipped_for_today

    @property
    def minutes_watched_today(self) -> int:
        return self._minutes_watched_today

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._is_active

    @property
    def expired(self) -> bool:
        """True once an active finite session ran past its limit."""
        if not self._is_active or self._started_at is None or self._limit_minutes == 0:
            return False
        return self._elapsed_ms() >= self._limit_minutes * _MS_PER_MINUTE

    def info(self) -> SessionInfo:
        elapsed_ms = self._elapsed_ms()
        limit_ms = self._limit_minutes * _MS_PER_MINUTE
        remaining_ms: float = max(0, limit_ms - elapsed_ms) if limit_ms > 0 else math.inf

        return SessionInfo(
            is_active=self._is_active,
            started_at=self._started_at,
            limit_minutes=self._limit_minutes,
            reset_hour=self._reset_hour,
            elapsed_ms=elapsed_ms,
            remaining_ms=remaining_ms,
            is_expired=self._limit_minutes > 0 and elapsed_ms >= limit_ms,
            minutes_watched_today=self._minutes_watched_today,
            daily_quota_remaining=self.get_remaining_quota(),
        )

    def _elapsed_ms(self) -> int:
        if self._started_at is None:
            return 0
        delta = self._clock.now() - self._started_at
        return max(0, int(delta.total_seconds() * 1000))
