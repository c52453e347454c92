from __future__ import annotations

import math
from datetime import datetime

import pytest

from toasttv.infra.exceptions import ValidationError
from toasttv.runtime.clock import SteppedClock
from toasttv.runtime.session_clock import SessionClock


def test_reset_hour_splits_quota_days():
    clock = SteppedClock(datetime(2025, 3, 10, 5, 59))
    session = SessionClock(clock)

    session.start(30, 6)
    session.add_watched_time(12)
    session.end()
    assert session.minutes_watched_today == 12

    clock.set(datetime(2025, 3, 10, 6, 1))
    session.start(30, 6)

    assert session.minutes_watched_today == 0


def test_sessions_within_one_quota_day_accumulate():
    clock = SteppedClock(datetime(2025, 3, 10, 23, 0))
    session = SessionClock(clock)

    session.start(30, 6)
    clock.advance(10 * 60 + 30)
    session.end()

    # 02:00 next calendar day is still the same quota day
    clock.set(datetime(2025, 3, 11, 2, 0))
    session.start(30, 6)
    clock.advance(5 * 60)
    session.end()

    assert session.minutes_watched_today == 15
    assert session.get_remaining_quota() == 15


def test_end_charges_whole_minutes_only(stepped_clock):
    session = SessionClock(stepped_clock)
    session.start(30, 6)

    stepped_clock.advance(119)
    session.end()

    assert session.minutes_watched_today == 1
    assert not session.active


def test_quota_never_exhausted_when_unlimited(stepped_clock):
    session = SessionClock(stepped_clock)
    session.start(0, 6)
    session.add_watched_time(10_000)

    assert session.quota_exhausted is False
    assert session.get_remaining_quota() is None


def test_quota_exhausted_at_limit(stepped_clock):
    session = SessionClock(stepped_clock)
    session.start(20, 6)
    session.add_watched_time(20)

    assert session.quota_exhausted is True
    assert session.get_remaining_quota() == 0


def test_skip_persists_through_end_and_clears_at_rollover():
    clock = SteppedClock(datetime(2025, 3, 10, 12, 0))
    session = SessionClock(clock)
    session.start(20, 6)
    session.add_watched_time(25)
    session.skip_quota_for_today()
    session.end()

    assert session.is_quota_skipped
    assert session.quota_exhausted is False

    clock.set(datetime(2025, 3, 11, 5, 0))
    session.start(20, 6)
    assert session.is_quota_skipped
    session.end()

    clock.set(datetime(2025, 3, 11, 6, 0))
    session.start(20, 6)
    assert not session.is_quota_skipped
    assert session.minutes_watched_today == 0


def test_info_reports_remaining_and_expiry(stepped_clock):
    session = SessionClock(stepped_clock)
    session.start(10, 6)
    stepped_clock.advance(4 * 60)

    info = session.info()
    assert info.is_active
    assert info.elapsed_ms == 240_000
    assert info.remaining_ms == 360_000
    assert not info.is_expired

    stepped_clock.advance(6 * 60)
    assert session.expired
    assert session.info().remaining_ms == 0


def test_info_remaining_is_infinite_when_unlimited(stepped_clock):
    session = SessionClock(stepped_clock)
    session.start(0, 6)
    stepped_clock.advance(3600)

    assert session.info().remaining_ms == math.inf
    assert not session.expired


@pytest.mark.parametrize("limit,hour", [(-1, 6), (30, 24), (30, -1)])
def test_start_rejects_invalid_values(stepped_clock, limit, hour):
    session = SessionClock(stepped_clock)

    with pytest.raises(ValidationError):
        session.start(limit, hour)

    assert not session.active


def test_idle_clock_reports_zero_elapsed(stepped_clock):
    session = SessionClock(stepped_clock)

    assert session.info().elapsed_ms == 0
    assert not session.expired

    session.start(10, 6)
    stepped_clock.advance(90)
    session.end()

    assert session.info().elapsed_ms == 0
