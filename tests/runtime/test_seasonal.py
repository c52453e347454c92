from __future__ import annotations

from datetime import date

import pytest

from toasttv.runtime.seasonal import is_seasonal_active, mmdd_from_date


@pytest.mark.parametrize(
    "start,end,today,expected",
    [
        ("12-01", "02-28", "12-31", True),
        ("12-01", "02-28", "01-15", True),
        ("12-01", "02-28", "03-01", False),
        ("03-01", "05-31", "04-15", True),
        ("03-01", "05-31", "06-01", False),
        ("03-01", "05-31", "03-01", True),
        ("03-01", "05-31", "05-31", True),
        (None, None, "07-04", True),
        ("10-01", None, "01-01", True),
    ],
)
def test_is_seasonal_active(start, end, today, expected):
    assert is_seasonal_active(start, end, today) is expected


def test_mmdd_from_date_accepts_iso_string_and_date():
    assert mmdd_from_date("2025-12-24") == "12-24"
    assert mmdd_from_date(date(2025, 2, 3)) == "02-03"
