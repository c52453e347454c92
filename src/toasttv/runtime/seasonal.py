"""
Seasonal availability for interludes.

A seasonal window is an inclusive ``[start, end]`` pair of ``MM-DD``
strings. Windows where ``start > end`` wrap the year boundary
(``12-01`` .. ``02-28``). Zero-padded ``MM-DD`` strings compare
lexicographically in calendar order, so plain string comparison is used.
"""

from __future__ import annotations

from datetime import date


def mmdd_from_date(value: str | date) -> str:
    """Return the ``MM-DD`` part of a ``YYYY-MM-DD`` string or a date."""
    if isinstance(value, date):
        return value.strftime("%m-%d")
    parts = value.split("-")
    if len(parts) == 3:
        return f"{parts[1]}-{parts[2]}"
    return value


def current_mmdd() -> str:
    return mmdd_from_date(date.today())


def is_seasonal_active(start: str | None, end: str | None, today: str | None = None) -> bool:
    """
    Check whether a seasonal window is active on a given day.

    Args:
        start: Window start as ``MM-DD``, or None
        end: Window end as ``MM-DD``, or None
        today: Day to check as ``MM-DD``; defaults to the local date

    Returns:
        True if the day falls inside the window or no window is set
    """
    if not start or not end:
        return True

    current = today or current_mmdd()

    if start <= end:
        return start <= current <= end
    # Wraps the year boundary
    return current >= start or current <= end
