"""
Global test configuration for ToastTV.

This module provides global pytest configuration and fixtures.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from toasttv.domain.entities import MediaItem, MediaType  # noqa: E402
from toasttv.runtime.clock import SteppedClock  # noqa: E402


def make_item(
    media_id: int,
    duration: float = 600,
    media_type: MediaType = MediaType.VIDEO,
    filename: str | None = None,
    date_start: str | None = None,
    date_end: str | None = None,
) -> MediaItem:
    name = filename or f"{media_type.value}_{media_id}.mp4"
    return MediaItem(
        id=media_id,
        path=f"/media/{name}",
        filename=name,
        duration_seconds=duration,
        media_type=media_type,
        date_start=date_start,
        date_end=date_end,
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def stepped_clock() -> SteppedClock:
    return SteppedClock(datetime(2025, 3, 10, 12, 0, 0))
