"""
StaticMediaCatalog: loads the JSON media index written by the indexer and
satisfies the MediaRepository protocol used by the scheduler.

Usage:
    from toasttv.catalog.static_media_catalog import StaticMediaCatalog
    catalog = StaticMediaCatalog("data/catalog.json")
    interludes = catalog.get_interludes("2025-12-24")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Iterable

from toasttv.domain.entities import MediaItem, MediaType
from toasttv.runtime.seasonal import is_seasonal_active, mmdd_from_date

_logger = logging.getLogger(__name__)


class StaticMediaCatalog:
    """Read-only MediaRepository backed by a JSON catalog file.

    Expected format:
    {
      "media": [
        {"id": 1, "path": "/media/show.mp4", "filename": "show.mp4",
         "duration_seconds": 600, "media_type": "video",
         "date_start": null, "date_end": null}
      ]
    }
    """

    def __init__(self, catalog_path: str | Path | None = None) -> None:
        self._catalog_path = Path(catalog_path) if catalog_path is not None else None
        self._items: dict[int, MediaItem] = {}
        self._lock = Lock()
        if self._catalog_path is not None:
            self.reload()

    @classmethod
    def from_items(cls, items: Iterable[MediaItem]) -> StaticMediaCatalog:
        catalog = cls()
        catalog._items = {item.id: item for item in items}
        return catalog

    def reload(self) -> None:
        """Re-read the catalog file (the external rescan signal)."""
        if self._catalog_path is None:
            return
        items: dict[int, MediaItem] = {}
        if not self._catalog_path.exists():
            _logger.warning("Media catalog not found: %s", self._catalog_path)
        else:
            with open(self._catalog_path, encoding="utf-8") as f:
                data = json.load(f)
            for entry in data.get("media", []):
                try:
                    item = MediaItem.from_dict(entry)
                except (KeyError, ValueError, TypeError) as e:
                    _logger.warning(
                        "Skipping invalid catalog entry: %s (error: %s)",
                        entry.get("path", "<unknown>"),
                        e,
                    )
                    continue
                items[item.id] = item
        with self._lock:
            self._items = items
        _logger.info("Loaded %d media items from %s", len(items), self._catalog_path)

    def get_all(self) -> list[MediaItem]:
        with self._lock:
            return sorted(self._items.values(), key=lambda m: m.filename)

    def get_by_id(self, media_id: int) -> MediaItem | None:
        with self._lock:
            return self._items.get(media_id)

    def get_all_videos(self) -> list[MediaItem]:
        return [m for m in self.get_all() if m.media_type is MediaType.VIDEO]

    def get_interludes(self, current_date: str) -> list[MediaItem]:
        today = mmdd_from_date(current_date)
        return [
            m
            for m in self.get_all()
            if m.is_interlude and is_seasonal_active(m.date_start, m.date_end, today)
        ]

    def get_by_type(self, media_type: MediaType) -> MediaItem | None:
        return next((m for m in self.get_all() if m.media_type is media_type), None)
