"""
File-based runtime configuration store.

Loads and persists AppConfig as a JSON file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any

from toasttv.infra.exceptions import ValidationError

from ..config import AppConfig, merge_config

_logger = logging.getLogger(__name__)


class JsonRuntimeConfigStore:
    """
    RuntimeConfigStore backed by a JSON file.

    Expected JSON format (every key optional):
    {
      "session": {"limit_minutes": 30, "reset_hour": 6, "intro_video_id": null, ...},
      "interlude": {"enabled": true, "frequency": 1},
      "logo": {"enabled": true, "image_path": "./data/logo.png", ...}
    }
    """

    def __init__(self, config_path: Path | str):
        """
        Initialize the store.

        Args:
            config_path: Path to the config.json file
        """
        self._config_path = Path(config_path)
        self._config = AppConfig()
        self._loaded = False
        self._lock = Lock()

    def _ensure_loaded(self) -> None:
        """Load config from file if not already loaded."""
        if self._loaded:
            return

        if not self._config_path.exists():
            _logger.warning(
                "Runtime config file not found: %s (using defaults)",
                self._config_path,
            )
            self._loaded = True
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig.from_dict(data)
            config.validate()
            self._config = config
            _logger.info("Loaded runtime config from %s", self._config_path)
        except json.JSONDecodeError as e:
            _logger.error(
                "Failed to parse runtime config file %s: %s",
                self._config_path,
                e,
            )
        except ValidationError as e:
            _logger.error(
                "Rejected runtime config file %s (using defaults): %s",
                self._config_path,
                e,
            )
        except (OSError, TypeError, ValueError) as e:
            _logger.error(
                "Failed to read runtime config file %s: %s",
                self._config_path,
                e,
            )

        self._loaded = True

    def reload(self) -> None:
        """Force reload of config from file."""
        with self._lock:
            self._loaded = False
            self._config = AppConfig()
            self._ensure_loaded()

    def get(self) -> AppConfig:
        with self._lock:
            self._ensure_loaded()
            return self._config

    def update(self, partial: dict[str, Any]) -> None:
        with self._lock:
            self._ensure_loaded()
            merged = merge_config(self._config.to_dict(), partial)
            config = AppConfig.from_dict(merged)
            config.validate()
            self._write(merged)
            self._config = config

    def _write(self, data: dict[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._config_path.with_suffix(self._config_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self._config_path)


class InMemoryRuntimeConfigStore:
    """RuntimeConfigStore that keeps the config in memory only."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()
        self._lock = Lock()

    def get(self) -> AppConfig:
        with self._lock:
            return self._config

    def update(self, partial: dict[str, Any]) -> None:
        with self._lock:
            config = AppConfig.from_dict(merge_config(self._config.to_dict(), partial))
            config.validate()
            self._config = config


__all__ = [
    "JsonRuntimeConfigStore",
    "InMemoryRuntimeConfigStore",
]
