"""
Application settings for ToastTV.

This module defines the process-level configuration (player transport,
file locations, loop thresholds, logging) using Pydantic BaseSettings.
UI-editable runtime configuration lives in :mod:`toasttv.runtime.config`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Player transport
    player_kind: Literal["mpv", "vlc"] = Field(default="mpv", alias="TOASTTV_PLAYER")
    mpv_ipc_socket: str = Field(default="/tmp/toasttv-mpv.sock", alias="MPV_IPC_SOCKET")
    vlc_host: str = Field(default="127.0.0.1", alias="VLC_HOST")
    vlc_port: int = Field(default=4212, alias="VLC_PORT")
    player_reconnect_attempts: int = Field(default=10, ge=1, alias="PLAYER_RECONNECT_ATTEMPTS")
    player_reconnect_delay_ms: int = Field(default=2000, ge=0, alias="PLAYER_RECONNECT_DELAY_MS")
    player_request_timeout_ms: int = Field(default=5000, gt=0, alias="PLAYER_REQUEST_TIMEOUT_MS")
    vlc_settle_delay_ms: int = Field(default=100, ge=0, alias="VLC_SETTLE_DELAY_MS")

    # Files
    config_path: str = Field(default="./data/config.json", alias="TOASTTV_CONFIG")
    catalog_path: str = Field(default="./data/catalog.json", alias="TOASTTV_CATALOG")
    logo_cache_dir: str = Field(default="/tmp", alias="LOGO_CACHE_DIR")
    logo_max_height: int = Field(default=120, gt=0, alias="LOGO_MAX_HEIGHT")

    # Playback loop cadence and heuristics
    loop_poll_interval_ms: int = Field(default=500, gt=0, alias="LOOP_POLL_INTERVAL_MS")
    loop_idle_interval_ms: int = Field(default=1000, gt=0, alias="LOOP_IDLE_INTERVAL_MS")
    loop_disconnect_backoff_ms: int = Field(default=5000, gt=0, alias="LOOP_DISCONNECT_BACKOFF_MS")
    loop_stop_confirm_ms: int = Field(default=800, ge=0, alias="LOOP_STOP_CONFIRM_MS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="console", alias="LOG_FORMAT")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("TOASTTV_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]
