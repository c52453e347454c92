"""Channel-logo helpers shared by the player clients."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

_logger = logging.getLogger(__name__)

# Admin-UI grid code -> numpad alignment (7 8 9 / 4 5 6 / 1 2 3).
_POSITION_TO_ALIGNMENT = {
    0: 5,  # centre
    1: 4,  # left
    2: 6,  # right
    4: 8,  # top
    8: 2,  # bottom
    5: 7,  # top-left
    6: 9,  # top-right
    9: 1,  # bottom-left
    10: 3,  # bottom-right
}
DEFAULT_ALIGNMENT = 9

FFMPEG_TIMEOUT_S = 15.0


def alignment_for_position(position: int) -> int:
    return _POSITION_TO_ALIGNMENT.get(position, DEFAULT_ALIGNMENT)


def prescale_logo(source: str | Path, cache_dir: str | Path, max_height: int = 120) -> str:
    """
    Cap the logo height with ffmpeg so the player never scales it live.

    Smaller images pass through at their own size. Returns the optimized
    path, or the source path when the source is missing or ffmpeg fails.
    """
    source_path = Path(source).resolve()
    if not source_path.exists():
        return str(source_path)

    dest = Path(cache_dir) / f"{source_path.stem}-optimized.png"
    cmd = [
        "ffmpeg",
        "-y",
        "-v",
        "error",
        "-i",
        str(source_path),
        "-vf",
        f"scale=iw*min(1\\,{max_height}/ih):-1",
        str(dest),
    ]
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        result = subprocess.run(cmd, capture_output=True, timeout=FFMPEG_TIMEOUT_S, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        _logger.warning("Failed to run ffmpeg for logo %s: %s", source_path, e)
        return str(source_path)

    if result.returncode != 0:
        _logger.warning("ffmpeg exited with %d while scaling logo %s", result.returncode, source_path)
        return str(source_path)

    _logger.info("Logo optimized to %s", dest)
    return str(dest)
