"""
Polling-loop thresholds.

The players expose no reliable change notification, so track changes are
inferred by sampling. The numbers below tune that sampling and are grouped
into one value object so they can be overridden from settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LoopThresholds:
    poll_interval_s: float = 0.5
    idle_interval_s: float = 1.0
    disconnect_backoff_s: float = 5.0
    stop_confirm_delay_s: float = 0.8

    # Position-reset pattern: previous position past
    # max(duration * late_fraction, min_late_threshold_s) and current
    # position under reset_position_s.
    late_fraction: float = 0.5
    min_late_threshold_s: float = 3.0
    reset_position_s: float = 3.0
    # Beyond-expected pattern: position past duration + margin.
    beyond_expected_margin_s: float = 5.0
    # Stop detection only considers tracks that got past this position.
    stop_min_position_s: float = 3.0

    @classmethod
    def from_settings(cls, settings: Any) -> LoopThresholds:
        return cls(
            poll_interval_s=settings.loop_poll_interval_ms / 1000,
            idle_interval_s=settings.loop_idle_interval_ms / 1000,
            disconnect_backoff_s=settings.loop_disconnect_backoff_ms / 1000,
            stop_confirm_delay_s=settings.loop_stop_confirm_ms / 1000,
        )

    def late_threshold(self, duration_seconds: float) -> float:
        return max(duration_seconds * self.late_fraction, self.min_late_threshold_s)
