"""Short status strings shown next to the viewport."""
from __future__ import annotations

import math
from enum import StrEnum
from typing import Any, Optional

from nexavisualize.model.graph import GraphStats


class StatusBadge(StrEnum):
    IDLE = "IDLE"
    TRAINING = "TRAINING"
    TRAINED = "TRAINED"


def status_badge(is_training: bool, is_complete: bool) -> StatusBadge:
    if is_complete:
        return StatusBadge.TRAINED
    if is_training:
        return StatusBadge.TRAINING
    return StatusBadge.IDLE


def progress_percent(accuracy: Any) -> float:
    """Accuracy mapped onto [0, 100]; garbage reads as 0."""
    try:
        value = float(accuracy) * 100
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value))


def telemetry_label(fps: Optional[float], stats: Optional[GraphStats]) -> str:
    if fps is None or stats is None or not math.isfinite(fps):
        return "Perf unavailable"
    return f"Perf {round(fps)} FPS • Graph {stats.neuron_count}N/{stats.connection_count}C"
