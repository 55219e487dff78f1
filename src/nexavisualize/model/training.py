"""
Training Simulation
===================
Phase classification for the training animation and the synthetic
loss/accuracy random walk. No real learning happens here.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional

from nexavisualize.model.seeded_random import RandomSource

LOSS_FLOOR: float = 0.001
ACCURACY_CEILING: float = 0.92
ACCURACY_TARGET: float = 0.9
LOSS_DECAY_GAIN: float = 20.0
ACCURACY_GAIN: float = 15.0
LOSS_NOISE: float = 0.01
ACCURACY_NOISE: float = 0.005


class TrainingPhase(StrEnum):
    IDLE = "idle"
    FORWARD = "forward"
    BACKWARD = "backward"
    UPDATE = "update"


@dataclass(frozen=True)
class PhaseCopy:
    title: str
    description: str


GUIDED_PHASE_COPY: dict[TrainingPhase, PhaseCopy] = {
    TrainingPhase.IDLE: PhaseCopy(
        "Ready",
        "Choose a preset and start training to see learning dynamics in motion.",
    ),
    TrainingPhase.FORWARD: PhaseCopy(
        "Forward Pass",
        "Signals move from input to output to produce predictions.",
    ),
    TrainingPhase.BACKWARD: PhaseCopy(
        "Backward Pass",
        "Error gradients flow backward to identify which weights need correction.",
    ),
    TrainingPhase.UPDATE: PhaseCopy(
        "Weight Update",
        "The optimizer adjusts weights to reduce future loss.",
    ),
}


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def cycle_length(stage_count: int) -> int:
    """Period of the progress scalar: forward + backward + a 2-unit update flash."""
    return 2 * stage_count + 2


def get_training_phase(progress: Any, stage_count: Any) -> TrainingPhase:
    """Purely positional: no hysteresis, no memory of the previous phase."""
    if not stage_count or not _is_finite_number(progress):
        return TrainingPhase.IDLE
    if progress < stage_count:
        return TrainingPhase.FORWARD
    if progress < stage_count * 2:
        return TrainingPhase.BACKWARD
    return TrainingPhase.UPDATE


def advance_progress(elapsed_seconds: float, speed: float, stage_count: int) -> float:
    """Progress scalar for a wall-clock time, wrapped into one cycle."""
    if stage_count <= 0:
        return 0.0
    return (elapsed_seconds * speed * 0.5) % cycle_length(stage_count)


@dataclass(frozen=True)
class TrainingTick:
    loss: float
    accuracy: float
    complete: bool


def compute_training_tick(
    previous_loss: float,
    previous_accuracy: float,
    learning_rate: float,
    rng: Optional[RandomSource] = None,
) -> TrainingTick:
    """
    Next sample of the synthetic loss/accuracy curves.

    The clamps hold for any learning rate; the curve itself may still oscillate
    or diverge for unreasonable rates, so callers should reject non-positive ones.
    """
    draw = rng if callable(rng) else random.random

    decay = 1 - learning_rate * LOSS_DECAY_GAIN
    loss_noise = (draw() - 0.5) * LOSS_NOISE
    next_loss = max(LOSS_FLOOR, previous_loss * decay + loss_noise)

    improvement = (ACCURACY_TARGET - previous_accuracy) * learning_rate * ACCURACY_GAIN
    accuracy_noise = (draw() - 0.5) * ACCURACY_NOISE
    next_accuracy = min(ACCURACY_CEILING, previous_accuracy + improvement + accuracy_noise)

    return TrainingTick(
        loss=next_loss,
        accuracy=next_accuracy,
        complete=next_accuracy >= ACCURACY_TARGET,
    )
