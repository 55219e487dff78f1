"""
Training Loop
=============
Drives the synthetic training simulation from a QTimer.

Why is this file needed?
------------------------
1. Cadence: One tick per interval, where the interval shrinks as the
   animation speed grows.
2. Cancellation: `stop()` halts the timer synchronously, so no tick can land
   after it returns. Calling it twice is harmless.
3. Signals: The window listens to `ticked` and `completed` instead of polling.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from nexavisualize.config import BASE_TICK_INTERVAL_MS
from nexavisualize.model.seeded_random import RandomSource, create_seeded_rng
from nexavisualize.model.state import TrainingStatus, VisualizerState
from nexavisualize.model.training import compute_training_tick

logger = logging.getLogger(__name__)


def tick_interval_ms(speed: float) -> int:
    """Timer interval for an animation speed; non-positive speeds fall back to 1x."""
    if not speed or speed <= 0:
        speed = 1.0
    return max(1, round(BASE_TICK_INTERVAL_MS / speed))


class TrainingLoop(QObject):
    ticked = Signal(object)  # TrainingStatus
    completed = Signal(object)  # TrainingStatus

    def __init__(self, state: VisualizerState, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.state = state
        self._rng: RandomSource = create_seeded_rng(state.seed)

        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms(state.animation_speed))
        self._timer.timeout.connect(self.step)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @property
    def interval(self) -> int:
        return self._timer.interval()

    def start(self) -> None:
        """Begin a fresh run: counters reset and the generator is reseeded."""
        self.state.start_training()
        self._rng = create_seeded_rng(self.state.seed)
        self._timer.setInterval(tick_interval_ms(self.state.animation_speed))
        self._timer.start()
        logger.info(f"Training started (lr={self.state.training_params.learning_rate}).")

    def stop(self) -> None:
        if not self._timer.isActive() and not self.state.training.is_training:
            return
        self._timer.stop()
        self.state.stop_training()
        logger.info(f"Training stopped at epoch {self.state.training.epoch}.")

    def reset(self) -> None:
        self._timer.stop()
        self.state.reset_training()

    def set_speed(self, speed: float) -> None:
        self.state.animation_speed = speed
        self._timer.setInterval(tick_interval_ms(speed))

    def step(self) -> TrainingStatus:
        """Apply one simulated batch to the state."""
        status = self.state.training
        if status.is_complete:
            self._timer.stop()
            return status

        tick = compute_training_tick(
            status.loss,
            status.accuracy,
            self.state.training_params.learning_rate,
            rng=self._rng,
        )
        status = self.state.apply_tick(tick)
        self.ticked.emit(status)

        if status.is_complete:
            self._timer.stop()
            self.completed.emit(status)
        return status
