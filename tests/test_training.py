"""
Tests for phase classification and the synthetic training tick.
"""

import math
import random

import pytest

from nexavisualize.model.seeded_random import create_seeded_rng
from nexavisualize.model.training import (
    ACCURACY_CEILING,
    GUIDED_PHASE_COPY,
    LOSS_FLOOR,
    TrainingPhase,
    advance_progress,
    compute_training_tick,
    cycle_length,
    get_training_phase,
)


class TestTrainingPhase:
    """Tests for get_training_phase."""

    @pytest.mark.parametrize("progress, expected", [
        (0.2, TrainingPhase.FORWARD),
        (4.1, TrainingPhase.BACKWARD),
        (8.2, TrainingPhase.UPDATE),
        (float("nan"), TrainingPhase.IDLE),
    ])
    def test_boundaries(self, progress, expected):
        assert get_training_phase(progress, 4) == expected

    def test_exact_boundaries(self):
        assert get_training_phase(0, 4) == TrainingPhase.FORWARD
        assert get_training_phase(4, 4) == TrainingPhase.BACKWARD
        assert get_training_phase(8, 4) == TrainingPhase.UPDATE

    @pytest.mark.parametrize("stage_count", [0, None])
    def test_no_stages_is_idle(self, stage_count):
        assert get_training_phase(1.0, stage_count) == TrainingPhase.IDLE

    @pytest.mark.parametrize("progress", [float("inf"), None, "1.0", True, 10**400])
    def test_non_finite_progress_is_idle(self, progress):
        assert get_training_phase(progress, 4) == TrainingPhase.IDLE

    def test_every_phase_has_copy(self):
        assert set(GUIDED_PHASE_COPY) == set(TrainingPhase)


class TestProgress:
    """Tests for the cyclic progress scalar."""

    def test_cycle_length(self):
        assert cycle_length(4) == 10

    def test_progress_wraps(self):
        assert advance_progress(0.0, 1.0, 4) == 0.0
        assert advance_progress(4.0, 1.0, 4) == pytest.approx(2.0)
        assert advance_progress(20.0, 1.0, 4) == pytest.approx(0.0)
        assert 0.0 <= advance_progress(123.456, 2.5, 7) < cycle_length(7)

    def test_speed_scales_progress(self):
        assert advance_progress(2.0, 2.0, 10) == pytest.approx(2 * advance_progress(2.0, 1.0, 10))

    def test_no_stages(self):
        assert advance_progress(5.0, 1.0, 0) == 0.0


class TestTrainingTick:
    """Tests for compute_training_tick."""

    def test_deterministic_with_equal_generators(self):
        first = compute_training_tick(1.0, 0.1, 0.01, rng=create_seeded_rng(42))
        second = compute_training_tick(1.0, 0.1, 0.01, rng=create_seeded_rng(42))
        assert first == second
        assert first.loss >= LOSS_FLOOR
        assert first.accuracy <= ACCURACY_CEILING

    def test_sequence_is_deterministic(self):
        def run(seed):
            rng = create_seeded_rng(seed)
            loss, accuracy, history = 1.0, 0.1, []
            for _ in range(50):
                tick = compute_training_tick(loss, accuracy, 0.01, rng=rng)
                loss, accuracy = tick.loss, tick.accuracy
                history.append(tick)
            return history

        assert run(7) == run(7)

    def test_loss_decreases_and_accuracy_rises(self):
        rng = create_seeded_rng(2026)
        loss, accuracy = 1.0, 0.1
        for _ in range(100):
            tick = compute_training_tick(loss, accuracy, 0.01, rng=rng)
            loss, accuracy = tick.loss, tick.accuracy
        assert loss < 0.5
        assert accuracy > 0.5

    def test_clamps_hold_across_wide_sweep(self):
        sweep = random.Random(1234)
        rng = create_seeded_rng(99)
        for _ in range(5000):
            tick = compute_training_tick(
                sweep.uniform(-10, 10),
                sweep.uniform(-10, 10),
                sweep.uniform(-5, 5),
                rng=rng,
            )
            assert tick.loss >= LOSS_FLOOR
            assert tick.accuracy <= ACCURACY_CEILING

    def test_completion_flag(self):
        tick = compute_training_tick(0.1, 0.95, 0.01, rng=lambda: 0.5)
        assert tick.complete
        assert tick.accuracy <= ACCURACY_CEILING

    def test_default_generator(self):
        tick = compute_training_tick(1.0, 0.1, 0.01)
        assert math.isfinite(tick.loss)
        assert not tick.complete
