"""
Tests for the Qt controllers (rebuild-and-swap, training loop).
"""

import pytest

from nexavisualize.config import BASE_TICK_INTERVAL_MS
from nexavisualize.controller.network_controller import NetworkController
from nexavisualize.controller.training_loop import TrainingLoop, tick_interval_ms
from nexavisualize.model.families import ModelFamily


class TestNetworkController:
    """Tests for rebuild-and-swap."""

    def test_rebuild_installs_graph(self, qapp, state, scene):
        controller = NetworkController(state, scene)
        received = []
        controller.graph_rebuilt.connect(received.append)

        graph = controller.rebuild_now()
        assert received == [graph]
        assert len(scene) == graph.stats.neuron_count + graph.stats.connection_count

    def test_rebuild_releases_previous_graph(self, qapp, state, scene):
        controller = NetworkController(state, scene)
        first = controller.rebuild_now()
        state.apply_preset(ModelFamily.CNN)
        second = controller.rebuild_now()

        assert first.released
        assert not second.released
        assert len(scene) == second.stats.neuron_count + second.stats.connection_count

    def test_schedule_is_debounced(self, qapp, state, scene):
        controller = NetworkController(state, scene)
        controller.schedule_rebuild()
        controller.schedule_rebuild()
        assert controller.rebuild_pending
        assert controller.graph is None

        controller.rebuild_now()
        assert not controller.rebuild_pending

    def test_release(self, qapp, state, scene):
        controller = NetworkController(state, scene)
        controller.rebuild_now()
        controller.release()
        controller.release()
        assert controller.graph is None
        assert len(scene) == 0

    def test_headless_controller(self, qapp, state):
        controller = NetworkController(state, None)
        graph = controller.rebuild_now()
        assert graph.stats.neuron_count == 0


class TestTrainingLoop:
    """Tests for the timer-driven simulation."""

    @pytest.mark.parametrize("speed, expected", [(1.0, 200), (2.0, 100), (0.5, 400), (3.0, 67)])
    def test_interval_inverse_to_speed(self, speed, expected):
        assert tick_interval_ms(speed) == expected

    def test_invalid_speed_falls_back(self):
        assert tick_interval_ms(0) == BASE_TICK_INTERVAL_MS
        assert tick_interval_ms(-2) == BASE_TICK_INTERVAL_MS

    def test_start_and_stop(self, qapp, state):
        loop = TrainingLoop(state)
        loop.start()
        assert loop.is_running
        assert state.training.is_training

        loop.stop()
        assert not loop.is_running
        assert not state.training.is_training

    def test_stop_is_idempotent(self, qapp, state):
        loop = TrainingLoop(state)
        loop.stop()
        loop.start()
        loop.stop()
        loop.stop()
        assert not loop.is_running

    def test_set_speed_updates_interval(self, qapp, state):
        loop = TrainingLoop(state)
        loop.set_speed(4.0)
        assert loop.interval == 50
        assert state.animation_speed == 4.0

    def test_step_applies_tick(self, qapp, state):
        loop = TrainingLoop(state)
        ticks = []
        loop.ticked.connect(ticks.append)
        loop.start()
        status = loop.step()
        loop.stop()

        assert status.batch == 1
        assert status.loss < 1.0
        assert len(ticks) == 1

    def test_runs_are_reproducible(self, qapp, state):
        loop = TrainingLoop(state)

        def run():
            loop.start()
            history = [(s.loss, s.accuracy) for s in (loop.step() for _ in range(20))]
            loop.stop()
            return history

        assert run() == run()

    def test_completion_stops_the_timer(self, qapp, state):
        state.training_params.learning_rate = 0.04
        loop = TrainingLoop(state)
        completed = []
        loop.completed.connect(completed.append)
        loop.start()
        for _ in range(500):
            if state.training.is_complete:
                break
            loop.step()

        assert state.training.is_complete
        assert not loop.is_running
        assert len(completed) == 1

    def test_reset(self, qapp, state):
        loop = TrainingLoop(state)
        loop.start()
        loop.step()
        loop.reset()
        assert not loop.is_running
        assert state.training.batch == 0
