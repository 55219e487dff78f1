"""
Tests for the legacy stage blueprints.
"""

from collections import Counter

import pytest

from nexavisualize.model.builder import build_network
from nexavisualize.model.families import LEGACY_FAMILIES, ModelFamily
from nexavisualize.model.graph import HeadlessScene
from nexavisualize.model.layers import LayerSpec, derive_layer_configs
from nexavisualize.model.legacy_stages import (
    LinkPattern,
    StageShape,
    StageSpec,
    blueprint_for,
    derive_encoder_blocks,
    derive_expert_count,
    derive_recurrent_steps,
    link_pairs,
    round_half_up,
    stage_positions,
)


def configs(*neurons, names=None):
    names = names or [f"L{i}" for i in range(len(neurons))]
    return derive_layer_configs([LayerSpec(name=name, neurons=n) for name, n in zip(names, neurons)])


class TestDerivations:
    """The three values legacy topologies read from the layer list."""

    @pytest.mark.parametrize("max_neurons, steps", [(1, 4), (8, 4), (9, 5), (12, 6), (16, 8), (64, 8)])
    def test_recurrent_steps(self, max_neurons, steps):
        assert derive_recurrent_steps(configs(2, max_neurons)) == steps

    def test_recurrent_steps_without_layers(self):
        assert derive_recurrent_steps([]) == 4

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(4.5) == 5

    def test_expert_count_from_named_layer(self):
        assert derive_expert_count(configs(4, 6, 2, names=["In", "Experts", "Out"])) == 6
        assert derive_expert_count(configs(4, 30, names=["In", "Expert Pool"])) == 8
        assert derive_expert_count(configs(4, 1, names=["In", "expert"])) == 2

    def test_expert_count_default(self):
        assert derive_expert_count(configs(4, 8)) == 4

    def test_encoder_blocks(self):
        names = ["Tokens", "Self-Attention 1", "Self-Attention 2", "Self-Attention 3", "Out"]
        assert derive_encoder_blocks(configs(4, 4, 4, 4, 4, names=names)) == 3
        assert derive_encoder_blocks(configs(4, 4)) == 2


class TestStageGeometry:
    """Stage shapes and link expansion."""

    @pytest.mark.parametrize("shape", list(StageShape))
    def test_positions_match_count(self, shape):
        stage = StageSpec("s", shape, 5, 0xFFFFFF, (1.0, 2.0, 3.0), "t", 0)
        positions = stage_positions(stage)
        expected = 1 if shape == StageShape.SINGLE else 5
        assert len(positions) == expected
        assert all(p[0] == 1.0 for p in positions)

    def test_paired_links(self):
        assert link_pairs(LinkPattern.PAIRED, 3, 3) == [(0, 0), (1, 1), (2, 2)]
        assert link_pairs(LinkPattern.PAIRED, 1, 4) == [(0, 0)]

    def test_all_links(self):
        assert len(link_pairs(LinkPattern.ALL, 3, 4)) == 12

    def test_unknown_stage_name(self):
        blueprint = blueprint_for(ModelFamily.GAN, [])
        with pytest.raises(KeyError):
            blueprint.stage("missing")


class TestLegacyBuilds:
    """Fixed topologies realized through the generic stage routine."""

    def test_gan_has_one_generator_and_one_discriminator(self):
        for layers in ([], configs(4, 8, 2), configs(64, 64, 64, 64)):
            graph = build_network(HeadlessScene(), layers, ModelFamily.GAN, seed=1)
            tags = Counter(graph.tags)
            assert tags["generator"] == 1
            assert tags["discriminator"] == 1

    @pytest.mark.parametrize("family", [ModelFamily.CNN, ModelFamily.GAN])
    def test_neuron_counts_are_ignored(self, family):
        small = build_network(HeadlessScene(), [{"neurons": 2}, {"neurons": 3}], family)
        large = build_network(HeadlessScene(), [{"neurons": 60}] * 6, family)
        assert small.stats == large.stats

    @pytest.mark.parametrize("family", [ModelFamily.RNN, ModelFamily.LSTM, ModelFamily.GRU])
    def test_recurrent_columns_follow_steps(self, family):
        graph = build_network(HeadlessScene(), [{"neurons": 12}], family)
        assert graph.stage_count == 6
        assert Counter(graph.tags)["input"] == 6

    def test_lstm_gates_and_cells(self):
        graph = build_network(HeadlessScene(), [{"neurons": 8}], ModelFamily.LSTM)
        tags = Counter(graph.tags)
        assert tags["gate"] == 4 * 3
        assert tags["cell"] == 4

    def test_gru_gates(self):
        graph = build_network(HeadlessScene(), [{"neurons": 8}], ModelFamily.GRU)
        assert Counter(graph.tags)["gate"] == 4 * 2

    def test_transformer_blocks_add_columns(self):
        names = ["Tokens", "Self-Attention 1", "Self-Attention 2", "Self-Attention 3", "Out"]
        graph = build_network(HeadlessScene(), configs(4, 4, 4, 4, 4, names=names), ModelFamily.TRANSFORMER)
        assert graph.stage_count == 3 + 2 * 3
        assert Counter(graph.tags)["attention"] == 3 * 8

    def test_mixture_expert_rings(self):
        layers = [{"name": "Experts", "neurons": 6}]
        graph = build_network(HeadlessScene(), layers, ModelFamily.LEGACY_MIXTURE)
        assert Counter(graph.tags)["expert"] == 6 * 3

    @pytest.mark.parametrize("family", sorted(LEGACY_FAMILIES))
    def test_blueprint_links_reference_known_stages(self, family):
        blueprint = blueprint_for(family, [])
        names = {stage.name for stage in blueprint.stages}
        for link in blueprint.links:
            assert link.source in names
            assert link.target in names

    @pytest.mark.parametrize("family", sorted(LEGACY_FAMILIES))
    def test_every_column_has_nodes(self, family):
        graph = build_network(HeadlessScene(), [], family)
        assert graph.stage_count > 0
        assert all(graph.layers)

    def test_legacy_edges_are_deterministic(self):
        first = build_network(HeadlessScene(), [], ModelFamily.TRANSFORMER, seed=1)
        second = build_network(HeadlessScene(), [], ModelFamily.TRANSFORMER, seed=2)
        assert first.stats == second.stats
