"""
Tests for the procedural graph builder.
"""

import pytest

from nexavisualize.model.builder import SKIP_CONNECTION_OPACITY, build_network
from nexavisualize.model.families import ModelFamily
from nexavisualize.model.graph import HeadlessScene, NetworkGraph
from nexavisualize.model.layers import LayerSpec
from nexavisualize.model.registry import get_builder, list_families, register_builder
from nexavisualize.model.seeded_random import create_seeded_rng
from nexavisualize.model.state import MODEL_PRESETS

GENERIC_FAMILIES = [
    ModelFamily.FEED_FORWARD,
    ModelFamily.OPERATOR,
    ModelFamily.AUTOENCODER,
    ModelFamily.MIXTURE,
]


def edge_signature(graph):
    return [(e.from_layer, e.from_neuron, e.to_layer, e.to_neuron) for e in graph.edges]


class TestBudgetCeiling:
    """The realized edge count never exceeds the budget."""

    def test_override_of_ten(self, scene):
        layers = [{"neurons": 8}, {"neurons": 8}, {"neurons": 8}]
        graph = build_network(scene, layers, ModelFamily.FEED_FORWARD, seed=7, max_connections=10)
        assert graph.stats.connection_count <= 10
        assert graph.stats.connection_budget == 10

    @pytest.mark.parametrize("family", list(ModelFamily))
    def test_small_budget_every_family(self, family):
        graph = build_network(HeadlessScene(), MODEL_PRESETS[family], family, seed=3, max_connections=5)
        assert graph.stats.connection_count <= 5

    @pytest.mark.parametrize("family", list(ModelFamily))
    def test_default_budget_every_family(self, family):
        layers = [LayerSpec(name=f"L{i}", neurons=64) for i in range(6)]
        graph = build_network(HeadlessScene(), layers, family, seed=11)
        assert graph.stats.connection_count <= graph.connection_budget


class TestEdgeCases:
    """Empty inputs and missing scenes."""

    def test_zero_layers(self, scene):
        graph = build_network(scene, [], ModelFamily.FEED_FORWARD)
        assert graph.stats.neuron_count == 0
        assert graph.stats.connection_count == 0
        assert len(scene) == 0

    def test_garbage_layers(self, scene):
        graph = build_network(scene, "not a list", ModelFamily.OPERATOR)
        assert graph.nodes == []

    def test_missing_scene_returns_empty_graph(self, small_layers):
        graph = build_network(None, small_layers, ModelFamily.FEED_FORWARD)
        assert isinstance(graph, NetworkGraph)
        assert graph.stats.neuron_count == 0
        assert graph.connection_budget > 0

    def test_unknown_family_uses_feed_forward(self, scene, small_layers):
        graph = build_network(scene, small_layers, "hypernetwork")
        assert graph.family == ModelFamily.FEED_FORWARD

    def test_family_aliases(self, scene, small_layers):
        assert build_network(scene, small_layers, "MoE").family == ModelFamily.MIXTURE


class TestGenericBuild:
    """Generic grid-and-density construction."""

    @pytest.mark.parametrize("family", GENERIC_FAMILIES)
    def test_every_neuron_is_placed(self, family, scene, small_layers):
        graph = build_network(scene, small_layers, family, seed=1)
        assert graph.stats.neuron_count == 24
        assert graph.stage_count == 3
        assert scene.node_count == 24
        assert scene.edge_count == graph.stats.connection_count

    def test_edges_only_between_adjacent_layers(self, scene, small_layers):
        graph = build_network(scene, small_layers, ModelFamily.FEED_FORWARD, seed=1)
        assert graph.edges
        assert all(e.to_layer == e.from_layer + 1 for e in graph.edges)

    def test_role_tags(self, scene, small_layers):
        graph = build_network(scene, small_layers, ModelFamily.FEED_FORWARD, seed=1)
        assert {n.tag for n in graph.layers[0]} == {"input"}
        assert {n.tag for n in graph.layers[1]} == {"hidden"}
        assert {n.tag for n in graph.layers[2]} == {"output"}

    @pytest.mark.parametrize("family", GENERIC_FAMILIES)
    def test_equal_seeds_build_identical_graphs(self, family):
        first = build_network(HeadlessScene(), MODEL_PRESETS[family], family, seed=99)
        second = build_network(HeadlessScene(), MODEL_PRESETS[family], family, seed=99)
        assert edge_signature(first) == edge_signature(second)
        assert [n.position for n in first.nodes] == [n.position for n in second.nodes]

    def test_explicit_rng_takes_precedence(self, small_layers):
        first = build_network(HeadlessScene(), small_layers, rng=create_seeded_rng(5), seed=1)
        second = build_network(HeadlessScene(), small_layers, rng=create_seeded_rng(5), seed=2)
        assert edge_signature(first) == edge_signature(second)

    def test_nodes_stay_above_floor(self):
        layers = [LayerSpec(name=str(i), neurons=64) for i in range(4)]
        for family in GENERIC_FAMILIES:
            graph = build_network(HeadlessScene(), layers, family, seed=4)
            assert min(n.position[1] for n in graph.nodes) >= -7.5

    def test_autoencoder_skip_paths_link_mirrored_layers(self):
        found = False
        for seed in range(1, 6):
            graph = build_network(HeadlessScene(), MODEL_PRESETS[ModelFamily.AUTOENCODER], ModelFamily.AUTOENCODER, seed=seed)
            skips = [e for e in graph.edges if e.to_layer > e.from_layer + 1]
            for edge in skips:
                assert edge.opacity == SKIP_CONNECTION_OPACITY
                assert edge.from_layer + edge.to_layer == graph.stage_count - 1
            found = found or bool(skips)
        assert found


class TestRelease:
    """Graph ownership and teardown."""

    def test_release_empties_scene(self, scene, small_layers):
        graph = build_network(scene, small_layers, ModelFamily.FEED_FORWARD, seed=1)
        assert len(scene) > 0
        graph.release(scene)
        assert len(scene) == 0
        assert graph.released
        assert graph.nodes == [] and graph.edges == []

    def test_release_twice_is_harmless(self, scene, small_layers):
        graph = build_network(scene, small_layers, seed=1)
        graph.release(scene)
        graph.release(scene)
        assert len(scene) == 0

    def test_rebuild_and_swap_does_not_leak(self, scene, small_layers):
        graph = build_network(scene, small_layers, seed=1)
        for family in ModelFamily:
            graph.release(scene)
            graph = build_network(scene, MODEL_PRESETS[family], family, seed=1)
            assert len(scene) == graph.stats.neuron_count + graph.stats.connection_count


class TestRegistry:
    """Dispatch table for builder variants."""

    def test_every_family_is_registered(self):
        assert set(list_families()) == set(ModelFamily)

    def test_generic_and_legacy_variants_differ(self):
        assert get_builder(ModelFamily.FEED_FORWARD) is not get_builder(ModelFamily.CNN)

    def test_register_requires_a_family(self):
        with pytest.raises(ValueError):
            register_builder()
