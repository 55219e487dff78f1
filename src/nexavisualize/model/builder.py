"""
Procedural Graph Builder
========================
Turns a layer list and a model family into a positioned, budget-bounded graph
and installs it into a scene.

Why is this file needed?
------------------------
1. Dispatch: Each ModelFamily maps to one builder function through the
   registry (generic grid-and-density, or a legacy stage blueprint).
2. Budget: Every edge goes through one EdgeBudget, so the realized edge count
   never exceeds the ceiling, whichever variant runs.
3. Headless use: A missing scene yields an empty graph instead of an error.

Functions:
    build_network: Public entry point.
    instantiate_blueprint: Generic routine for legacy stage tables.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Optional, Sequence

from nexavisualize.config import EDGE_OPACITY
from nexavisualize.model.budget import (
    EdgeBudget,
    acceptance_probability,
    base_density,
    budget_density,
    resolve_budget,
    total_possible_connections,
)
from nexavisualize.model.families import ModelFamily, resolve_family
from nexavisualize.model.graph import GraphEdge, GraphNode, NetworkGraph, Scene
from nexavisualize.model.layers import LayerConfig, derive_layer_configs
from nexavisualize.model.legacy_stages import LegacyBlueprint, blueprint_for, link_pairs, stage_positions
from nexavisualize.model.placement import layer_spacing, place_neuron
from nexavisualize.model.registry import get_builder, register_builder
from nexavisualize.model.seeded_random import RandomSource, create_seeded_rng

logger = logging.getLogger(__name__)

SKIP_CONNECTION_PROBABILITY: float = 0.35
SKIP_CONNECTION_OPACITY: float = 0.12


def build_network(
    scene: Optional[Scene],
    layers: Any,
    family: Any = ModelFamily.FEED_FORWARD,
    rng: Optional[RandomSource] = None,
    seed: Any = None,
    max_connections: Any = None,
) -> NetworkGraph:
    """
    Build a graph and install its nodes and edges into the scene.

    Args:
        scene: Target scene. None returns an empty graph.
        layers: Ordered LayerSpecs (or mappings); coerced with coerce_layers.
        family: ModelFamily, or any alias accepted by resolve_family.
        rng: Random source for edge acceptance. Takes precedence over seed.
        seed: Seed for a fresh per-build generator when rng is not given.
        max_connections: Optional budget override.

    Returns:
        NetworkGraph owning everything that was added to the scene.
    """
    resolved = resolve_family(family)
    budget = EdgeBudget(ceiling=resolve_budget(resolved, max_connections))

    if scene is None:
        logger.warning("No scene attached, returning an empty graph.")
        return NetworkGraph(family=resolved, connection_budget=budget.ceiling)

    configs = derive_layer_configs(layers)
    random_source = rng if callable(rng) else create_seeded_rng(seed)

    graph = get_builder(resolved)(scene, resolved, configs, budget, random_source)

    stats = graph.stats
    logger.info(
        f"Built {resolved} graph: {stats.neuron_count} nodes, "
        f"{stats.connection_count}/{stats.connection_budget} connections."
    )
    return graph


# ------------------------------------------------------------------------------
# Shared helpers
# ------------------------------------------------------------------------------

def _add_node(scene: Scene, graph: NetworkGraph, node: GraphNode) -> GraphNode:
    while len(graph.layers) <= node.layer_index:
        graph.layers.append([])
    node.handle = scene.add_node(node)
    graph.layers[node.layer_index].append(node)
    return node


def _add_edge(
    scene: Scene,
    graph: NetworkGraph,
    budget: EdgeBudget,
    from_node: GraphNode,
    to_node: GraphNode,
    opacity: float = EDGE_OPACITY,
) -> Optional[GraphEdge]:
    if not budget.try_consume():
        return None
    edge = GraphEdge(
        from_node=from_node,
        to_node=to_node,
        from_layer=from_node.layer_index,
        to_layer=to_node.layer_index,
        opacity=opacity,
    )
    edge.handle = scene.add_edge(edge)
    graph.edges.append(edge)
    return edge


def _role_tag(layer_index: int, layer_count: int) -> str:
    if layer_index == 0:
        return "input"
    if layer_index == layer_count - 1:
        return "output"
    return "hidden"


# ------------------------------------------------------------------------------
# Generic mode
# ------------------------------------------------------------------------------

@register_builder(
    ModelFamily.FEED_FORWARD,
    ModelFamily.OPERATOR,
    ModelFamily.AUTOENCODER,
    ModelFamily.MIXTURE,
)
def build_generic(
    scene: Scene,
    family: ModelFamily,
    layers: Sequence[LayerConfig],
    budget: EdgeBudget,
    rng: RandomSource,
) -> NetworkGraph:
    """Place every neuron of every layer, then sample edges between adjacent layers."""
    graph = NetworkGraph(family=family, connection_budget=budget.ceiling)
    if not layers:
        return graph

    spacing = layer_spacing(family)
    layer_count = len(layers)

    # --- 1. NODES ---
    for layer_index, layer in enumerate(layers):
        graph.layers.append([])
        tag = _role_tag(layer_index, layer_count)
        for neuron_index in range(layer.neurons):
            position = place_neuron(family, layer, layer_index, layer_count, neuron_index, spacing)
            _add_node(scene, graph, GraphNode(
                position=position,
                layer_index=layer_index,
                neuron_index=neuron_index,
                tag=tag,
                color=layer.color,
            ))

    # --- 2. ADJACENT EDGES ---
    global_density = budget_density(budget.ceiling, total_possible_connections(layers))
    for layer_index in range(layer_count - 1):
        if budget.exhausted:
            break
        from_layer, to_layer = layers[layer_index], layers[layer_index + 1]
        from_nodes, to_nodes = graph.layers[layer_index], graph.layers[layer_index + 1]
        pair_density = base_density(len(from_nodes), len(to_nodes))

        for from_node in from_nodes:
            for to_node in to_nodes:
                probability = acceptance_probability(
                    family, from_layer, to_layer,
                    from_node.neuron_index, to_node.neuron_index,
                    pair_density, global_density,
                )
                if budget.accept(probability, rng):
                    _add_edge(scene, graph, budget, from_node, to_node)

    # --- 3. MIRRORED SKIP PATHS ---
    if family == ModelFamily.AUTOENCODER:
        _add_mirror_connections(scene, graph, budget, rng)

    return graph


def _add_mirror_connections(scene: Scene, graph: NetworkGraph, budget: EdgeBudget, rng: RandomSource) -> None:
    """Link encoder layer i to its decoder mirror L-1-i, sharing the build budget."""
    layer_count = len(graph.layers)
    for left in range(layer_count // 2 - 1):
        if budget.exhausted:
            break
        right = layer_count - 1 - left
        if right <= left + 1:
            continue
        left_nodes, right_nodes = graph.layers[left], graph.layers[right]
        for index, left_node in enumerate(left_nodes):
            if budget.exhausted:
                break
            target = int(index / max(1, len(left_nodes) - 1) * max(0, len(right_nodes) - 1))
            if target < len(right_nodes) and rng() < SKIP_CONNECTION_PROBABILITY:
                _add_edge(scene, graph, budget, left_node, right_nodes[target], SKIP_CONNECTION_OPACITY)


# ------------------------------------------------------------------------------
# Legacy mode
# ------------------------------------------------------------------------------

@register_builder(
    ModelFamily.CNN,
    ModelFamily.TRANSFORMER,
    ModelFamily.RNN,
    ModelFamily.LSTM,
    ModelFamily.GRU,
    ModelFamily.GAN,
    ModelFamily.LEGACY_MIXTURE,
)
def build_legacy(
    scene: Scene,
    family: ModelFamily,
    layers: Sequence[LayerConfig],
    budget: EdgeBudget,
    rng: RandomSource,
) -> NetworkGraph:
    """Fixed stage topology; caller neuron counts only feed the blueprint derivations."""
    return instantiate_blueprint(scene, blueprint_for(family, layers), budget)


def instantiate_blueprint(scene: Scene, blueprint: LegacyBlueprint, budget: EdgeBudget) -> NetworkGraph:
    """
    Create the nodes of every stage, then expand each named link.

    Links are deterministic (no sampling) but still stop at the budget ceiling.
    """
    graph = NetworkGraph(family=blueprint.family, connection_budget=budget.ceiling)
    graph.layers = [[] for _ in range(blueprint.layer_count)]

    stage_nodes: dict[str, list[GraphNode]] = {}
    column_counts: dict[int, int] = defaultdict(int)

    for stage in blueprint.stages:
        nodes = []
        for position in stage_positions(stage):
            nodes.append(_add_node(scene, graph, GraphNode(
                position=position,
                layer_index=stage.layer,
                neuron_index=column_counts[stage.layer],
                tag=stage.tag,
                color=stage.color,
            )))
            column_counts[stage.layer] += 1
        stage_nodes[stage.name] = nodes

    for link in blueprint.links:
        if budget.exhausted:
            logger.debug(f"Budget of {budget.ceiling} reached in {blueprint.family} blueprint.")
            break
        sources = stage_nodes[link.source]
        targets = stage_nodes[link.target]
        for source_index, target_index in link_pairs(link.pattern, len(sources), len(targets)):
            if _add_edge(scene, graph, budget, sources[source_index], targets[target_index], link.opacity) is None:
                break

    return graph
