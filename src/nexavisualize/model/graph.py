"""
Architecture Graph (Data Model)
===============================
Positioned nodes and edges produced by the builder, plus the scene contract
they are installed into.

Ownership
---------
A NetworkGraph exclusively owns the nodes and edges it created. Rendering
backends hold resources (actors, GPU buffers) that are not reclaimed by the
garbage collector, so a graph must be released through its scene before it is
dropped. Rebuilds always release the previous graph first and install a fresh
one; a live graph is never mutated incrementally.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from nexavisualize.model.families import ModelFamily

logger = logging.getLogger(__name__)

Position = tuple[float, float, float]


@dataclass(eq=False)
class GraphNode:
    """A single rendered neuron (generic mode) or stage member (legacy mode)."""
    position: Position
    layer_index: int
    neuron_index: int
    tag: str
    color: int
    handle: Any = None  # Assigned by the scene on install


@dataclass(eq=False)
class GraphEdge:
    """A directed connection accepted under the build budget."""
    from_node: GraphNode
    to_node: GraphNode
    from_layer: int
    to_layer: int
    opacity: float
    handle: Any = None

    @property
    def from_neuron(self) -> int:
        return self.from_node.neuron_index

    @property
    def to_neuron(self) -> int:
        return self.to_node.neuron_index


@dataclass(frozen=True)
class GraphStats:
    neuron_count: int = 0
    connection_count: int = 0
    connection_budget: int = 0


@runtime_checkable
class Scene(Protocol):
    """Anything that can host node-like and edge-like primitives."""
    def add_node(self, node: GraphNode) -> Any: ...
    def add_edge(self, edge: GraphEdge) -> Any: ...
    def remove(self, handle: Any) -> None: ...


@dataclass
class NetworkGraph:
    """Result of one build: nodes grouped per layer (or stage column) and edges."""
    family: ModelFamily = ModelFamily.FEED_FORWARD
    layers: list[list[GraphNode]] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    connection_budget: int = 0
    released: bool = False

    @property
    def nodes(self) -> list[GraphNode]:
        return list(itertools.chain.from_iterable(self.layers))

    @property
    def stage_count(self) -> int:
        """Number of animation columns, drives the training phase classifier."""
        return len(self.layers)

    @property
    def stats(self) -> GraphStats:
        return GraphStats(
            neuron_count=sum(len(layer) for layer in self.layers),
            connection_count=len(self.edges),
            connection_budget=self.connection_budget,
        )

    @property
    def tags(self) -> list[str]:
        return [node.tag for node in self.nodes]

    def edges_from_layer(self, layer_index: int) -> list[GraphEdge]:
        return [edge for edge in self.edges if edge.from_layer == layer_index]

    def release(self, scene: Optional[Scene]) -> None:
        """Remove every node and edge from the scene. Safe to call twice."""
        clear_network(scene, self)


def clear_network(scene: Optional[Scene], graph: Optional[NetworkGraph]) -> None:
    """
    Release all scene resources held by a graph.

    Edges go first since they reference node positions.
    """
    if graph is None or graph.released:
        return

    if scene is not None:
        for edge in graph.edges:
            if edge.handle is not None:
                scene.remove(edge.handle)
                edge.handle = None
        for node in graph.nodes:
            if node.handle is not None:
                scene.remove(node.handle)
                node.handle = None

    logger.debug(f"Released graph with {graph.stats.neuron_count} nodes and {len(graph.edges)} edges.")
    graph.layers = []
    graph.edges = []
    graph.released = True


class HeadlessScene:
    """
    In-memory scene used when no renderer is attached (tests, batch tools).

    Handles are plain integers; `objects` maps live handles to the primitive.
    """
    def __init__(self) -> None:
        self.objects: dict[int, GraphNode | GraphEdge] = {}
        self._ids = itertools.count(1)

    def add_node(self, node: GraphNode) -> int:
        handle = next(self._ids)
        self.objects[handle] = node
        return handle

    def add_edge(self, edge: GraphEdge) -> int:
        handle = next(self._ids)
        self.objects[handle] = edge
        return handle

    def remove(self, handle: int) -> None:
        self.objects.pop(handle, None)

    @property
    def node_count(self) -> int:
        return sum(isinstance(obj, GraphNode) for obj in self.objects.values())

    @property
    def edge_count(self) -> int:
        return sum(isinstance(obj, GraphEdge) for obj in self.objects.values())

    def __len__(self) -> int:
        return len(self.objects)
