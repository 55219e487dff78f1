from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Sequence

from nexavisualize.model.families import ModelFamily

if TYPE_CHECKING:
    from nexavisualize.model.budget import EdgeBudget
    from nexavisualize.model.graph import NetworkGraph, Scene
    from nexavisualize.model.layers import LayerConfig
    from nexavisualize.model.seeded_random import RandomSource

# Every variant shares one contract: (scene, family, layers, budget, rng) -> graph
GraphBuilder = Callable[
    ["Scene", ModelFamily, "Sequence[LayerConfig]", "EdgeBudget", "RandomSource"],
    "NetworkGraph",
]

_REGISTRY: dict[ModelFamily, GraphBuilder] = {}


def register_builder(*families: ModelFamily) -> Callable[[GraphBuilder], GraphBuilder]:
    """Function decorator registering a builder for one or more families."""
    if not families:
        raise ValueError("register_builder needs at least one ModelFamily")

    def decorator(func: GraphBuilder) -> GraphBuilder:
        for family in families:
            _REGISTRY[ModelFamily(family)] = func
        return func

    return decorator


def get_builder(family: ModelFamily) -> GraphBuilder:
    func: Optional[GraphBuilder] = _REGISTRY.get(family)
    if func is None:
        raise KeyError(f"No builder registered for family '{family}'")
    return func


def list_families() -> list[ModelFamily]:
    return list(_REGISTRY.keys())
