"""
Generic Placement Laws
======================
Maps (layer, neuron index) to a 3D position for the generic families.

Layers are spread along X; each family decides the Y/Z offset of a neuron
inside its layer. The constants here are presentation tuning, not semantics.
"""
from __future__ import annotations

import math
from typing import Callable

from nexavisualize.config import LAYER_SPACING, NODE_FLOOR_Y
from nexavisualize.model.budget import MIXTURE_EXPERT_GROUPS
from nexavisualize.model.families import ModelFamily
from nexavisualize.model.graph import Position
from nexavisualize.model.layers import LayerConfig

MODEL_SPACING: dict[ModelFamily, float] = {
    ModelFamily.FEED_FORWARD: 3.8,
    ModelFamily.OPERATOR: 4.8,
    ModelFamily.AUTOENCODER: 4.4,
    ModelFamily.MIXTURE: 4.5,
}

# Grid extents of a layer in world units
GRID_SPAN_XY: float = 2.5
GRID_SPAN_Z: float = 1.5

OffsetLaw = Callable[[LayerConfig, int, int, int], tuple[float, float]]


def layer_spacing(family: ModelFamily) -> float:
    return MODEL_SPACING.get(family, LAYER_SPACING)


def layer_x(layer_index: int, layer_count: int, spacing: float) -> float:
    """Center the layer columns around X = 0."""
    return layer_index * spacing - (layer_count - 1) * spacing / 2


def grid_coordinates(index: int, grid_x: int, grid_y: int) -> tuple[int, int, int]:
    x = index % grid_x
    y = (index // grid_x) % grid_y
    z = index // (grid_x * grid_y)
    return x, y, z


def _ring_angle(neuron_index: int, count: int) -> float:
    return (neuron_index / max(1, count)) * math.pi * 2


def _centered(index: int, count: int) -> float:
    """Map index in [0, count) onto [-0.5, 0.5]."""
    return (index - (count - 1) / 2) / max(1, count - 1)


def grid_offset(layer: LayerConfig, layer_index: int, layer_count: int, neuron_index: int) -> tuple[float, float]:
    grid_x, grid_y, grid_z = layer.grid_shape
    spacing_x = GRID_SPAN_XY / (grid_x - 1) if grid_x > 1 else 0.0
    spacing_y = GRID_SPAN_XY / (grid_y - 1) if grid_y > 1 else 0.0
    spacing_z = GRID_SPAN_Z / (grid_z - 1) if grid_z > 1 else 0.0
    x, y, z = grid_coordinates(neuron_index, grid_x, grid_y)
    return (
        y * spacing_y - (grid_y - 1) * spacing_y / 2,
        z * spacing_z - (grid_z - 1) * spacing_z / 2 + x * spacing_x - (grid_x - 1) * spacing_x / 2,
    )


def operator_offset(layer: LayerConfig, layer_index: int, layer_count: int, neuron_index: int) -> tuple[float, float]:
    """Spiral: each layer is a twisted ring, layers bob along a sine."""
    layer_y = math.sin(layer_index * 0.8) * 0.9
    angle = _ring_angle(neuron_index, layer.neurons)
    spiral = (neuron_index / max(1, layer.neurons) - 0.5) * 1.4
    return (
        layer_y + math.sin(angle * 1.8) * 1.0,
        math.cos(angle) * 1.5 + spiral * 0.45,
    )


def autoencoder_offset(layer: LayerConfig, layer_index: int, layer_count: int, neuron_index: int) -> tuple[float, float]:
    """Mirrored: layers narrow towards the center (latent) and widen symmetrically."""
    center = (layer_count - 1) / 2
    distance = abs(layer_index - center)
    layer_y = (1 if layer_index < center else -1) * distance * 0.6
    width_factor = 0.7 + distance * 0.7
    cols = math.ceil(math.sqrt(layer.neurons))
    rows = math.ceil(layer.neurons / cols)
    col = neuron_index % cols
    row = neuron_index // cols
    return (
        layer_y + _centered(row, rows) * width_factor * 2,
        _centered(col, cols) * width_factor * 1.6,
    )


def mixture_offset(layer: LayerConfig, layer_index: int, layer_count: int, neuron_index: int) -> tuple[float, float]:
    """Experts cluster into small rings, gating is a ring, the rest a grid."""
    name = layer.name.lower()
    if "expert" in name:
        group_size = math.ceil(layer.neurons / MIXTURE_EXPERT_GROUPS)
        group = neuron_index // group_size
        local_angle = _ring_angle(neuron_index % group_size, group_size)
        center_y = (group - (MIXTURE_EXPERT_GROUPS - 1) / 2) * 1.15
        center_z = -0.65 if group % 2 == 0 else 0.65
        return (
            center_y + math.sin(local_angle) * 0.3,
            center_z + math.cos(local_angle) * 0.3,
        )
    if "gating" in name:
        angle = _ring_angle(neuron_index, layer.neurons)
        return math.sin(angle) * 0.5, math.cos(angle) * 0.5
    return grid_offset(layer, layer_index, layer_count, neuron_index)


OFFSET_LAWS: dict[ModelFamily, OffsetLaw] = {
    ModelFamily.FEED_FORWARD: grid_offset,
    ModelFamily.OPERATOR: operator_offset,
    ModelFamily.AUTOENCODER: autoencoder_offset,
    ModelFamily.MIXTURE: mixture_offset,
}


def place_neuron(
    family: ModelFamily,
    layer: LayerConfig,
    layer_index: int,
    layer_count: int,
    neuron_index: int,
    spacing: float,
) -> Position:
    law = OFFSET_LAWS.get(family, grid_offset)
    y, z = law(layer, layer_index, layer_count, neuron_index)
    return (
        layer_x(layer_index, layer_count, spacing),
        max(NODE_FLOOR_Y, y),
        z,
    )
