"""
Layer Specifications
====================
User-facing layer descriptions and the derived placement configuration
(grid shape and color) consumed by the graph builder.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Iterable, Mapping, Sequence

from nexavisualize.config import LAYER_PALETTE, MAX_NEURONS_PER_LAYER

logger = logging.getLogger(__name__)


class Activation(StrEnum):
    RELU = "ReLU"
    SIGMOID = "Sigmoid"
    TANH = "Tanh"
    LINEAR = "Linear"
    SOFTMAX = "Softmax"


GridShape = tuple[int, int, int]


@dataclass
class LayerSpec:
    """One layer as edited by the user."""
    name: str
    neurons: int
    activation: Activation = Activation.RELU


@dataclass(frozen=True)
class LayerConfig:
    """A LayerSpec enriched with its placement grid and color."""
    name: str
    neurons: int
    activation: Activation
    grid_shape: GridShape
    color: int

    @property
    def capacity(self) -> int:
        gx, gy, gz = self.grid_shape
        return gx * gy * gz


def derive_grid_shape(neurons: int) -> GridShape:
    """Choose a 3D grid whose capacity always covers the neuron count."""
    if neurons <= 4:
        return 2, 2, 1
    if neurons <= 9:
        return 3, 3, 1
    if neurons <= 16:
        return 4, 4, 1
    if neurons <= 36:
        return 6, 6, 1
    return 8, 8, math.ceil(neurons / 64)


def layer_color(index: int) -> int:
    return LAYER_PALETTE[index % len(LAYER_PALETTE)]


def clamp_neurons(value: Any) -> int:
    """Clamp a neuron count into [1, MAX_NEURONS_PER_LAYER]."""
    if isinstance(value, int) and not isinstance(value, bool):
        return max(1, min(MAX_NEURONS_PER_LAYER, value))
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(number):
        return 1
    return max(1, min(MAX_NEURONS_PER_LAYER, int(number)))


def _coerce_activation(value: Any) -> Activation:
    try:
        return Activation(value)
    except ValueError:
        return Activation.RELU


def coerce_layer(item: Any, index: int = 0) -> LayerSpec | None:
    """Turn a LayerSpec or a mapping into a valid LayerSpec, or None if unusable."""
    if isinstance(item, LayerSpec):
        raw_name, raw_neurons, raw_activation = item.name, item.neurons, item.activation
    elif isinstance(item, Mapping):
        raw_neurons = item.get("neurons")
        if raw_neurons is None:
            return None
        raw_name = item.get("name", f"Layer {index + 1}")
        raw_activation = item.get("activation", Activation.RELU)
    else:
        return None

    return LayerSpec(
        name=str(raw_name),
        neurons=clamp_neurons(raw_neurons),
        activation=_coerce_activation(raw_activation),
    )


def coerce_layers(raw: Any) -> list[LayerSpec]:
    """
    Convert an arbitrary layer list into LayerSpecs.

    Non-sequences become an empty list; unusable items are dropped.
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (Sequence, Iterable)):
        if raw is not None:
            logger.warning(f"Layer list of type {type(raw).__name__} ignored.")
        return []

    layers: list[LayerSpec] = []
    for index, item in enumerate(raw):
        layer = coerce_layer(item, index)
        if layer is None:
            logger.debug(f"Dropping invalid layer entry at index {index}: {item!r}")
            continue
        layers.append(layer)
    return layers


def derive_layer_configs(layers: Any) -> list[LayerConfig]:
    """Attach grid shape and palette color to every layer."""
    configs = []
    for index, layer in enumerate(coerce_layers(layers)):
        configs.append(LayerConfig(
            name=layer.name,
            neurons=layer.neurons,
            activation=layer.activation,
            grid_shape=derive_grid_shape(layer.neurons),
            color=layer_color(index),
        ))
    return configs
