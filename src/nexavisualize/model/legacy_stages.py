"""
Legacy Stage Tables
===================
Hand-authored stage graphs for the legacy families.

Each family is described as plain data: an ordered list of stages (a named
group of nodes with a shape, color, anchor position and semantic tag) and a
list of named links between stages. One generic routine in the builder turns
any blueprint into nodes and edges, so no family carries its own placement code.

Legacy topologies mostly ignore the caller's neuron counts. Only three
derivations read the layer list:
    - recurrent step count (RNN, LSTM, GRU),
    - expert count (staged mixture of experts),
    - encoder block count (Transformer).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Sequence

import numpy as np

from nexavisualize.model.families import ModelFamily
from nexavisualize.model.graph import Position
from nexavisualize.model.layers import LayerConfig


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class StageShape(StrEnum):
    """How the nodes of one stage are arranged around its anchor."""
    SINGLE = "single"
    ROW = "row"        # along Z
    COLUMN = "column"  # along Y
    RING = "ring"      # circle in the YZ plane
    GRID = "grid"      # square grid in the YZ plane


class LinkPattern(StrEnum):
    ALL = "all"          # every source node to every target node
    PAIRED = "paired"    # each source node to its proportional counterpart


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class StageSpec:
    name: str
    shape: StageShape
    count: int
    color: int
    position: Position
    tag: str
    layer: int  # animation column, drives the forward/backward wave
    spread: float = 1.6


@dataclass(frozen=True)
class StageLink:
    source: str
    target: str
    pattern: LinkPattern = LinkPattern.ALL
    opacity: float = 0.2


@dataclass(frozen=True)
class LegacyBlueprint:
    family: ModelFamily
    stages: tuple[StageSpec, ...]
    links: tuple[StageLink, ...] = field(default_factory=tuple)

    @property
    def layer_count(self) -> int:
        return max((stage.layer for stage in self.stages), default=-1) + 1

    def stage(self, name: str) -> StageSpec:
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(f"No stage named '{name}' in {self.family} blueprint")


@dataclass(frozen=True)
class LegacyDerivation:
    """The few values a legacy topology reads from the caller's layers."""
    recurrent_steps: int = 4
    expert_count: int = 4
    encoder_blocks: int = 2


# ------------------------------------------------------------------------------
# Derivations
# ------------------------------------------------------------------------------
DEFAULT_EXPERT_COUNT: int = 4


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def derive_recurrent_steps(layers: Sequence[LayerConfig]) -> int:
    max_neurons = max((layer.neurons for layer in layers), default=0)
    return clamp(round_half_up(max_neurons / 2), 4, 8)


def derive_expert_count(layers: Sequence[LayerConfig]) -> int:
    for layer in layers:
        if "expert" in layer.name.lower():
            return clamp(layer.neurons, 2, 8)
    return DEFAULT_EXPERT_COUNT


def derive_encoder_blocks(layers: Sequence[LayerConfig]) -> int:
    count = sum("self-attention" in layer.name.lower() for layer in layers)
    return clamp(count, 2, 4)


def derive(layers: Sequence[LayerConfig]) -> LegacyDerivation:
    return LegacyDerivation(
        recurrent_steps=derive_recurrent_steps(layers),
        expert_count=derive_expert_count(layers),
        encoder_blocks=derive_encoder_blocks(layers),
    )


# ------------------------------------------------------------------------------
# Stage shapes
# ------------------------------------------------------------------------------
def _spread_axis(count: int, spread: float) -> np.ndarray:
    if count <= 1:
        return np.zeros(1)
    return np.linspace(-spread / 2, spread / 2, count)


def stage_positions(stage: StageSpec) -> list[Position]:
    """Absolute positions of every node in a stage."""
    px, py, pz = stage.position
    n = max(1, stage.count)

    match stage.shape:
        case StageShape.SINGLE:
            ys, zs = np.array([py]), np.array([pz])
        case StageShape.ROW:
            ys, zs = np.full(n, py), pz + _spread_axis(n, stage.spread)
        case StageShape.COLUMN:
            ys, zs = py + _spread_axis(n, stage.spread), np.full(n, pz)
        case StageShape.RING:
            angles = np.arange(n) / n * 2 * np.pi
            radius = stage.spread / 2
            ys, zs = py + np.sin(angles) * radius, pz + np.cos(angles) * radius
        case StageShape.GRID:
            cols = math.ceil(math.sqrt(n))
            rows = math.ceil(n / cols)
            index = np.arange(n)
            ys = py + _spread_axis(rows, stage.spread)[index // cols]
            zs = pz + _spread_axis(cols, stage.spread)[index % cols]
        case _:
            raise ValueError(f"Unsupported stage shape: {stage.shape}")

    return [(float(px), float(y), float(z)) for y, z in zip(ys, zs)]


def link_pairs(pattern: LinkPattern, source_count: int, target_count: int) -> list[tuple[int, int]]:
    """Index pairs (source, target) a link expands to."""
    if pattern == LinkPattern.PAIRED:
        return [
            (i, math.floor(i / max(1, source_count - 1) * max(0, target_count - 1)))
            for i in range(source_count)
        ]
    return [(i, j) for i in range(source_count) for j in range(target_count)]


# ------------------------------------------------------------------------------
# Blueprints
# ------------------------------------------------------------------------------
GREEN, BLUE, PURPLE, ORANGE, RED, SLATE = 0x4CAF50, 0x2196F3, 0x9C27B0, 0xFF9800, 0xF44336, 0x607D8B
TEAL, AMBER = 0x009688, 0xFFC107


def _column_x(index: int, count: int, spacing: float) -> float:
    return index * spacing - (count - 1) * spacing / 2


def cnn_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    stages = (
        StageSpec("input", StageShape.GRID, 16, GREEN, (-10.0, 1.2, 0.0), "input", 0, spread=3.0),
        StageSpec("conv_1", StageShape.GRID, 16, BLUE, (-6.0, 0.8, 0.0), "conv", 1, spread=2.6),
        StageSpec("pool_1", StageShape.GRID, 9, PURPLE, (-2.0, 0.6, 0.0), "pool", 2, spread=2.0),
        StageSpec("conv_2", StageShape.GRID, 9, BLUE, (2.0, 0.4, 0.0), "conv", 3, spread=1.8),
        StageSpec("dense", StageShape.COLUMN, 6, ORANGE, (6.0, -0.3, 0.0), "dense", 4, spread=2.5),
        StageSpec("output", StageShape.COLUMN, 3, RED, (10.0, -0.8, 0.0), "output", 5, spread=1.5),
    )
    links = (
        StageLink("input", "conv_1", LinkPattern.PAIRED),
        StageLink("conv_1", "pool_1", LinkPattern.PAIRED),
        StageLink("pool_1", "conv_2", LinkPattern.PAIRED),
        StageLink("conv_2", "dense"),
        StageLink("dense", "output"),
    )
    return LegacyBlueprint(ModelFamily.CNN, stages, links)


def transformer_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    blocks = derivation.encoder_blocks
    columns = 3 + 2 * blocks
    spacing = 3.0

    stages = [
        StageSpec("tokens", StageShape.ROW, 6, GREEN, (_column_x(0, columns, spacing), -1.8, 0.0), "token", 0, spread=3.0),
        StageSpec("embedding", StageShape.ROW, 6, TEAL, (_column_x(1, columns, spacing), -0.6, 0.0), "embedding", 1, spread=3.0),
    ]
    links = [StageLink("tokens", "embedding", LinkPattern.PAIRED)]

    previous = "embedding"
    for block in range(blocks):
        column = 2 + 2 * block
        attention = f"self_attention_{block + 1}"
        feed_forward = f"feed_forward_{block + 1}"
        stages.append(StageSpec(
            attention, StageShape.RING, 8, BLUE,
            (_column_x(column, columns, spacing), 1.3 if block % 2 == 0 else -0.6, 0.0),
            "attention", column, spread=2.9,
        ))
        stages.append(StageSpec(
            feed_forward, StageShape.COLUMN, 6, PURPLE,
            (_column_x(column + 1, columns, spacing), 1.6, 0.0),
            "feed-forward", column + 1, spread=2.4,
        ))
        links.append(StageLink(previous, attention))
        links.append(StageLink(attention, feed_forward))
        # Residual path around the attention block
        links.append(StageLink(previous, feed_forward, LinkPattern.PAIRED, opacity=0.1))
        previous = feed_forward

    stages.append(StageSpec(
        "output_head", StageShape.COLUMN, 4, RED,
        (_column_x(columns - 1, columns, spacing), 0.3, 0.0), "output", columns - 1, spread=1.8,
    ))
    links.append(StageLink(previous, "output_head"))
    return LegacyBlueprint(ModelFamily.TRANSFORMER, tuple(stages), tuple(links))


def _recurrent_blueprint(family: ModelFamily, derivation: LegacyDerivation) -> LegacyBlueprint:
    """
    Unrolled recurrence: one animation column per time step.

    Every step has an input, a hidden state and an output; LSTM adds a cell
    state plus forget/input/output gates, GRU adds update/reset gates.
    """
    steps = derivation.recurrent_steps
    spacing = 2.6
    gate_names = {
        ModelFamily.LSTM: ("forget_gate", "input_gate", "output_gate"),
        ModelFamily.GRU: ("update_gate", "reset_gate"),
    }.get(family, ())

    stages: list[StageSpec] = []
    links: list[StageLink] = []
    for t in range(steps):
        x = _column_x(t, steps, spacing)
        x_in, hidden, y_out, cell = f"x_{t}", f"h_{t}", f"y_{t}", f"c_{t}"

        stages.append(StageSpec(x_in, StageShape.SINGLE, 1, GREEN, (x, -2.6, 0.0), "input", t))
        if family == ModelFamily.RNN:
            stages.append(StageSpec(hidden, StageShape.RING, 4, BLUE, (x, 0.0, 0.0), "hidden", t, spread=1.0))
        else:
            stages.append(StageSpec(hidden, StageShape.SINGLE, 1, BLUE, (x, 0.0, 0.0), "hidden", t))
        stages.append(StageSpec(y_out, StageShape.SINGLE, 1, RED, (x, 2.6, 0.0), "output", t))

        if gate_names:
            gate_z = _spread_axis(len(gate_names), 1.6)
            for name, z in zip(gate_names, gate_z):
                gate = f"{name}_{t}"
                stages.append(StageSpec(gate, StageShape.SINGLE, 1, AMBER, (x, -1.3, float(z)), "gate", t))
                links.append(StageLink(x_in, gate))
                links.append(StageLink(gate, cell if family == ModelFamily.LSTM else hidden))
        else:
            links.append(StageLink(x_in, hidden))

        if family == ModelFamily.LSTM:
            stages.append(StageSpec(cell, StageShape.SINGLE, 1, PURPLE, (x, 0.0, -1.4), "cell", t))
            links.append(StageLink(cell, hidden))

        links.append(StageLink(hidden, y_out))

        if t > 0:
            links.append(StageLink(f"h_{t - 1}", hidden, LinkPattern.PAIRED, opacity=0.3))
            if family == ModelFamily.LSTM:
                links.append(StageLink(f"c_{t - 1}", cell, opacity=0.3))

    return LegacyBlueprint(family, tuple(stages), tuple(links))


def rnn_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    return _recurrent_blueprint(ModelFamily.RNN, derivation)


def lstm_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    return _recurrent_blueprint(ModelFamily.LSTM, derivation)


def gru_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    return _recurrent_blueprint(ModelFamily.GRU, derivation)


def gan_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    stages = (
        StageSpec("noise", StageShape.COLUMN, 4, SLATE, (-9.0, 0.0, 0.0), "noise", 0, spread=2.4),
        StageSpec("generator", StageShape.SINGLE, 1, GREEN, (-5.0, 0.0, 0.0), "generator", 1),
        StageSpec("fake_samples", StageShape.GRID, 4, ORANGE, (-1.0, -1.4, 0.0), "sample", 2, spread=1.2),
        StageSpec("real_samples", StageShape.GRID, 4, BLUE, (-1.0, 1.8, 0.0), "data", 2, spread=1.2),
        StageSpec("discriminator", StageShape.SINGLE, 1, PURPLE, (3.0, 0.2, 0.0), "discriminator", 3),
        StageSpec("decision", StageShape.COLUMN, 2, RED, (7.0, 0.2, 0.0), "output", 4, spread=1.0),
    )
    links = (
        StageLink("noise", "generator"),
        StageLink("generator", "fake_samples"),
        StageLink("fake_samples", "discriminator"),
        StageLink("real_samples", "discriminator"),
        StageLink("discriminator", "decision"),
        # Adversarial feedback into the generator
        StageLink("decision", "generator", opacity=0.1),
    )
    return LegacyBlueprint(ModelFamily.GAN, stages, links)


def mixture_blueprint(derivation: LegacyDerivation) -> LegacyBlueprint:
    experts = derivation.expert_count
    expert_y = _spread_axis(experts, 1.1 * (experts - 1))

    stages = [
        StageSpec("tokens", StageShape.COLUMN, 6, GREEN, (-8.0, 0.0, 0.0), "input", 0, spread=3.0),
        StageSpec("gate", StageShape.RING, 4, AMBER, (-4.0, 0.0, 0.0), "gating", 1, spread=1.0),
    ]
    links = [StageLink("tokens", "gate")]
    for k, y in enumerate(expert_y):
        name = f"expert_{k + 1}"
        z = -0.65 if k % 2 == 0 else 0.65
        stages.append(StageSpec(name, StageShape.RING, 3, BLUE, (0.0, float(y), z), "expert", 2, spread=0.6))
        links.append(StageLink("gate", name))
        links.append(StageLink(name, "router_merge", opacity=0.15))
    stages.append(StageSpec("router_merge", StageShape.COLUMN, 4, PURPLE, (4.0, 0.0, 0.0), "router", 3, spread=2.0))
    stages.append(StageSpec("output", StageShape.COLUMN, 3, RED, (8.0, 0.0, 0.0), "output", 4, spread=1.5))
    links.append(StageLink("router_merge", "output"))
    return LegacyBlueprint(ModelFamily.LEGACY_MIXTURE, tuple(stages), tuple(links))


BLUEPRINTS: dict[ModelFamily, Callable[[LegacyDerivation], LegacyBlueprint]] = {
    ModelFamily.CNN: cnn_blueprint,
    ModelFamily.TRANSFORMER: transformer_blueprint,
    ModelFamily.RNN: rnn_blueprint,
    ModelFamily.LSTM: lstm_blueprint,
    ModelFamily.GRU: gru_blueprint,
    ModelFamily.GAN: gan_blueprint,
    ModelFamily.LEGACY_MIXTURE: mixture_blueprint,
}


def blueprint_for(family: ModelFamily, layers: Sequence[LayerConfig]) -> LegacyBlueprint:
    return BLUEPRINTS[family](derive(layers))
