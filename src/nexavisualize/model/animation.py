"""
Training Animation Frames
=========================
Translates the progress scalar into per-layer highlights.

Forward pass: a green wave travels from the first layer to the last and lights
the edges leaving each layer.
Backward pass: a red wave travels back from the last layer to the first and
lights the edges entering each layer.
Update: every node and edge pulses blue.

The frame is pure data; the scene adapter applies it to its actors.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum

from nexavisualize.config import (
    BACKWARD_EDGE_COLOR,
    BACKWARD_NODE_COLOR,
    FORWARD_EDGE_COLOR,
    FORWARD_NODE_COLOR,
    UPDATE_COLOR,
)
from nexavisualize.model.training import TrainingPhase, get_training_phase


class EdgeSelection(StrEnum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    ALL = "all"


@dataclass(frozen=True)
class LayerHighlight:
    """Emissive strength, node scale and edge look applied to one layer."""
    emissive: float
    node_color: int
    edge_color: int
    node_scale: float = 1.0
    edge_opacity: float = 0.2

    @classmethod
    def wave(cls, layer_progress: float, node_color: int, edge_color: int) -> LayerHighlight:
        intensity = math.sin(math.pi * layer_progress) * 0.8 + 0.2
        return cls(
            emissive=intensity,
            node_color=node_color,
            edge_color=edge_color,
            node_scale=1 + intensity * 0.5,
            edge_opacity=0.2 + intensity * 0.6,
        )

    @classmethod
    def pulse(cls, intensity: float) -> LayerHighlight:
        return cls(
            emissive=intensity * 0.8,
            node_color=UPDATE_COLOR,
            edge_color=UPDATE_COLOR,
            edge_opacity=0.3 + intensity * 0.5,
        )


@dataclass(frozen=True)
class AnimationFrame:
    """
    Highlights for one rendered frame.

    layers maps a layer index to the highlight of its nodes. Layers missing from
    the map keep the resting look. edges says which edges of a highlighted
    layer take its edge color.
    """
    phase: TrainingPhase
    layers: dict[int, LayerHighlight] = field(default_factory=dict)
    edges: EdgeSelection = EdgeSelection.OUTGOING

    @property
    def is_idle(self) -> bool:
        return self.phase == TrainingPhase.IDLE


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def compute_frame(progress: float, stage_count: int) -> AnimationFrame:
    phase = get_training_phase(progress, stage_count)

    match phase:
        case TrainingPhase.FORWARD:
            layers = {}
            for i in range(stage_count):
                layer_progress = _clamp_unit(progress - i)
                if layer_progress > 0:
                    layers[i] = LayerHighlight.wave(layer_progress, FORWARD_NODE_COLOR, FORWARD_EDGE_COLOR)
            return AnimationFrame(phase, layers, EdgeSelection.OUTGOING)

        case TrainingPhase.BACKWARD:
            back_progress = progress - stage_count
            layers = {}
            for i in range(stage_count - 1, -1, -1):
                layer_progress = _clamp_unit(back_progress - (stage_count - 1 - i))
                if layer_progress > 0:
                    layers[i] = LayerHighlight.wave(layer_progress, BACKWARD_NODE_COLOR, BACKWARD_EDGE_COLOR)
            return AnimationFrame(phase, layers, EdgeSelection.INCOMING)

        case TrainingPhase.UPDATE:
            intensity = math.sin((progress - stage_count * 2) * math.pi * 4) * 0.5 + 0.5
            highlight = LayerHighlight.pulse(intensity)
            return AnimationFrame(phase, {i: highlight for i in range(stage_count)}, EdgeSelection.ALL)

    return AnimationFrame(phase)


def completion_frame(stage_count: int) -> AnimationFrame:
    """Steady blue look shown once training reaches its target accuracy."""
    highlight = LayerHighlight(emissive=1.0, node_color=UPDATE_COLOR, edge_color=UPDATE_COLOR, edge_opacity=0.8)
    return AnimationFrame(TrainingPhase.UPDATE, {i: highlight for i in range(stage_count)}, EdgeSelection.ALL)
