"""
Visualizer State (Data Model)
=============================
This module defines the central data structure for the running viewer.

Why is this file needed?
------------------------
1. State Management: It holds the edited architecture, the selected model
   family, the training hyperparameters and the simulated training status in
   one place.
2. Decoupling: The window reads from this object; controllers write to it and
   rebuild the graph from it.

Classes:
    TrainingParams: Hyperparameters shown in the training panel.
    TrainingStatus: Counters and metrics of the simulated run.
    VisualizerState: The main container class.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from nexavisualize.config import (
    BATCHES_PER_EPOCH,
    DEFAULT_SIMULATION_SEED,
    INITIAL_ACCURACY,
    INITIAL_LOSS,
)
from nexavisualize.model.families import ModelFamily, resolve_family
from nexavisualize.model.layers import Activation, LayerSpec, clamp_neurons
from nexavisualize.model.training import TrainingTick

logger = logging.getLogger(__name__)

A = Activation


def _preset(*layers: tuple[str, int, Activation]) -> tuple[LayerSpec, ...]:
    return tuple(LayerSpec(name=name, neurons=neurons, activation=activation) for name, neurons, activation in layers)


DEFAULT_ARCHITECTURE = _preset(
    ("Input", 4, A.LINEAR),
    ("Hidden 1", 8, A.RELU),
    ("Hidden 2", 6, A.RELU),
    ("Output", 3, A.SOFTMAX),
)

_RECURRENT_PRESET = _preset(
    ("Sequence Input", 6, A.LINEAR),
    ("Recurrent Cell", 12, A.TANH),
    ("Output", 4, A.SOFTMAX),
)

_MIXTURE_PRESET = _preset(
    ("Token Input", 10, A.LINEAR),
    ("Gating", 8, A.RELU),
    ("Experts", 24, A.RELU),
    ("Router Merge", 12, A.RELU),
    ("Output", 5, A.SOFTMAX),
)

MODEL_PRESETS: dict[ModelFamily, tuple[LayerSpec, ...]] = {
    ModelFamily.FEED_FORWARD: DEFAULT_ARCHITECTURE,
    ModelFamily.OPERATOR: _preset(
        ("Input Field", 10, A.LINEAR),
        ("Projection", 16, A.RELU),
        ("Spectral Block 1", 20, A.RELU),
        ("Spectral Block 2", 20, A.RELU),
        ("Output Field", 10, A.LINEAR),
    ),
    ModelFamily.AUTOENCODER: _preset(
        ("Input", 14, A.LINEAR),
        ("Encoder 1", 10, A.RELU),
        ("Latent", 6, A.RELU),
        ("Decoder 1", 10, A.RELU),
        ("Reconstruction", 14, A.LINEAR),
    ),
    ModelFamily.MIXTURE: _MIXTURE_PRESET,
    ModelFamily.CNN: _preset(
        ("Input Image", 16, A.LINEAR),
        ("Conv Block 1", 24, A.RELU),
        ("Conv Block 2", 20, A.RELU),
        ("Dense", 12, A.RELU),
        ("Output", 4, A.SOFTMAX),
    ),
    ModelFamily.TRANSFORMER: _preset(
        ("Token Input", 12, A.LINEAR),
        ("Self-Attention 1", 18, A.RELU),
        ("Self-Attention 2", 18, A.RELU),
        ("Feed Forward", 14, A.RELU),
        ("Output Head", 6, A.SOFTMAX),
    ),
    ModelFamily.RNN: _RECURRENT_PRESET,
    ModelFamily.LSTM: _RECURRENT_PRESET,
    ModelFamily.GRU: _RECURRENT_PRESET,
    ModelFamily.GAN: _preset(
        ("Noise", 8, A.LINEAR),
        ("Generator", 16, A.RELU),
        ("Discriminator", 12, A.RELU),
        ("Decision", 1, A.SIGMOID),
    ),
    ModelFamily.LEGACY_MIXTURE: _MIXTURE_PRESET,
}

MIN_LAYERS_FOR_REMOVAL: int = 4


@dataclass
class TrainingParams:
    learning_rate: float = 0.01
    batch_size: int = 32
    epochs: int = 100
    optimizer: str = "Adam"
    loss_function: str = "CrossEntropy"


@dataclass
class TrainingStatus:
    is_training: bool = False
    is_complete: bool = False
    epoch: int = 0
    batch: int = 0
    loss: float = INITIAL_LOSS
    accuracy: float = INITIAL_ACCURACY


@dataclass
class VisualizerState:
    """
    Singleton-like class that holds everything the viewer edits or simulates.
    Pass this instance to the controllers and the main window.
    """
    layers: list[LayerSpec] = field(default_factory=lambda: _copy_layers(DEFAULT_ARCHITECTURE))
    family: ModelFamily = ModelFamily.FEED_FORWARD
    seed: int = DEFAULT_SIMULATION_SEED
    max_connections: Optional[int] = None
    training_params: TrainingParams = field(default_factory=TrainingParams)
    animation_speed: float = 1.0
    training: TrainingStatus = field(default_factory=TrainingStatus)

    # --- Architecture editing ---

    def add_layer(self) -> LayerSpec:
        """Insert a new hidden layer just before the output layer."""
        layer = LayerSpec(name=f"Hidden {len(self.layers) - 1}", neurons=8, activation=Activation.RELU)
        self.layers.insert(max(0, len(self.layers) - 1), layer)
        return layer

    def remove_layer(self, index: int) -> bool:
        """Remove an interior layer. Input and output layers are never removed."""
        if len(self.layers) < MIN_LAYERS_FOR_REMOVAL:
            logger.info(f"Refusing to remove layer {index}: only {len(self.layers)} layers left.")
            return False
        if not 0 < index < len(self.layers) - 1:
            logger.warning(f"Cannot remove layer at index {index}.")
            return False
        del self.layers[index]
        return True

    def update_layer(self, index: int, field_name: str, value: Any) -> bool:
        if not 0 <= index < len(self.layers):
            logger.warning(f"Cannot update layer at index {index}.")
            return False

        layer = self.layers[index]
        match field_name:
            case "neurons":
                layer.neurons = clamp_neurons(value)
            case "activation":
                try:
                    layer.activation = Activation(value)
                except ValueError:
                    logger.warning(f"Unknown activation {value!r} for layer {index}.")
                    return False
            case "name":
                layer.name = str(value)
            case _:
                logger.warning(f"Unknown layer field {field_name!r}.")
                return False
        return True

    def apply_preset(self, family: Any) -> ModelFamily:
        """Load the preset architecture of a family and reset the training run."""
        resolved = resolve_family(family)
        self.family = resolved
        self.layers = _copy_layers(MODEL_PRESETS[resolved])
        self.reset_training()
        logger.info(f"{resolved.label} architecture loaded.")
        return resolved

    # --- Training status ---

    def start_training(self) -> None:
        self.training = TrainingStatus(is_training=True)

    def stop_training(self) -> None:
        self.training.is_training = False

    def reset_training(self) -> None:
        self.training = TrainingStatus()

    def apply_tick(self, tick: TrainingTick) -> TrainingStatus:
        """Record one simulated batch. Completion also stops the run."""
        status = self.training
        if status.is_complete:
            return status

        status.batch += 1
        if status.batch % BATCHES_PER_EPOCH == 0:
            status.epoch += 1
        status.loss = tick.loss
        status.accuracy = tick.accuracy

        if tick.complete or status.epoch >= self.training_params.epochs:
            status.is_complete = True
            status.is_training = False
            logger.info(f"Training complete at epoch {status.epoch}, accuracy {status.accuracy:.3f}.")
        return status

    def reset(self) -> None:
        """Restore the default architecture and clear the training run."""
        self.layers = _copy_layers(DEFAULT_ARCHITECTURE)
        self.family = ModelFamily.FEED_FORWARD
        self.seed = DEFAULT_SIMULATION_SEED
        self.max_connections = None
        self.training_params = TrainingParams()
        self.animation_speed = 1.0
        self.training = TrainingStatus()
        logger.info("Visualizer state has been reset.")


def _copy_layers(layers: tuple[LayerSpec, ...] | list[LayerSpec]) -> list[LayerSpec]:
    return [LayerSpec(layer.name, layer.neurons, layer.activation) for layer in layers]
