"""
Connection Budget Policy
========================
Decides how many edges a build may create and how likely each candidate
(from, to) neuron pair is to be accepted.

The ceiling is enforced by early termination: once the running count reaches
the budget every later candidate is skipped, regardless of its probability.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from nexavisualize.config import BASE_MAX_CONNECTIONS, EXPECTED_EDGES_PER_PAIR
from nexavisualize.model.families import ModelFamily
from nexavisualize.model.layers import LayerConfig
from nexavisualize.model.seeded_random import RandomSource

MODEL_CONNECTION_BUDGET: dict[ModelFamily, int] = {
    ModelFamily.FEED_FORWARD: 2200,
    ModelFamily.OPERATOR: 2000,
    ModelFamily.AUTOENCODER: 2000,
    ModelFamily.MIXTURE: 1800,
    ModelFamily.CNN: 2400,
    ModelFamily.TRANSFORMER: 2200,
    ModelFamily.RNN: 1600,
    ModelFamily.LSTM: 1600,
    ModelFamily.GRU: 1600,
    ModelFamily.GAN: 1400,
    ModelFamily.LEGACY_MIXTURE: 1800,
}

# Presentation constants for the family-specific acceptance bias
AUTOENCODER_MIRROR_BAND: float = 0.15
AUTOENCODER_MIRROR_WEIGHT: float = 0.9
AUTOENCODER_OFF_MIRROR_WEIGHT: float = 0.3
OPERATOR_PHASE_FREQUENCY: float = 0.3
OPERATOR_PHASE_FLOOR: float = 0.35
OPERATOR_PHASE_GAIN: float = 0.55
MIXTURE_EXPERT_GROUPS: int = 4
MIXTURE_ROUTED_WEIGHT: float = 0.95
MIXTURE_UNROUTED_WEIGHT: float = 0.04
MIXTURE_MERGE_WEIGHT: float = 0.7


def resolve_budget(family: ModelFamily, override: Any = None) -> int:
    """An explicit finite positive override wins, then the family budget, then the global default."""
    if isinstance(override, bool):
        override = None
    if isinstance(override, int) and override > 0:
        return override
    if isinstance(override, float) and math.isfinite(override) and override > 0:
        return max(1, int(override))
    return MODEL_CONNECTION_BUDGET.get(family, BASE_MAX_CONNECTIONS)


def base_density(from_count: int, to_count: int) -> float:
    """Keeps the expected edge count per adjacent pair near 50 regardless of width."""
    return min(1.0, EXPECTED_EDGES_PER_PAIR / max(1, from_count * to_count))


def total_possible_connections(layers: Sequence[LayerConfig]) -> int:
    return sum(a.neurons * b.neurons for a, b in zip(layers[:-1], layers[1:]))


def budget_density(budget: int, total_possible: int) -> float:
    total = max(1, total_possible)
    if budget >= total:
        return 1.0
    return budget / total


def acceptance_probability(
    family: ModelFamily,
    from_layer: LayerConfig,
    to_layer: LayerConfig,
    from_index: int,
    to_index: int,
    pair_density: float,
    global_density: float,
) -> float:
    """Probability that the candidate edge (from_index -> to_index) is created."""
    from_count = from_layer.neurons
    to_count = to_layer.neurons
    probability = min(1.0, max(pair_density * 0.6, global_density))

    match family:
        case ModelFamily.AUTOENCODER:
            mirrored = abs(from_index / max(1, from_count) - to_index / max(1, to_count))
            if mirrored < AUTOENCODER_MIRROR_BAND:
                return probability * AUTOENCODER_MIRROR_WEIGHT
            return probability * AUTOENCODER_OFF_MIRROR_WEIGHT

        case ModelFamily.OPERATOR:
            phase = abs(math.sin((from_index + to_index) * OPERATOR_PHASE_FREQUENCY))
            return probability * (OPERATOR_PHASE_FLOOR + phase * OPERATOR_PHASE_GAIN)

        case ModelFamily.MIXTURE:
            from_name = from_layer.name.lower()
            to_name = to_layer.name.lower()
            if "gating" in from_name and "expert" in to_name:
                group_size = math.ceil(to_count / MIXTURE_EXPERT_GROUPS)
                gate_group = from_index % MIXTURE_EXPERT_GROUPS
                expert_group = to_index // group_size
                if gate_group == expert_group:
                    return probability * MIXTURE_ROUTED_WEIGHT
                return probability * MIXTURE_UNROUTED_WEIGHT
            if "expert" in from_name and "router" in to_name:
                return probability * MIXTURE_MERGE_WEIGHT
            return probability

        case _:
            return probability


@dataclass
class EdgeBudget:
    """Running edge counter for one build."""
    ceiling: int
    count: int = 0

    @property
    def exhausted(self) -> bool:
        return self.count >= self.ceiling

    def try_consume(self) -> bool:
        """Reserve one edge slot. Returns False once the ceiling is reached."""
        if self.exhausted:
            return False
        self.count += 1
        return True

    def accept(self, probability: float, rng: RandomSource) -> bool:
        """Draw against probability, but only while budget remains."""
        if self.exhausted:
            return False
        return rng() < probability
