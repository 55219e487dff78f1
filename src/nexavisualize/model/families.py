"""Model families (topology strategies) and their display aliases."""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class ModelFamily(StrEnum):
    """Closed set of graph layout strategies."""
    # Generic families: placement driven by the caller's layer list
    FEED_FORWARD = "feed-forward"
    OPERATOR = "operator"
    AUTOENCODER = "autoencoder"
    MIXTURE = "mixture"

    # Legacy families: fixed hand-authored stage graphs
    CNN = "cnn"
    TRANSFORMER = "transformer"
    RNN = "rnn"
    LSTM = "lstm"
    GRU = "gru"
    GAN = "gan"
    LEGACY_MIXTURE = "legacy-mixture"

    @property
    def is_legacy(self) -> bool:
        return self in LEGACY_FAMILIES

    @property
    def label(self) -> str:
        return FAMILY_LABELS[self]


LEGACY_FAMILIES: frozenset[ModelFamily] = frozenset({
    ModelFamily.CNN,
    ModelFamily.TRANSFORMER,
    ModelFamily.RNN,
    ModelFamily.LSTM,
    ModelFamily.GRU,
    ModelFamily.GAN,
    ModelFamily.LEGACY_MIXTURE,
})

FAMILY_LABELS: dict[ModelFamily, str] = {
    ModelFamily.FEED_FORWARD: "Feedforward Network",
    ModelFamily.OPERATOR: "Neural Operator",
    ModelFamily.AUTOENCODER: "Autoencoder",
    ModelFamily.MIXTURE: "Mixture of Experts",
    ModelFamily.CNN: "Convolutional Network",
    ModelFamily.TRANSFORMER: "Transformer",
    ModelFamily.RNN: "Recurrent Network",
    ModelFamily.LSTM: "LSTM",
    ModelFamily.GRU: "GRU",
    ModelFamily.GAN: "Generative Adversarial Network",
    ModelFamily.LEGACY_MIXTURE: "Mixture of Experts (staged)",
}

# Names used by older sessions and the selector widgets, lower-cased
FAMILY_ALIASES: dict[str, ModelFamily] = {
    "custom": ModelFamily.FEED_FORWARD,
    "mlp": ModelFamily.FEED_FORWARD,
    "fnn": ModelFamily.FEED_FORWARD,
    "feedforward": ModelFamily.FEED_FORWARD,
    "neural operator": ModelFamily.OPERATOR,
    "moe": ModelFamily.MIXTURE,
    "mixture of experts": ModelFamily.MIXTURE,
}


def resolve_family(value: Any) -> ModelFamily:
    """
    Map a selector value onto a ModelFamily.

    Accepts members, member values, labels and aliases (case-insensitive).
    Anything unrecognized falls back to the generic feed-forward path.
    """
    if isinstance(value, ModelFamily):
        return value

    if isinstance(value, str):
        key = value.strip().lower()
        for family in ModelFamily:
            if key == family.value or key == family.label.lower():
                return family
        if key in FAMILY_ALIASES:
            return FAMILY_ALIASES[key]

    if value is not None:
        logger.warning(f"Unknown model family {value!r}, falling back to feed-forward.")
    return ModelFamily.FEED_FORWARD
