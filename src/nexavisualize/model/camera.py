"""Recommended camera distance for a realized architecture."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from nexavisualize.config import BASE_CAMERA_SCALE, MIN_CAMERA_DISTANCE
from nexavisualize.model.families import ModelFamily, resolve_family
from nexavisualize.model.layers import LayerConfig
from nexavisualize.model.placement import layer_spacing

logger = logging.getLogger(__name__)

MODEL_SCALE: dict[ModelFamily, float] = {
    ModelFamily.FEED_FORWARD: 1.8,
    ModelFamily.OPERATOR: 2.0,
    ModelFamily.AUTOENCODER: 1.95,
    ModelFamily.MIXTURE: 1.9,
}

# Legacy stage tables have fixed extents, so their framing is fixed too
LEGACY_CAMERA_DISTANCE: dict[ModelFamily, float] = {
    ModelFamily.CNN: 24.0,
    ModelFamily.TRANSFORMER: 30.0,
    ModelFamily.RNN: 20.0,
    ModelFamily.LSTM: 22.0,
    ModelFamily.GRU: 21.0,
    ModelFamily.GAN: 22.0,
    ModelFamily.LEGACY_MIXTURE: 22.0,
}


def family_scale(family: ModelFamily) -> float:
    return MODEL_SCALE.get(family, BASE_CAMERA_SCALE)


def calculate_camera_distance(layers: Sequence[LayerConfig], family: Any = ModelFamily.FEED_FORWARD) -> float:
    """
    Distance from the origin that frames the whole graph.

    The floor scales with the family factor (12 for the base scale), so for
    identical geometry a larger scale factor always gives a larger distance.
    """
    family = resolve_family(family)
    if family in LEGACY_CAMERA_DISTANCE:
        return LEGACY_CAMERA_DISTANCE[family]

    scale = family_scale(family)
    if not layers:
        return MIN_CAMERA_DISTANCE

    width = len(layers) * layer_spacing(family)
    height = max(layer.grid_shape[1] for layer in layers) * 2
    depth = max(layer.grid_shape[2] for layer in layers) * 2
    extent = max(width, height, depth)

    distance = scale * max(MIN_CAMERA_DISTANCE / BASE_CAMERA_SCALE, extent)
    logger.debug(f"Camera distance for {family}: {distance:.2f} (extent {extent:.2f}, scale {scale}).")
    return distance
