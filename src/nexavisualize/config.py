"""
Configuration & Global Constants
================================
This module serves as the central registry for the constants shared by the
graph builder, the training simulation and the viewer.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (node sizes, ground plane height,
   default seeds) from being scattered throughout the code.
2. Consistency: The builder, the camera heuristic and the PyVista scene must
   agree on the same scene dimensions.

Exports:
    APP_VERSION (str): Installed package version (or a dev placeholder).
    LAYER_PALETTE (tuple[int, ...]): Colors assigned to layers by index.
    NEURON_SIZE (float): Radius of a rendered node.
    GROUND_PLANE_Y (float): Height of the visual floor grid.
"""
from importlib.metadata import version, PackageNotFoundError

try:
    APP_VERSION: str = version("nexavisualize")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# --- Layers ---
MAX_NEURONS_PER_LAYER: int = 64
LAYER_PALETTE: tuple[int, ...] = (
    0x4CAF50, 0x2196F3, 0x9C27B0, 0xFF9800, 0xF44336, 0x607D8B,
)

# --- Scene geometry ---
NEURON_SIZE: float = 0.15
LAYER_SPACING: float = 3.5
GROUND_PLANE_Y: float = -8.0
GROUND_PLANE_SIZE: float = 40.0
# Lowest allowed node center (keeps spheres clear of the floor grid)
NODE_FLOOR_Y: float = GROUND_PLANE_Y + 0.5

# --- Colors ---
EDGE_COLOR: int = 0x666666
EDGE_OPACITY: float = 0.15
NODE_OPACITY: float = 0.8
FORWARD_NODE_COLOR: int = 0x00CC00
FORWARD_EDGE_COLOR: int = 0x00FF00
BACKWARD_NODE_COLOR: int = 0xCC0000
BACKWARD_EDGE_COLOR: int = 0xFF0000
UPDATE_COLOR: int = 0x0099FF

# --- Connections ---
BASE_MAX_CONNECTIONS: int = 1800
EXPECTED_EDGES_PER_PAIR: float = 50.0

# --- Camera ---
MIN_CAMERA_DISTANCE: float = 12.0
BASE_CAMERA_SCALE: float = 1.8

# --- Simulation ---
DEFAULT_SIMULATION_SEED: int = 2026
BASE_TICK_INTERVAL_MS: float = 200.0
REBUILD_DEBOUNCE_MS: int = 50
BATCHES_PER_EPOCH: int = 10
INITIAL_LOSS: float = 1.0
INITIAL_ACCURACY: float = 0.1


def hex_to_rgb(color: int) -> tuple[float, float, float]:
    """Convert a 0xRRGGBB integer into an (r, g, b) tuple in [0, 1]."""
    return (
        ((color >> 16) & 0xFF) / 255.0,
        ((color >> 8) & 0xFF) / 255.0,
        (color & 0xFF) / 255.0,
    )
