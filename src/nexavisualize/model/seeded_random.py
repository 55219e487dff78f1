"""
Seeded Random Generator
=======================
Deterministic uniform generator (Park-Miller minimal standard LCG).

Every build or simulation run creates its own generator from an explicit seed,
so two runs with equal seeds produce identical graphs and identical training curves.
"""
from __future__ import annotations

import math
from typing import Any, Callable

from nexavisualize.config import DEFAULT_SIMULATION_SEED

MODULUS: int = 2147483647  # 2^31 - 1
MULTIPLIER: int = 16807

RandomSource = Callable[[], float]


def sanitize_seed(seed: Any) -> int:
    """
    Coerce any input into a valid generator seed.

    Non-numeric, non-finite and float-overflowing values fall back to
    DEFAULT_SIMULATION_SEED.
    The magnitude is reduced modulo MODULUS; a zero result also falls back.

    Examples:
        sanitize_seed(None) -> 2026
        sanitize_seed(-100) -> 100
    """
    if isinstance(seed, bool):
        return DEFAULT_SIMULATION_SEED
    try:
        value = float(seed)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SIMULATION_SEED

    if not math.isfinite(value):
        return DEFAULT_SIMULATION_SEED

    normalized = math.floor(abs(value)) % MODULUS
    return normalized or DEFAULT_SIMULATION_SEED


def create_seeded_rng(seed: Any) -> RandomSource:
    """Return a closure yielding reals in (0, 1) from the sanitized seed."""
    state = sanitize_seed(seed)

    def next_value() -> float:
        nonlocal state
        state = (state * MULTIPLIER) % MODULUS
        return (state - 1) / (MODULUS - 1)

    return next_value
