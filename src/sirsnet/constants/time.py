"""
Time conversion constants for step-based simulations.

Simulation time is expressed in milliseconds and discretized into steps of
``resolution_ms``. These helpers convert between the two.
"""

from __future__ import annotations

import math

# ============================================================================
# TIME UNIT CONVERSIONS
# ============================================================================

MS_PER_SECOND = 1000.0
"""Milliseconds per second (1000.0 ms/s)."""

SECONDS_PER_MS = 1.0 / 1000.0
"""Seconds per millisecond (0.001 s/ms)."""


def ms_to_steps(time_ms: float, resolution_ms: float) -> int:
    """Convert a duration in ms to the nearest whole number of steps."""
    return int(round(time_ms / resolution_ms))


def steps_to_ms(steps: int, resolution_ms: float) -> float:
    """Convert a number of steps to ms."""
    return steps * resolution_ms


def is_grid_aligned(time_ms: float, resolution_ms: float, rel_tol: float = 1e-9) -> bool:
    """Whether ``time_ms`` is an integer multiple of ``resolution_ms``."""
    steps = time_ms / resolution_ms
    return math.isclose(steps, round(steps), rel_tol=rel_tol, abs_tol=rel_tol)


__all__ = [
    "MS_PER_SECOND",
    "SECONDS_PER_MS",
    "ms_to_steps",
    "steps_to_ms",
    "is_grid_aligned",
]
