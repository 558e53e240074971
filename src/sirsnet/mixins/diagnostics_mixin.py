"""
Diagnostics Mixin for SIRS components.

This module provides a reusable mixin with the metric computations shared
by units and recorders:
1. Transition counts and rates
2. State occupancy of a recorded trace
"""

from __future__ import annotations

from typing import Dict, Mapping

import numpy as np

from sirsnet.constants.time import MS_PER_SECOND
from sirsnet.constants.unit import Compartment


class DiagnosticsMixin:
    """Mixin providing common diagnostic computation patterns.

    All methods are static and use only the provided arguments, so they
    work regardless of the class structure.
    """

    @staticmethod
    def transition_diagnostics(
        counts: Mapping[str, int],
        elapsed_ms: float,
        prefix: str = "",
    ) -> Dict[str, float]:
        """Counts plus rates in Hz for each entry of ``counts``.

        Args:
            counts: e.g. {"s_to_i": 4, "i_to_r": 3, "r_to_s": 3}
            elapsed_ms: Simulated time the counts were collected over
            prefix: Prefix for metric names
        """
        prefix = f"{prefix}_" if prefix else ""

        stats: Dict[str, float] = {}
        for name, count in counts.items():
            stats[f"{prefix}{name}"] = float(count)
            if elapsed_ms > 0:
                stats[f"{prefix}{name}_rate_hz"] = count * MS_PER_SECOND / elapsed_ms
            else:
                stats[f"{prefix}{name}_rate_hz"] = 0.0
        return stats

    @staticmethod
    def occupancy_diagnostics(
        y_trace: np.ndarray,
        prefix: str = "",
    ) -> Dict[str, float]:
        """Fraction of samples spent in each compartment.

        Args:
            y_trace: Sampled discrete states (any shape)
            prefix: Prefix for metric names
        """
        prefix = f"{prefix}_" if prefix else ""

        y = np.asarray(y_trace).ravel()
        stats: Dict[str, float] = {}
        for compartment in Compartment:
            key = f"{prefix}fraction_{compartment.name.lower()}"
            stats[key] = float(np.mean(y == int(compartment))) if y.size else 0.0
        return stats


__all__ = ["DiagnosticsMixin"]
