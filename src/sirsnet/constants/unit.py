"""
Standard SIRS unit parameter values used across sirsnet.

This module defines the default parameters of the SIRS unit and the
constants of its transition encoding, eliminating magic numbers scattered
throughout the codebase.

Update Scheduling:
==================
Each unit re-evaluates its state at the points of its own Poisson process.
Inter-update intervals are exponentially distributed with mean ``tau_m``,
which plays the role of a membrane time constant.

Transition Encoding:
====================
A unit sends a spike only when its state changes:
- Up-transition (S→I, I→R): multiplicity 2
- Down-transition (R→S): multiplicity 1

Usage:
======
    from sirsnet.constants.unit import (
        TAU_M_DEFAULT, BETA_SIRS_DEFAULT, Compartment,
    )

    config = SIRSUnitConfig(tau_m=TAU_M_DEFAULT, beta_sirs=0.8)
"""

from __future__ import annotations

from enum import IntEnum


class Compartment(IntEnum):
    """Discrete state of a SIRS unit."""

    SUSCEPTIBLE = 0
    INFECTED = 1
    RECOVERED = 2


# =============================================================================
# PARAMETER DEFAULTS
# =============================================================================

TAU_M_DEFAULT = 10.0
"""Mean inter-update interval (ms)."""

BETA_SIRS_DEFAULT = 0.1
"""Transition probability S→I (scaled by the gain function output)."""

MU_SIRS_DEFAULT = 0.1
"""Transition probability I→R."""

Y_INITIAL_DEFAULT = Compartment.SUSCEPTIBLE
"""Initial discrete state."""

H_INITIAL_DEFAULT = 0.0
"""Initial accumulated input."""

# =============================================================================
# ENGINE DEFAULTS
# =============================================================================

RESOLUTION_MS_DEFAULT = 0.1
"""Simulation step (ms)."""

BUFFER_STEPS_DEFAULT = 256
"""Number of per-step slots in each input ring buffer.

Must exceed the longest delivery delay (in steps) plus one update slice.
``Network.connect`` grows the buffers of a target when needed.
"""

# =============================================================================
# TRANSITION ENCODING
# =============================================================================

MULTIPLICITY_UP = 2
"""Spike multiplicity signalling S→I or I→R."""

MULTIPLICITY_DOWN = 1
"""Spike multiplicity signalling R→S."""

RECORDABLES = ("y", "h")
"""Names of the analog quantities exposed to data loggers."""

EXTERNAL_SENDER_ID = -1
"""Sender id of stimuli injected from outside the network."""


__all__ = [
    "Compartment",
    "TAU_M_DEFAULT",
    "BETA_SIRS_DEFAULT",
    "MU_SIRS_DEFAULT",
    "Y_INITIAL_DEFAULT",
    "H_INITIAL_DEFAULT",
    "RESOLUTION_MS_DEFAULT",
    "BUFFER_STEPS_DEFAULT",
    "MULTIPLICITY_UP",
    "MULTIPLICITY_DOWN",
    "RECORDABLES",
    "EXTERNAL_SENDER_ID",
]
