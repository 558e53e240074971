"""
SIRS unit models.

This module contains the stochastic SIRS unit, its gain functions and
factory helpers.
"""

from sirsnet.components.units.gain import (
    GainFunction,
    LinearGain,
    SigmoidGain,
    clamp_probability,
    make_gain,
)
from sirsnet.components.units.sirs_unit import SIRSState, SIRSUnit
from sirsnet.components.units.unit_factory import (
    create_linear_sirs_unit,
    create_sigmoidal_sirs_unit,
    create_sirs_unit,
)

__all__ = [
    # Gain functions
    "GainFunction",
    "LinearGain",
    "SigmoidGain",
    "clamp_probability",
    "make_gain",
    # Unit
    "SIRSState",
    "SIRSUnit",
    # Factories
    "create_sirs_unit",
    "create_linear_sirs_unit",
    "create_sigmoidal_sirs_unit",
]
