"""
Factory functions for creating SIRS units.

Convenience constructors for the two gain variants, so callers do not have
to assemble a config and a gain function by hand.

Usage:
======
    from sirsnet.components.units import create_linear_sirs_unit, create_sigmoidal_sirs_unit

    # Clamped identity gain with defaults
    unit = create_sirs_unit(unit_id=0)

    # Linear gain with custom slope and parameters
    unit = create_linear_sirs_unit(1, slope=0.5, beta_sirs=0.9, tau_m=5.0)

    # Sigmoidal gain centred at h = 2
    unit = create_sigmoidal_sirs_unit(2, gain=4.0, theta=2.0)
"""

from dataclasses import replace
from typing import Any, Optional

from sirsnet.components.units.gain import LinearGain, SigmoidGain, make_gain
from sirsnet.components.units.sirs_unit import SIRSUnit
from sirsnet.config.unit_config import SIRSUnitConfig


def create_sirs_unit(
    unit_id: int = 0,
    gain: str = "linear",
    config: Optional[SIRSUnitConfig] = None,
    gain_params: Optional[dict] = None,
    **overrides: Any,
) -> SIRSUnit:
    """Create a SIRS unit with a gain function chosen by name.

    Args:
        unit_id: Node id of the unit
        gain: Registered gain name ("linear" or "sigmoid")
        config: Base configuration (default: ``SIRSUnitConfig()``)
        gain_params: Keyword arguments for the gain function
        **overrides: SIRSUnitConfig fields to override (e.g. tau_m, beta_sirs)

    Returns:
        SIRSUnit with the requested gain

    Examples:
        >>> unit = create_sirs_unit(3, gain="sigmoid", gain_params={"gain": 2.0})
        >>> unit = create_sirs_unit(4, tau_m=20.0, y_initial=1)
    """
    if config is None:
        config = SIRSUnitConfig(**overrides)
    elif overrides:
        config = replace(config, **overrides)
    return SIRSUnit(unit_id, config=config, gain=make_gain(gain, **(gain_params or {})))


def create_linear_sirs_unit(
    unit_id: int = 0,
    slope: float = 1.0,
    offset: float = 0.0,
    **overrides: Any,
) -> SIRSUnit:
    """Create a SIRS unit whose gain is ``clamp(offset + slope * h, 0, 1)``.

    Args:
        unit_id: Node id of the unit
        slope: Gain per unit of input
        offset: Gain at zero input
        **overrides: SIRSUnitConfig fields to override
    """
    return SIRSUnit(unit_id, config=SIRSUnitConfig(**overrides), gain=LinearGain(slope, offset))


def create_sigmoidal_sirs_unit(
    unit_id: int = 0,
    gain: float = 1.0,
    theta: float = 0.0,
    **overrides: Any,
) -> SIRSUnit:
    """Create a SIRS unit whose gain is ``1 / (1 + exp(-gain * (h - theta)))``.

    Args:
        unit_id: Node id of the unit
        gain: Steepness of the sigmoid
        theta: Input at which the gain is 0.5
        **overrides: SIRSUnitConfig fields to override
    """
    return SIRSUnit(unit_id, config=SIRSUnitConfig(**overrides), gain=SigmoidGain(gain, theta))


__all__ = [
    "create_sirs_unit",
    "create_linear_sirs_unit",
    "create_sigmoidal_sirs_unit",
]
