"""
sirsnet configuration system.

Usage:
======

    from sirsnet.config import SIRSUnitConfig

    config = SIRSUnitConfig(tau_m=10.0, beta_sirs=0.8, mu_sirs=0.3)
    params = config.to_parameters()

Invalid values raise ``ConfigValidationError`` (a ``ConfigurationError``)
listing every offending field.
"""

from sirsnet.config.base import BaseConfig
from sirsnet.config.unit_config import SIRSParameters, SIRSUnitConfig
from sirsnet.config.validation import (
    ConfigValidationError,
    ValidatedConfig,
    ValidatorRegistry,
)

__all__ = [
    "BaseConfig",
    "SIRSParameters",
    "SIRSUnitConfig",
    "ConfigValidationError",
    "ValidatedConfig",
    "ValidatorRegistry",
]
