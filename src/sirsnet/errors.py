"""
Custom exception classes and validation utilities for sirsnet.

This module provides:
1. Hierarchical exception classes for the different error categories
2. Validation utilities that enforce parameter and state constraints
3. Consistent error message formatting across components

Exception Hierarchy:
====================
SirsNetError (base)
├── ConfigurationError - Invalid parameter or state values
│   └── ConfigValidationError - Declarative config validation failures
├── IncompatibleConnectionError - Connection refused at link time
│   └── UnknownReceptorError - Receptor port not served by the target
└── SchedulingError - Event delivered outside the buffer horizon

Usage Examples:
===============
    # Raise configuration error
    raise ConfigurationError("tau_m must be positive, got -10.0")

    # Validate a transition probability
    validate_probability(beta, "beta")

Design Philosophy:
==================
- Configuration errors are raised at set-time, before state is touched
- Connection errors are raised at link-establishment time, never at delivery
- Probabilities computed at run time are clamped, not raised
"""

from __future__ import annotations

import math
from typing import Any

# =============================================================================
# Exception Hierarchy
# =============================================================================


class SirsNetError(Exception):
    """Base exception for all sirsnet-specific errors.

    All custom exceptions in sirsnet inherit from this class, enabling
    code to catch sirsnet errors specifically:

        try:
            unit.set_status({"beta": 1.5})
        except SirsNetError as e:
            logger.error(f"sirsnet error: {e}")
    """


class ConfigurationError(SirsNetError):
    """Invalid configuration parameters or initial state.

    Raised when configuration values are out of valid range. The component
    keeps its previous valid configuration.

    Example:
        raise ConfigurationError("tau_m must be positive, got -10.0")
    """


class IncompatibleConnectionError(SirsNetError):
    """Connection refused because the target cannot handle the signal kind.

    Raised while a link is being established (``Network.connect``), never
    when an event is delivered over an existing link.

    Args:
        target_name: Name of the unit refusing the connection
        message: Description of the incompatibility

    Example:
        raise IncompatibleConnectionError("sirs_unit[3]", "duplicate binary connection from 1")
    """

    def __init__(self, target_name: str, message: str):
        super().__init__(f"[{target_name}] {message}")
        self.target_name = target_name


class UnknownReceptorError(IncompatibleConnectionError):
    """Receptor port requested by a connection is not served by the target."""

    def __init__(self, target_name: str, receptor_type: int):
        super().__init__(
            target_name,
            f"receptor type {receptor_type} is not supported (only receptor 0)",
        )
        self.receptor_type = receptor_type


class SchedulingError(SirsNetError):
    """Event timing incompatible with the unit's buffers.

    Raised when an event is delivered to a step that has already been drained
    or lies beyond the input buffer horizon.
    """


# =============================================================================
# Validation Utilities
# =============================================================================


def validate_finite(value: Any, name: str) -> None:
    """Validate that a value is a finite real number.

    Raises:
        ConfigurationError: If value is not numeric, or is inf/nan
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be numeric, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")


def validate_positive(
    value: float,
    name: str,
    allow_zero: bool = False,
) -> None:
    """Validate that a value is positive.

    Useful for time constants, resolutions and rescaling factors.

    Args:
        value: Value to check
        name: Parameter name for error messages
        allow_zero: Whether zero is acceptable (default: False)

    Raises:
        ConfigurationError: If value not positive

    Example:
        >>> validate_positive(tau_m, "tau_m")
    """
    validate_finite(value, name)
    if allow_zero:
        if value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")
    else:
        if value <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value}")


def validate_probability(
    value: float,
    name: str,
) -> None:
    """Validate that a value is in [0, 1] range.

    Args:
        value: Probability value to check
        name: Parameter name for error messages

    Raises:
        ConfigurationError: If not in valid range

    Example:
        >>> validate_probability(mu, "mu")
    """
    validate_finite(value, name)
    if not 0 <= value <= 1:
        raise ConfigurationError(
            f"{name} must be in [0, 1] range, got {value}"
        )


def validate_state_index(value: Any, name: str = "y") -> None:
    """Validate a discrete SIRS state index (0=S, 1=I, 2=R).

    Integral floats such as ``1.0`` are accepted, since status dictionaries
    frequently carry numbers as floats.

    Raises:
        ConfigurationError: If value is not one of 0, 1, 2
    """
    validate_finite(value, name)
    if int(value) != value or int(value) not in (0, 1, 2):
        raise ConfigurationError(f"{name} must be one of 0 (S), 1 (I), 2 (R), got {value}")


__all__ = [
    # Exception classes
    "SirsNetError",
    "ConfigurationError",
    "IncompatibleConnectionError",
    "UnknownReceptorError",
    "SchedulingError",
    # Validation utilities
    "validate_finite",
    "validate_positive",
    "validate_probability",
    "validate_state_index",
]
