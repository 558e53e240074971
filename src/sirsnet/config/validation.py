"""
Declarative validation of sirsnet configs.

A config lists, per field, the names of the rules its value must satisfy:

    _validation_rules = {
        'tau_m': ('finite', 'positive'),
        'beta': ('probability',),
    }

``validate_config`` checks every field, stops at the first failing rule of
each field and reports all failing fields in one ``ConfigValidationError``.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Tuple

from sirsnet.errors import ConfigurationError

Rule = Callable[[Any, str], None]


class ConfigValidationError(ConfigurationError):
    """Raised when one or more config fields fail validation."""


def _as_number(value: Any, name: str) -> float:
    # bool is an int subclass but never a meaningful parameter value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(f"{name} must be numeric, got {type(value).__name__}")
    return value


def _finite(value: Any, name: str) -> None:
    if not math.isfinite(_as_number(value, name)):
        raise ConfigValidationError(f"{name}={value} must be finite (not inf/nan)")


def _positive(value: Any, name: str) -> None:
    if not _as_number(value, name) > 0:
        raise ConfigValidationError(f"{name}={value} must be positive")


def _probability(value: Any, name: str) -> None:
    if not 0.0 <= _as_number(value, name) <= 1.0:
        raise ConfigValidationError(f"{name}={value} must be a probability in [0, 1]")


def _positive_integer(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be a positive integer")


def _state_index(value: Any, name: str) -> None:
    """Compartment index: 0 (S), 1 (I) or 2 (R)."""
    if _as_number(value, name) not in (0, 1, 2):
        raise ConfigValidationError(f"{name}={value} must be one of 0 (S), 1 (I), 2 (R)")


class ValidatorRegistry:
    """Named validation rules shared by all configs.

    Usage:
        ValidatorRegistry.get_validator('probability')(0.5, 'beta')  # passes
        ValidatorRegistry.get_validator('probability')(1.5, 'beta')  # raises
    """

    _validators: Dict[str, Rule] = {
        'finite': _finite,
        'positive': _positive,
        'probability': _probability,
        'positive_integer': _positive_integer,
        'state_index': _state_index,
    }

    @classmethod
    def register(cls, name: str, validator: Rule) -> None:
        cls._validators[name] = validator

    @classmethod
    def get_validator(cls, rule: str) -> Rule:
        try:
            return cls._validators[rule]
        except KeyError:
            raise ValueError(
                f"Unknown validation rule: {rule} (known: {sorted(cls._validators)})"
            ) from None


class ValidatedConfig:
    """Mixin that checks fields against ``_validation_rules``.

    Dataclass configs call ``validate_config()`` from ``__post_init__``.
    """

    _validation_rules: Dict[str, Tuple[str, ...]] = {}

    def validate_config(self) -> None:
        """Raises:
            ConfigValidationError: Listing every field that failed
        """
        errors: List[str] = []
        for field_name, rules in self._validation_rules.items():
            value = getattr(self, field_name)
            for rule in rules:
                try:
                    ValidatorRegistry.get_validator(rule)(value, field_name)
                except ConfigValidationError as e:
                    errors.append(str(e))
                    break

        if errors:
            raise ConfigValidationError(
                f"{type(self).__name__} validation failed:\n"
                + "\n".join(f"  • {e}" for e in errors)
            )


__all__ = [
    "ConfigValidationError",
    "ValidatorRegistry",
    "ValidatedConfig",
]
