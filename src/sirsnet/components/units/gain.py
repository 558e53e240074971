"""Gain functions for SIRS units.

A gain function maps the accumulated input ``h`` of a unit to an activation
probability in [0, 1]. It modulates the S→I transition:

    P(S → I) = clamp(g(h) * beta, 0, 1)

The unit holds one gain object, chosen at construction. Gain objects are
pure: the same ``h`` always yields the same probability, and calling them
never changes their parameters.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from sirsnet.errors import ConfigurationError, validate_finite


def clamp_probability(p: float) -> float:
    """Clamp ``p`` into [0, 1]; NaN maps to 0."""
    if p != p:
        return 0.0
    return min(max(p, 0.0), 1.0)


class GainFunction(ABC):
    """Activation capability shared by all gain variants."""

    name: str = "gain"

    @abstractmethod
    def __call__(self, h: float) -> float:
        """Activation probability for accumulated input ``h``."""

    @abstractmethod
    def get_status(self) -> Dict[str, float]:
        """Gain parameters, reported in the unit's status dictionary."""

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.get_status().items())
        return f"{self.__class__.__name__}({params})"


class LinearGain(GainFunction):
    """Clamped linear gain: ``g(h) = clamp(offset + slope * h, 0, 1)``.

    The defaults give the clamped identity, so ``g(0) = 0``: a susceptible
    unit without input never becomes infected.
    """

    name = "linear"

    def __init__(self, slope: float = 1.0, offset: float = 0.0):
        validate_finite(slope, "slope")
        validate_finite(offset, "offset")
        self.slope = float(slope)
        self.offset = float(offset)

    def __call__(self, h: float) -> float:
        return clamp_probability(self.offset + self.slope * h)

    def get_status(self) -> Dict[str, float]:
        return {"slope": self.slope, "offset": self.offset}


class SigmoidGain(GainFunction):
    """Logistic gain: ``g(h) = 1 / (1 + exp(-gain * (h - theta)))``.

    With the defaults ``g(0) = 0.5``, so a susceptible unit can become
    infected without input, with probability ``beta / 2`` per re-evaluation.
    """

    name = "sigmoid"

    def __init__(self, gain: float = 1.0, theta: float = 0.0):
        validate_finite(gain, "gain")
        validate_finite(theta, "theta")
        self.gain = float(gain)
        self.theta = float(theta)

    def __call__(self, h: float) -> float:
        x = self.gain * (h - self.theta)
        # Split by sign so exp() never overflows
        if x >= 0:
            return 1.0 / (1.0 + math.exp(-x))
        z = math.exp(x)
        return z / (1.0 + z)

    def get_status(self) -> Dict[str, float]:
        return {"gain": self.gain, "theta": self.theta}


_GAIN_REGISTRY: Dict[str, Callable[..., GainFunction]] = {
    LinearGain.name: LinearGain,
    SigmoidGain.name: SigmoidGain,
}


def make_gain(name: str, **kwargs: Any) -> GainFunction:
    """Create a gain function by name ("linear" or "sigmoid").

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        factory = _GAIN_REGISTRY[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown gain function '{name}'. Choose from: {sorted(_GAIN_REGISTRY)}"
        ) from None
    return factory(**kwargs)


__all__ = [
    "GainFunction",
    "LinearGain",
    "SigmoidGain",
    "clamp_probability",
    "make_gain",
]
