"""
SIRS unit configuration.

``SIRSUnitConfig`` is the construction-time configuration of a unit: the
model parameters, the initial state and the engine settings (resolution and
buffer size). ``SIRSParameters`` is the immutable parameter set the update
engine reads; ``set_status`` replaces it as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

from sirsnet.config.base import BaseConfig
from sirsnet.config.validation import ValidatedConfig
from sirsnet.constants.unit import (
    BETA_SIRS_DEFAULT,
    BUFFER_STEPS_DEFAULT,
    H_INITIAL_DEFAULT,
    MU_SIRS_DEFAULT,
    RESOLUTION_MS_DEFAULT,
    TAU_M_DEFAULT,
    Y_INITIAL_DEFAULT,
)


@dataclass(frozen=True)
class SIRSParameters(ValidatedConfig):
    """Independent parameters of the SIRS model.

    Attributes:
        tau_m: Mean inter-update interval in ms (acts like a membrane time constant)
        beta: Transition probability S→I, modulated by the gain function
        mu: Transition probability I→R
    """

    tau_m: float = TAU_M_DEFAULT
    beta: float = BETA_SIRS_DEFAULT
    mu: float = MU_SIRS_DEFAULT

    _validation_rules = {
        'tau_m': ('finite', 'positive'),
        'beta': ('probability',),
        'mu': ('probability',),
    }

    def __post_init__(self) -> None:
        self.validate_config()

    def updated(self, **changes: float) -> "SIRSParameters":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return {"tau_m": self.tau_m, "beta": self.beta, "mu": self.mu}


@dataclass
class SIRSUnitConfig(BaseConfig, ValidatedConfig):
    """Configuration for a SIRS unit.

    Inherits device and dtype from BaseConfig.

    Attributes:
        tau_m: Mean inter-update interval in ms (default: 10.0)
            Re-evaluation times form a Poisson process with this mean
            interval. Larger values = slower dynamics.

        beta_sirs: Transition probability S→I (default: 0.1)
            Multiplied by the gain function output g(h) at each
            re-evaluation of a susceptible unit.

        mu_sirs: Transition probability I→R (default: 0.1)

        y_initial: Initial discrete state, 0=S, 1=I, 2=R (default: 0)
        h_initial: Initial accumulated input (default: 0.0)

        resolution_ms: Simulation step in ms (default: 0.1)
        buffer_steps: Slots per input ring buffer (default: 256)
    """

    tau_m: float = TAU_M_DEFAULT
    beta_sirs: float = BETA_SIRS_DEFAULT
    mu_sirs: float = MU_SIRS_DEFAULT

    y_initial: int = int(Y_INITIAL_DEFAULT)
    h_initial: float = H_INITIAL_DEFAULT

    resolution_ms: float = RESOLUTION_MS_DEFAULT
    buffer_steps: int = BUFFER_STEPS_DEFAULT

    _validation_rules = {
        'tau_m': ('finite', 'positive'),
        'beta_sirs': ('probability',),
        'mu_sirs': ('probability',),
        'y_initial': ('state_index',),
        'h_initial': ('finite',),
        'resolution_ms': ('finite', 'positive'),
        'buffer_steps': ('positive_integer',),
    }

    def __post_init__(self) -> None:
        self.validate_config()

    def to_parameters(self) -> SIRSParameters:
        """Extract the model parameter set."""
        return SIRSParameters(tau_m=self.tau_m, beta=self.beta_sirs, mu=self.mu_sirs)


__all__ = [
    "SIRSParameters",
    "SIRSUnitConfig",
]
