"""
sirsnet - stochastic SIRS units for step-driven network simulation.

Each unit is Susceptible, Infected or Recovered and re-evaluates its state
at the points of its own Poisson process. State changes are broadcast as
spikes whose multiplicity encodes the transition.

Quick Start:
============

    from sirsnet import Network, make_generator

    net = Network(resolution_ms=0.1, min_delay_steps=10)
    ids = net.create(100, beta_sirs=0.5, mu_sirs=0.1)
    for source in ids:
        for target in ids:
            if source != target:
                net.connect(source, target, weight=0.02, delay_ms=1.0)

    meter = net.add_multimeter(interval_ms=1.0, record_from=("y",))
    net.simulate(1000.0, make_generator(seed=7))
    counts = meter.population_trace()

Single units can be driven directly:

    from sirsnet import SIRSUnit, SIRSUnitConfig

    unit = SIRSUnit(0, SIRSUnitConfig(tau_m=10.0, beta_sirs=0.8))
    spikes = unit.update(origin_step=0, from_lag=0, to_lag=1000, rng=make_generator(seed=1))
"""

__version__ = "0.1.0"

# Configuration
from sirsnet.config import BaseConfig, SIRSParameters, SIRSUnitConfig

# Constants
from sirsnet.constants import Compartment, RECORDABLES

# Errors
from sirsnet.errors import (
    ConfigurationError,
    IncompatibleConnectionError,
    SchedulingError,
    SirsNetError,
    UnknownReceptorError,
)

# Units
from sirsnet.components.units import (
    GainFunction,
    LinearGain,
    SigmoidGain,
    SIRSState,
    SIRSUnit,
    create_linear_sirs_unit,
    create_sigmoidal_sirs_unit,
    create_sirs_unit,
    make_gain,
)
from sirsnet.components.coding import TransitionDecoder, encode_transition

# Events and network
from sirsnet.core.event_system import (
    CurrentEvent,
    DataLoggingRequest,
    OutgoingSpike,
    SignalKind,
    SignalType,
    SpikeEvent,
)
from sirsnet.core.network import Network
from sirsnet.diagnostics import Multimeter

# Utilities
from sirsnet.utils import InputRingBuffer, make_generator

__all__ = [
    "__version__",
    # Configuration
    "BaseConfig",
    "SIRSParameters",
    "SIRSUnitConfig",
    # Constants
    "Compartment",
    "RECORDABLES",
    # Errors
    "SirsNetError",
    "ConfigurationError",
    "IncompatibleConnectionError",
    "UnknownReceptorError",
    "SchedulingError",
    # Units
    "GainFunction",
    "LinearGain",
    "SigmoidGain",
    "SIRSState",
    "SIRSUnit",
    "create_sirs_unit",
    "create_linear_sirs_unit",
    "create_sigmoidal_sirs_unit",
    "make_gain",
    "TransitionDecoder",
    "encode_transition",
    # Events and network
    "CurrentEvent",
    "DataLoggingRequest",
    "OutgoingSpike",
    "SignalKind",
    "SignalType",
    "SpikeEvent",
    "Network",
    "Multimeter",
    # Utilities
    "InputRingBuffer",
    "make_generator",
]
