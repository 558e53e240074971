"""SIRS unit with linear or sigmoidal gain function.

This module implements a stochastic three-state unit for step-driven network
simulation. Each unit is Susceptible, Infected or Recovered and moves around
the cycle S → I → R → S at the points of its own Poisson process.

**Self-paced updates**:
=======================
A unit does not re-evaluate on every simulation step. It keeps the time of
its next re-evaluation ``t_next``; each time that time is reached, it draws
the following interval from an exponential distribution with mean ``tau_m``:

.. math::

    t_{next} \\leftarrow t_{next} + \\Delta, \\quad \\Delta \\sim \\mathrm{Exp}(\\tau_m)

The re-evaluation is detected on the first step with ``step * resolution_ms
>= t_next`` but happens, for scheduling purposes, at ``t_next`` itself, so the
intervals do not depend on the grid. A unit re-evaluates at most once per
step.

**Transition rule** at a re-evaluation, with window input ``h``:
===============================================================
- S → I with probability ``clamp(g(h) * beta, 0, 1)``
- I → R with probability ``mu``
- R → S always

**Input window**:
=================
Both input buffers are drained every step into ``h``. The window closed by
a re-evaluation at step ``k`` covers the steps after the previous
re-evaluation up to and including ``k``; after the re-evaluation ``h``
starts again from 0.

**Output**:
===========
The unit sends a spike only when its state changes: multiplicity 2 for
S → I and I → R, multiplicity 1 for R → S (see
``sirsnet.components.coding.transition_coding``). Because receivers decode
states from these multiplicities, at most one connection may exist between
two units.

**Randomness**:
===============
All draws come from the ``torch.Generator`` passed into ``update``. The unit
never creates, seeds or stores a generator.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import torch

from sirsnet.components.coding.transition_coding import TransitionDecoder, encode_transition
from sirsnet.components.units.gain import (
    GainFunction,
    LinearGain,
    clamp_probability,
    make_gain,
)
from sirsnet.config.unit_config import SIRSParameters, SIRSUnitConfig
from sirsnet.constants.unit import (
    EXTERNAL_SENDER_ID,
    MULTIPLICITY_UP,
    RECORDABLES,
    Compartment,
)
from sirsnet.core.event_system import (
    CurrentEvent,
    DataLoggingRequest,
    InboundEvent,
    OutgoingSpike,
    SignalKind,
    SignalType,
    SpikeEvent,
)
from sirsnet.errors import (
    ConfigurationError,
    IncompatibleConnectionError,
    SchedulingError,
    UnknownReceptorError,
    validate_finite,
    validate_positive,
    validate_state_index,
)
from sirsnet.mixins.diagnostics_mixin import DiagnosticsMixin
from sirsnet.mixins.resettable_mixin import ResettableMixin
from sirsnet.utils.ring_buffer import InputRingBuffer
from sirsnet.utils.rng import bernoulli, draw_exponential

logger = logging.getLogger(__name__)

EmitFn = Callable[[OutgoingSpike], None]
DataLoggerFn = Callable[["SIRSUnit", int], None]

_ACCEPTED_KINDS = frozenset({SignalKind.SPIKE, SignalKind.CURRENT, SignalKind.DATA_LOGGING})

_PARAMETER_KEYS = {
    "tau_m": "tau_m",
    "beta": "beta",
    "beta_sirs": "beta",
    "mu": "mu",
    "mu_sirs": "mu",
}
_STATE_KEYS = frozenset({"y", "h"})
_READ_ONLY_KEYS = frozenset({
    "unit_id", "model", "t_next", "t_last_input", "last_sender_id",
    "resolution_ms", "gain", "gain_params", "recordables", "sends_signal",
})


@dataclass
class SIRSState:
    """State variables of a SIRS unit.

    Attributes:
        y: Discrete state, 0=S, 1=I, 2=R
        h: Input accumulated in the current window
        last_sender_id: Node id of the sender of the last spike received
        t_next: Time of the next re-evaluation in ms (None until drawn)
        t_last_input: Time of the last step with input, as of the last
            re-evaluation (None until then)
    """

    y: int = int(Compartment.SUSCEPTIBLE)
    h: float = 0.0
    last_sender_id: Optional[int] = None
    t_next: Optional[float] = None
    t_last_input: Optional[float] = None


class SIRSUnit(ResettableMixin, DiagnosticsMixin):
    """Stochastic Susceptible-Infected-Recovered unit.

    Args:
        unit_id: Node id, used as sender id of emitted spikes
        config: SIRSUnitConfig with parameters, initial state and engine settings
        gain: Gain function or its registered name (default: clamped
            identity ``LinearGain()``)
        emit: Sink called with every ``OutgoingSpike``; may be set later
            with ``set_emitter``

    Example:
        >>> unit = SIRSUnit(0, SIRSUnitConfig(tau_m=10.0, beta_sirs=0.8, mu_sirs=0.3))
        >>> rng = make_generator(seed=1234)
        >>> unit.pre_run_hook(rng)
        >>> spikes = unit.update(origin_step=0, from_lag=0, to_lag=1000, rng=rng)
    """

    model_name = "sirs_unit"
    RECORDABLES = RECORDABLES

    def __init__(
        self,
        unit_id: int = 0,
        config: Optional[SIRSUnitConfig] = None,
        gain: Union[GainFunction, str, None] = None,
        emit: Optional[EmitFn] = None,
    ):
        self.unit_id = unit_id
        self.config = config or SIRSUnitConfig()
        if isinstance(gain, str):
            gain = make_gain(gain)
        self.gain = gain if gain is not None else LinearGain()
        self.P: SIRSParameters = self.config.to_parameters()
        self.resolution_ms = self.config.resolution_ms

        self._y_initial = int(self.config.y_initial)
        self._h_initial = float(self.config.h_initial)
        self.S = SIRSState(y=self._y_initial, h=self._h_initial)

        device = self.config.device
        dtype = self.config.get_torch_dtype()
        self.spikes = InputRingBuffer(self.config.buffer_steps, device=device, dtype=dtype)
        self.currents = InputRingBuffer(self.config.buffer_steps, device=device, dtype=dtype)

        self.decoder = TransitionDecoder()
        self._emit = emit
        self._data_loggers: List[DataLoggerFn] = []

        self._window_last_input_step: Optional[int] = None
        self._first_step: Optional[int] = None
        self._last_step: Optional[int] = None
        self._counts = self._fresh_counts()

    # ------------------------------------------------------------------
    # Basic accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return f"{self.model_name}[{self.unit_id}]"

    @property
    def y(self) -> int:
        return self.S.y

    @property
    def h(self) -> float:
        return self.S.h

    @property
    def t_next(self) -> Optional[float]:
        return self.S.t_next

    def set_emitter(self, emit: Optional[EmitFn]) -> None:
        self._emit = emit

    def attach_data_logger(self, record: DataLoggerFn) -> None:
        """Register a callback invoked as ``record(unit, step)`` at the end of every step."""
        self._data_loggers.append(record)

    def detach_data_logger(self, record: DataLoggerFn) -> None:
        self._data_loggers.remove(record)

    def get_recordable(self, name: str) -> float:
        """Read-only tap for data loggers.

        Raises:
            KeyError: If ``name`` is not a recordable of this unit
        """
        if name == "y":
            return float(self.S.y)
        if name == "h":
            return float(self.S.h)
        raise KeyError(f"{self.name} has no recordable '{name}' (available: {self.RECORDABLES})")

    # ------------------------------------------------------------------
    # Connection setup
    # ------------------------------------------------------------------

    def sends_signal(self) -> SignalType:
        return SignalType.BINARY

    def receives_signal(self) -> SignalType:
        return SignalType.BINARY

    def handles_test_event(self, kind: SignalKind, receptor_type: int = 0) -> int:
        """Check that a connection delivering ``kind`` may be established.

        Returns:
            The receptor port the connection will use (always 0)

        Raises:
            IncompatibleConnectionError: If ``kind`` is not accepted
            UnknownReceptorError: If ``receptor_type`` is not 0
        """
        if kind not in _ACCEPTED_KINDS:
            raise IncompatibleConnectionError(self.name, f"does not accept {kind} signals")
        if receptor_type != 0:
            raise UnknownReceptorError(self.name, receptor_type)
        return 0

    def accepts(self, kind: SignalKind, receptor_type: int = 0) -> bool:
        """Boolean form of ``handles_test_event``."""
        try:
            self.handles_test_event(kind, receptor_type)
        except IncompatibleConnectionError:
            return False
        return True

    def send_test_event(self, target: "SIRSUnit", receptor_type: int = 0) -> int:
        """Ask ``target`` whether it accepts this unit's spikes."""
        return target.handles_test_event(SignalKind.SPIKE, receptor_type)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def handle(self, event: InboundEvent) -> Optional[Dict[str, float]]:
        """Dispatch an inbound event by kind.

        Spikes and currents are added to their buffers and return None.
        Data logging requests are answered with the requested recordables.
        """
        if isinstance(event, SpikeEvent):
            self._handle_spike(event)
            return None
        if isinstance(event, CurrentEvent):
            self._handle_current(event)
            return None
        if isinstance(event, DataLoggingRequest):
            return self._handle_data_logging(event)
        raise TypeError(f"{self.name} cannot handle {type(event).__name__}")

    def _handle_spike(self, event: SpikeEvent) -> None:
        try:
            self.spikes.add_value(event.step, event.weight * event.multiplicity)
        except ValueError as e:
            raise SchedulingError(f"{self.name}: spike from {event.sender_id}: {e}") from e
        if event.sender_id != EXTERNAL_SENDER_ID:
            self.decoder.observe(event.sender_id, event.multiplicity, event.stamp_step)
        self.S.last_sender_id = event.sender_id
        self._counts["spikes_received"] += 1

    def _handle_current(self, event: CurrentEvent) -> None:
        try:
            self.currents.add_value(event.step, event.amplitude)
        except ValueError as e:
            raise SchedulingError(f"{self.name}: current from {event.sender_id}: {e}") from e
        self._counts["currents_received"] += 1

    def _handle_data_logging(self, event: DataLoggingRequest) -> Dict[str, float]:
        return {name: self.get_recordable(name) for name in event.record_from}

    # ------------------------------------------------------------------
    # Update engine
    # ------------------------------------------------------------------

    def init_buffers(self, origin_step: int = 0) -> None:
        """Empty both input buffers.

        The open input window (``h`` and the last step that carried input)
        is unit state and is left alone; ``reset_state`` clears it.
        """
        self.spikes.clear(origin_step)
        self.currents.clear(origin_step)
        logger.debug("%s: buffers cleared at step %d", self.name, origin_step)

    def pre_run_hook(self, rng: torch.Generator, origin_step: int = 0) -> None:
        """Draw the first re-evaluation time unless one is already pending."""
        if self.S.t_next is None:
            t_origin = origin_step * self.resolution_ms
            self.S.t_next = t_origin + draw_exponential(rng, self.P.tau_m)

    def update(
        self,
        origin_step: int,
        from_lag: int,
        to_lag: int,
        rng: torch.Generator,
    ) -> List[OutgoingSpike]:
        """Advance the unit over steps ``origin_step + lag``, ``lag in [from_lag, to_lag)``.

        Args:
            origin_step: First step of the current slice
            from_lag: First lag to process
            to_lag: One past the last lag to process
            rng: Random source of the calling thread (borrowed)

        Returns:
            Spikes emitted during these steps, in order. Each was also passed
            to the emit sink when one is set.
        """
        if self.S.t_next is None:
            self.pre_run_hook(rng, origin_step + from_lag)

        emitted: List[OutgoingSpike] = []
        for lag in range(from_lag, to_lag):
            step = origin_step + lag
            t_now = step * self.resolution_ms

            spike_input, n_spikes = self.spikes.drain(step)
            current_input, n_currents = self.currents.drain(step)
            self.S.h += spike_input + current_input
            if n_spikes or n_currents:
                self._window_last_input_step = step

            if t_now >= self.S.t_next:
                spike = self._reevaluate(step, t_now, rng)
                if spike is not None:
                    emitted.append(spike)

            for record in self._data_loggers:
                record(self, step)

            if self._first_step is None:
                self._first_step = step
            self._last_step = step

        return emitted

    def _reevaluate(self, step: int, t_now: float, rng: torch.Generator) -> Optional[OutgoingSpike]:
        old_y = Compartment(self.S.y)
        new_y = self._draw_transition(old_y, self.S.h, rng)
        self._counts["reevaluations"] += 1

        spike = None
        multiplicity = encode_transition(old_y, new_y)
        if multiplicity is not None:
            spike = OutgoingSpike(
                sender_id=self.unit_id,
                step=step,
                time_ms=t_now,
                multiplicity=multiplicity,
            )
            if self._emit is not None:
                self._emit(spike)
            self._count_transition(old_y, new_y, multiplicity)
            logger.debug(
                "%s: %s -> %s at t=%.4f ms (h=%.4f, multiplicity %d)",
                self.name, old_y.name, new_y.name, t_now, self.S.h, multiplicity,
            )
        self.S.y = int(new_y)

        # chained from the scheduled time, not the detecting step
        self.S.t_next += draw_exponential(rng, self.P.tau_m)

        if self._window_last_input_step is not None:
            self.S.t_last_input = self._window_last_input_step * self.resolution_ms
        self._window_last_input_step = None
        self.S.h = 0.0
        return spike

    def _draw_transition(self, y: Compartment, h: float, rng: torch.Generator) -> Compartment:
        if y == Compartment.SUSCEPTIBLE:
            p = clamp_probability(self.gain(h) * self.P.beta)
            return Compartment.INFECTED if bernoulli(rng, p) else Compartment.SUSCEPTIBLE
        if y == Compartment.INFECTED:
            return Compartment.RECOVERED if bernoulli(rng, self.P.mu) else Compartment.INFECTED
        return Compartment.SUSCEPTIBLE

    def infection_probability(self, h: Optional[float] = None) -> float:
        """Probability that a susceptible unit becomes infected at a re-evaluation."""
        return clamp_probability(self.gain(self.S.h if h is None else h) * self.P.beta)

    # ------------------------------------------------------------------
    # Status dictionary
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        """Parameters, state and metadata as a flat dictionary."""
        return {
            "unit_id": self.unit_id,
            "model": self.model_name,
            "tau_m": self.P.tau_m,
            "beta": self.P.beta,
            "mu": self.P.mu,
            "y": self.S.y,
            "h": self.S.h,
            "t_next": self.S.t_next,
            "t_last_input": self.S.t_last_input,
            "last_sender_id": self.S.last_sender_id,
            "resolution_ms": self.resolution_ms,
            "gain": self.gain.name,
            "gain_params": self.gain.get_status(),
            "recordables": tuple(self.RECORDABLES),
            "sends_signal": self.sends_signal().value,
        }

    def set_status(self, status: Mapping[str, Any]) -> None:
        """Update parameters and/or state from a dictionary.

        All values are validated before anything is assigned; on error the
        unit keeps its previous configuration and state.

        Raises:
            ConfigurationError: On unknown keys, conflicting aliases or
                out-of-range values
        """
        unknown = set(status) - set(_PARAMETER_KEYS) - _STATE_KEYS - _READ_ONLY_KEYS
        if unknown:
            raise ConfigurationError(f"{self.name}: unknown status keys {sorted(unknown)}")

        changes: Dict[str, Any] = {}
        for key, canonical in _PARAMETER_KEYS.items():
            if key not in status:
                continue
            if canonical in changes and changes[canonical] != status[key]:
                raise ConfigurationError(
                    f"{self.name}: conflicting values for {canonical} ({changes[canonical]} vs {status[key]})"
                )
            changes[canonical] = status[key]

        new_params = self.P.updated(**changes) if changes else self.P
        if "y" in status:
            validate_state_index(status["y"], "y")
        if "h" in status:
            validate_finite(status["h"], "h")

        self.P = new_params
        if "y" in status:
            self.S.y = self._y_initial = int(status["y"])
        if "h" in status:
            self.S.h = self._h_initial = float(status["h"])
        logger.debug("%s: status updated (%s)", self.name, ", ".join(sorted(status)))

    # ------------------------------------------------------------------
    # Time resolution
    # ------------------------------------------------------------------

    def calibrate_time(self, factor: float) -> None:
        """Re-express all times after a change of time unit.

        ``factor`` converts old time values to new ones. ``tau_m``, the step
        length and the pending ``t_next`` / ``t_last_input`` are multiplied by
        it, so the sequence of states in steps is unchanged.
        """
        validate_positive(factor, "factor")
        self.P = self.P.updated(tau_m=self.P.tau_m * factor)
        self.resolution_ms *= factor
        if self.S.t_next is not None:
            self.S.t_next *= factor
        if self.S.t_last_input is not None:
            self.S.t_last_input *= factor
        logger.debug("%s: time rescaled by %g", self.name, factor)

    def ensure_buffer_horizon(self, min_steps: int) -> None:
        """Grow both input buffers to at least ``min_steps`` slots."""
        if self.spikes.size < min_steps:
            self.spikes.resize(min_steps)
            self.currents.resize(min_steps)

    # ------------------------------------------------------------------
    # Lifecycle and diagnostics
    # ------------------------------------------------------------------

    def reset_state(self) -> None:
        """Restore the initial state and clear buffers, decoder and counters."""
        self.S = SIRSState(y=self._y_initial, h=self._h_initial)
        self.init_buffers(0)
        self._window_last_input_step = None
        self.decoder.reset()
        self._first_step = None
        self._last_step = None
        self._counts = self._fresh_counts()

    def clone(self, unit_id: int) -> "SIRSUnit":
        """New unit with this unit's parameters, gain and initial state."""
        config = replace(
            self.config,
            tau_m=self.P.tau_m,
            beta_sirs=self.P.beta,
            mu_sirs=self.P.mu,
            y_initial=self._y_initial,
            h_initial=self._h_initial,
            resolution_ms=self.resolution_ms,
            buffer_steps=self.spikes.size,
        )
        return SIRSUnit(unit_id, config=config, gain=copy.deepcopy(self.gain))

    @staticmethod
    def _fresh_counts() -> Dict[str, int]:
        return {
            "reevaluations": 0,
            "s_to_i": 0,
            "i_to_r": 0,
            "r_to_s": 0,
            "emitted_up": 0,
            "emitted_down": 0,
            "spikes_received": 0,
            "currents_received": 0,
        }

    def _count_transition(self, old_y: Compartment, new_y: Compartment, multiplicity: int) -> None:
        key = f"{old_y.name[0].lower()}_to_{new_y.name[0].lower()}"
        self._counts[key] += 1
        self._counts["emitted_up" if multiplicity == MULTIPLICITY_UP else "emitted_down"] += 1

    def get_diagnostics(self) -> Dict[str, float]:
        """Counters, transition rates and current state."""
        if self._first_step is None:
            elapsed_ms = 0.0
        else:
            elapsed_ms = (self._last_step - self._first_step + 1) * self.resolution_ms
        transitions = {k: self._counts[k] for k in ("s_to_i", "i_to_r", "r_to_s")}

        diagnostics: Dict[str, float] = {k: float(v) for k, v in self._counts.items()}
        diagnostics.update(self.transition_diagnostics(transitions, elapsed_ms))
        diagnostics["elapsed_ms"] = elapsed_ms
        diagnostics["y"] = float(self.S.y)
        diagnostics["h"] = self.S.h
        diagnostics["infected_senders"] = float(self.decoder.n_in_state(Compartment.INFECTED))
        return diagnostics

    def __repr__(self) -> str:
        return (
            f"SIRSUnit(id={self.unit_id}, y={Compartment(self.S.y).name}, "
            f"tau_m={self.P.tau_m}, beta={self.P.beta}, mu={self.P.mu}, gain={self.gain!r})"
        )


__all__ = [
    "SIRSState",
    "SIRSUnit",
]
