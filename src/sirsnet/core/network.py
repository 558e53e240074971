"""
Network driver for populations of SIRS units.

The ``Network`` owns units, their connections and the spikes in flight, and
advances everything on a common step grid:

    net = Network(resolution_ms=0.1, min_delay_steps=10)
    a = net.add_unit(beta_sirs=0.9)
    b = net.add_unit()
    net.connect(a, b, weight=1.0, delay_ms=1.0)
    net.inject_current(a, amplitude=1.0)

    rng = make_generator(seed=42)
    net.simulate(500.0, rng)

Simulation proceeds in slices of ``min_delay_steps`` steps. At the start of
a slice every spike due within it is handed to its target; then each unit is
updated over the whole slice. Spikes emitted during the slice are scheduled
with their connection delay, which is never shorter than a slice, so no spike
can be due in the slice that produced it.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import torch

from sirsnet.components.units.sirs_unit import SIRSUnit
from sirsnet.components.units.unit_factory import create_sirs_unit
from sirsnet.constants.time import is_grid_aligned, ms_to_steps, steps_to_ms
from sirsnet.constants.unit import EXTERNAL_SENDER_ID, RECORDABLES, RESOLUTION_MS_DEFAULT, Compartment
from sirsnet.core.event_system import (
    Connection,
    CurrentEvent,
    EventScheduler,
    OutgoingSpike,
    SignalType,
    SpikeEvent,
    signal_types_compatible,
)
from sirsnet.diagnostics.recorder import Multimeter
from sirsnet.errors import (
    ConfigurationError,
    IncompatibleConnectionError,
    SchedulingError,
    validate_finite,
    validate_positive,
)

logger = logging.getLogger(__name__)


@dataclass
class CurrentSource:
    """Constant current delivered to one unit on every step in [start_step, stop_step)."""
    target: int
    amplitude: float
    start_step: int = 0
    stop_step: Optional[int] = None

    def active_steps(self, first: int, last: int) -> range:
        """Steps in ``[first, last]`` on which the source is on."""
        lo = max(first, self.start_step)
        hi = last + 1 if self.stop_step is None else min(last + 1, self.stop_step)
        return range(lo, max(lo, hi))


class Network:
    """Step-driven container of SIRS units.

    Args:
        resolution_ms: Step length shared by all units
        min_delay_steps: Slice length and lower bound of connection delays
    """

    def __init__(
        self,
        resolution_ms: float = RESOLUTION_MS_DEFAULT,
        min_delay_steps: int = 1,
    ):
        validate_positive(resolution_ms, "resolution_ms")
        if isinstance(min_delay_steps, bool) or not isinstance(min_delay_steps, int) or min_delay_steps < 1:
            raise ConfigurationError(f"min_delay_steps must be a positive integer, got {min_delay_steps!r}")

        self.resolution_ms = resolution_ms
        self.min_delay_steps = min_delay_steps

        self.units: Dict[int, SIRSUnit] = {}
        self.connections: List[Connection] = []
        self._outgoing: Dict[int, List[Connection]] = defaultdict(list)
        self._pairs: Set[Tuple[int, int]] = set()

        self.scheduler = EventScheduler()
        self.current_sources: List[CurrentSource] = []
        self.multimeters: List[Multimeter] = []

        self.current_step = 0
        self.spike_log: List[OutgoingSpike] = []
        self._prepared: Set[int] = set()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.units)

    @property
    def time_ms(self) -> float:
        return steps_to_ms(self.current_step, self.resolution_ms)

    def _next_unit_id(self) -> int:
        return max(self.units) + 1 if self.units else 0

    def add_unit(self, unit: Optional[SIRSUnit] = None, gain: str = "linear", **overrides: Any) -> int:
        """Add a unit, or create one from ``gain`` and config overrides.

        Returns:
            The unit id
        """
        if unit is None:
            overrides.setdefault("resolution_ms", self.resolution_ms)
            unit = create_sirs_unit(self._next_unit_id(), gain=gain, **overrides)
        elif overrides:
            raise ConfigurationError("config overrides are only used when no unit is given")

        if unit.unit_id in self.units:
            raise ConfigurationError(f"unit id {unit.unit_id} is already in use")
        if unit.unit_id < 0:
            raise ConfigurationError(f"unit ids must be non-negative, got {unit.unit_id}")
        if not math.isclose(unit.resolution_ms, self.resolution_ms):
            raise ConfigurationError(
                f"{unit.name} uses resolution {unit.resolution_ms} ms, network uses {self.resolution_ms} ms"
            )

        unit.ensure_buffer_horizon(self.min_delay_steps)
        unit.set_emitter(self._route)
        self.units[unit.unit_id] = unit
        return unit.unit_id

    def create(self, n: int, gain: str = "linear", **overrides: Any) -> List[int]:
        """Add ``n`` identical units; returns their ids."""
        return [self.add_unit(gain=gain, **overrides) for _ in range(n)]

    def get_unit(self, unit_id: int) -> SIRSUnit:
        try:
            return self.units[unit_id]
        except KeyError:
            raise ConfigurationError(f"no unit with id {unit_id}") from None

    def connect(
        self,
        source: int,
        target: int,
        weight: float = 1.0,
        delay_ms: Optional[float] = None,
        receptor_type: int = 0,
    ) -> Connection:
        """Create a connection after the link-time checks.

        Raises:
            ConfigurationError: On unknown ids, invalid weight or delay
            IncompatibleConnectionError: If the target refuses the signal,
                the signal types do not match, or a binary sender is
                already connected to the target
        """
        src = self.get_unit(source)
        tgt = self.get_unit(target)
        validate_finite(weight, "weight")

        if delay_ms is None:
            delay_steps = self.min_delay_steps
        else:
            validate_positive(delay_ms, "delay_ms")
            if not is_grid_aligned(delay_ms, self.resolution_ms):
                raise ConfigurationError(f"delay {delay_ms} ms is not a multiple of the resolution")
            delay_steps = ms_to_steps(delay_ms, self.resolution_ms)
        if delay_steps < self.min_delay_steps:
            raise ConfigurationError(
                f"delay of {delay_steps} steps is shorter than the minimum delay of {self.min_delay_steps} steps"
            )

        port = src.send_test_event(tgt, receptor_type)
        sent, received = src.sends_signal(), tgt.receives_signal()
        if not signal_types_compatible(sent, received):
            raise IncompatibleConnectionError(
                tgt.name, f"expects {received.value} signals, {src.name} sends {sent.value}"
            )
        if sent == SignalType.BINARY and (source, target) in self._pairs:
            raise IncompatibleConnectionError(
                tgt.name, f"already connected from {src.name}; binary senders allow one connection per pair"
            )

        conn = Connection(source=source, target=target, weight=weight, delay_steps=delay_steps, receptor_type=port)
        self.connections.append(conn)
        self._outgoing[source].append(conn)
        self._pairs.add((source, target))
        tgt.decoder.register(source, src.y)
        return conn

    def get_connections(self, source: Optional[int] = None, target: Optional[int] = None) -> List[Connection]:
        return [
            c for c in self.connections
            if (source is None or c.source == source) and (target is None or c.target == target)
        ]

    # ------------------------------------------------------------------
    # Stimulation and recording
    # ------------------------------------------------------------------

    def inject_current(
        self,
        target: int,
        amplitude: float,
        start_ms: float = 0.0,
        stop_ms: Optional[float] = None,
    ) -> CurrentSource:
        """Deliver ``amplitude`` to ``target`` on every step in [start_ms, stop_ms)."""
        self.get_unit(target)
        validate_finite(amplitude, "amplitude")
        start_step = ms_to_steps(start_ms, self.resolution_ms)
        stop_step = None if stop_ms is None else ms_to_steps(stop_ms, self.resolution_ms)
        if stop_step is not None and stop_step < start_step:
            raise ConfigurationError(f"stop_ms={stop_ms} precedes start_ms={start_ms}")

        source = CurrentSource(target=target, amplitude=amplitude, start_step=start_step, stop_step=stop_step)
        self.current_sources.append(source)
        return source

    def inject_spike(
        self,
        target: int,
        time_ms: float,
        weight: float = 1.0,
        multiplicity: int = 1,
        sender_id: int = EXTERNAL_SENDER_ID,
    ) -> SpikeEvent:
        """Schedule a single spike for delivery to ``target`` at ``time_ms``.

        Raises:
            SchedulingError: If ``time_ms`` lies before the current time
        """
        self.get_unit(target)
        validate_finite(weight, "weight")
        step = ms_to_steps(time_ms, self.resolution_ms)
        if step < self.current_step:
            raise SchedulingError(f"cannot inject a spike at {time_ms} ms, network is at {self.time_ms} ms")

        event = SpikeEvent(sender_id=sender_id, weight=weight, step=step, multiplicity=multiplicity, stamp=step)
        self.scheduler.schedule(target, event)
        return event

    def add_multimeter(
        self,
        targets: Optional[Sequence[int]] = None,
        interval_ms: float = 1.0,
        record_from: Sequence[str] = RECORDABLES,
    ) -> Multimeter:
        """Create a multimeter sampling ``targets`` (default: all units)."""
        meter = Multimeter(interval_ms=interval_ms, record_from=record_from, resolution_ms=self.resolution_ms)
        for uid in (sorted(self.units) if targets is None else targets):
            meter.connect(self.get_unit(uid))
        self.multimeters.append(meter)
        return meter

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _route(self, spike: OutgoingSpike) -> None:
        self.spike_log.append(spike)
        for conn in self._outgoing.get(spike.sender_id, ()):
            self.scheduler.schedule(
                conn.target,
                SpikeEvent(
                    sender_id=spike.sender_id,
                    weight=conn.weight,
                    step=spike.step + conn.delay_steps,
                    multiplicity=spike.multiplicity,
                    stamp=spike.step,
                ),
            )

    def _deliver(self, first_step: int, last_step: int) -> int:
        n = 0
        for delivery in self.scheduler.pop_until(last_step):
            if delivery.step < first_step:
                raise SchedulingError(
                    f"spike for unit {delivery.target} due at step {delivery.step} arrived after step {first_step}"
                )
            self.units[delivery.target].handle(delivery.event)
            n += 1

        for source in self.current_sources:
            unit = self.units[source.target]
            for step in source.active_steps(first_step, last_step):
                unit.handle(CurrentEvent(sender_id=EXTERNAL_SENDER_ID, amplitude=source.amplitude, step=step))
        return n

    def prepare(self, rng: torch.Generator) -> None:
        """Get units ready to run.

        Buffers are cleared once per unit, on its first run after being added
        or after ``reset``, so that a run split over several ``simulate``
        calls behaves like a single one. Pending first re-evaluation times
        are drawn for every unit that has none.
        """
        for uid in sorted(self.units):
            unit = self.units[uid]
            if uid not in self._prepared:
                unit.init_buffers(self.current_step)
                self._prepared.add(uid)
            unit.pre_run_hook(rng, self.current_step)

    def simulate(self, duration_ms: float, rng: torch.Generator) -> List[OutgoingSpike]:
        """Advance the network by ``duration_ms``.

        Args:
            duration_ms: Multiple of the resolution, >= 0
            rng: Random source for all units (borrowed)

        Returns:
            Spikes emitted during this call, in emission order
        """
        if duration_ms < 0 or not is_grid_aligned(duration_ms, self.resolution_ms):
            raise ConfigurationError(
                f"duration {duration_ms} ms must be a non-negative multiple of {self.resolution_ms} ms"
            )
        n_steps = ms_to_steps(duration_ms, self.resolution_ms)
        self.prepare(rng)

        first_spike = len(self.spike_log)
        delivered = 0
        end_step = self.current_step + n_steps
        while self.current_step < end_step:
            origin = self.current_step
            to_lag = min(self.min_delay_steps, end_step - origin)
            delivered += self._deliver(origin, origin + to_lag - 1)
            for uid in sorted(self.units):
                self.units[uid].update(origin, 0, to_lag, rng)
            self.current_step = origin + to_lag

        emitted = self.spike_log[first_spike:]
        logger.info(
            "Simulated %d steps (%.3f ms): %d spikes emitted, %d delivered, %d in flight",
            n_steps, duration_ms, len(emitted), delivered, len(self.scheduler),
        )
        return emitted

    # ------------------------------------------------------------------
    # Whole-network operations
    # ------------------------------------------------------------------

    def calibrate_time(self, factor: float) -> None:
        """Re-express all times in a new unit; see ``SIRSUnit.calibrate_time``."""
        validate_positive(factor, "factor")
        self.resolution_ms *= factor
        for unit in self.units.values():
            unit.calibrate_time(factor)
        for meter in self.multimeters:
            meter.calibrate_time(factor)

    def reset(self) -> None:
        """Return to step 0 with all units in their initial states."""
        for unit in self.units.values():
            unit.reset_state()
        for conn in self.connections:
            self.units[conn.target].decoder.register(conn.source, self.units[conn.source].y)
        for meter in self.multimeters:
            meter.clear()
        self.scheduler.clear()
        self.spike_log.clear()
        self.current_step = 0
        self._prepared.clear()

    def states(self) -> np.ndarray:
        """Current ``y`` of every unit, in ascending id order."""
        return np.array([self.units[uid].y for uid in sorted(self.units)], dtype=np.int64)

    def state_counts(self) -> Dict[str, int]:
        y = self.states()
        return {c.name[0]: int(np.sum(y == int(c))) for c in Compartment}

    def get_spikes(self, unit_id: Optional[int] = None) -> Dict[str, np.ndarray]:
        """Emitted spikes as arrays (``senders``, ``steps``, ``times``, ``multiplicities``)."""
        spikes = [s for s in self.spike_log if unit_id is None or s.sender_id == unit_id]
        return {
            "senders": np.array([s.sender_id for s in spikes], dtype=np.int64),
            "steps": np.array([s.step for s in spikes], dtype=np.int64),
            "times": np.array([s.time_ms for s in spikes], dtype=np.float64),
            "multiplicities": np.array([s.multiplicity for s in spikes], dtype=np.int64),
        }


__all__ = [
    "CurrentSource",
    "Network",
]
