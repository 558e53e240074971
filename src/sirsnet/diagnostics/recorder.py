"""
Multimeter: sampled recording of unit recordables.

A multimeter attaches to one or more units and samples their recordables
(``y``, ``h``) at a fixed interval. Samples are taken at the end of each
step whose end time is a multiple of the interval, by sending the unit a
``DataLoggingRequest``; the unit answers synchronously.

    meter = Multimeter(interval_ms=1.0, record_from=("y",))
    meter.connect(unit)
    network.simulate(1000.0, rng)

    data = meter.get_data()          # senders, times, y as numpy arrays
    trace = meter.get_trace(unit.unit_id)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import numpy as np

from sirsnet.constants.time import is_grid_aligned, ms_to_steps
from sirsnet.constants.unit import RECORDABLES, RESOLUTION_MS_DEFAULT
from sirsnet.core.event_system import DataLoggingRequest, SignalKind
from sirsnet.errors import ConfigurationError, IncompatibleConnectionError, validate_positive
from sirsnet.mixins.diagnostics_mixin import DiagnosticsMixin

if TYPE_CHECKING:
    from sirsnet.components.units.sirs_unit import SIRSUnit

logger = logging.getLogger(__name__)


class Multimeter(DiagnosticsMixin):
    """Periodic sampler of unit recordables.

    Args:
        interval_ms: Sampling interval; clamped to the resolution with a
            warning if smaller
        record_from: Names of the recordables to sample
        resolution_ms: Step length of the units it will be connected to
        recorder_id: Sender id used in data logging requests
    """

    def __init__(
        self,
        interval_ms: float = 1.0,
        record_from: Sequence[str] = RECORDABLES,
        resolution_ms: float = RESOLUTION_MS_DEFAULT,
        recorder_id: int = -2,
    ):
        validate_positive(interval_ms, "interval_ms")
        validate_positive(resolution_ms, "resolution_ms")
        if not record_from:
            raise ConfigurationError("record_from must name at least one recordable")

        if interval_ms < resolution_ms:
            logger.warning(
                "Multimeter interval %.4f ms is shorter than the resolution; using %.4f ms",
                interval_ms, resolution_ms,
            )
            interval_ms = resolution_ms
        if not is_grid_aligned(interval_ms, resolution_ms):
            raise ConfigurationError(
                f"interval_ms={interval_ms} must be a multiple of the resolution {resolution_ms} ms"
            )

        self.interval_ms = interval_ms
        self.resolution_ms = resolution_ms
        self.interval_steps = ms_to_steps(interval_ms, resolution_ms)
        self.record_from = tuple(record_from)
        self.recorder_id = recorder_id

        self._targets: Dict[int, "SIRSUnit"] = {}
        self._times: Dict[int, List[float]] = defaultdict(list)
        self._values: Dict[int, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))

    @property
    def targets(self) -> List[int]:
        return sorted(self._targets)

    def connect(self, unit: "SIRSUnit") -> None:
        """Start sampling ``unit``.

        Raises:
            IncompatibleConnectionError: If the unit does not accept data
                logging requests or lacks one of the requested recordables
        """
        unit.handles_test_event(SignalKind.DATA_LOGGING)
        missing = [name for name in self.record_from if name not in unit.RECORDABLES]
        if missing:
            raise IncompatibleConnectionError(
                unit.name, f"unknown recordables {missing} (available: {unit.RECORDABLES})"
            )
        if unit.unit_id in self._targets:
            raise IncompatibleConnectionError(unit.name, "multimeter is already connected")
        self._targets[unit.unit_id] = unit
        unit.attach_data_logger(self.record_step)

    def disconnect(self, unit: "SIRSUnit") -> None:
        if self._targets.pop(unit.unit_id, None) is not None:
            unit.detach_data_logger(self.record_step)

    def record_step(self, unit: "SIRSUnit", step: int) -> None:
        """Data logger callback; samples when the step ends on the interval grid."""
        if (step + 1) % self.interval_steps != 0:
            return
        sample = unit.handle(
            DataLoggingRequest(sender_id=self.recorder_id, record_from=self.record_from, step=step)
        )
        self._times[unit.unit_id].append((step + 1) * unit.resolution_ms)
        values = self._values[unit.unit_id]
        for name in self.record_from:
            values[name].append(sample[name])

    @property
    def n_samples(self) -> int:
        return sum(len(times) for times in self._times.values())

    def get_trace(self, unit_id: int) -> Dict[str, np.ndarray]:
        """Samples of a single unit: ``times`` plus one array per recordable."""
        trace = {"times": np.asarray(self._times.get(unit_id, []), dtype=np.float64)}
        values = self._values.get(unit_id, {})
        for name in self.record_from:
            trace[name] = np.asarray(values.get(name, []), dtype=np.float64)
        return trace

    def get_data(self, unit_id: Optional[int] = None) -> Dict[str, np.ndarray]:
        """All samples as flat arrays (``senders``, ``times``, recordables).

        Samples are grouped by unit in ascending id order and by time within
        each unit.
        """
        unit_ids = [unit_id] if unit_id is not None else sorted(self._times)
        senders: List[np.ndarray] = []
        columns: Dict[str, List[np.ndarray]] = {"times": []}
        for name in self.record_from:
            columns[name] = []

        for uid in unit_ids:
            trace = self.get_trace(uid)
            senders.append(np.full(trace["times"].shape, uid, dtype=np.int64))
            for key, array in trace.items():
                columns[key].append(array)

        data = {"senders": np.concatenate(senders) if senders else np.empty(0, dtype=np.int64)}
        for key, arrays in columns.items():
            data[key] = np.concatenate(arrays) if arrays else np.empty(0, dtype=np.float64)
        return data

    def population_trace(self) -> Dict[str, np.ndarray]:
        """Number of units in S, I and R at each sampled time.

        Requires ``y`` to be recorded and all connected units to share the
        same sample times.
        """
        if "y" not in self.record_from:
            raise ConfigurationError("population_trace requires 'y' in record_from")
        if not self._times:
            return {"times": np.empty(0), "S": np.empty(0), "I": np.empty(0), "R": np.empty(0)}

        unit_ids = sorted(self._times)
        y = np.stack([np.asarray(self._values[uid]["y"]) for uid in unit_ids])
        return {
            "times": np.asarray(self._times[unit_ids[0]], dtype=np.float64),
            "S": np.sum(y == 0, axis=0),
            "I": np.sum(y == 1, axis=0),
            "R": np.sum(y == 2, axis=0),
        }

    def get_diagnostics(self) -> Dict[str, float]:
        diagnostics: Dict[str, float] = {
            "n_targets": float(len(self._targets)),
            "n_samples": float(self.n_samples),
        }
        if "y" in self.record_from:
            diagnostics.update(self.occupancy_diagnostics(self.get_data()["y"]))
        return diagnostics

    def calibrate_time(self, factor: float) -> None:
        """Re-express interval and resolution after a change of time unit."""
        validate_positive(factor, "factor")
        self.interval_ms *= factor
        self.resolution_ms *= factor

    def clear(self) -> None:
        """Drop all recorded samples (connections are kept)."""
        self._times.clear()
        self._values.clear()


__all__ = ["Multimeter"]
