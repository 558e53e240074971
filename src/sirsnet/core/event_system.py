"""
Signal kinds and event scheduling for step-driven SIRS networks.

Units exchange three kinds of inbound signals, modelled as a small tagged
union dispatched by a single handler on the receiving unit:

    SpikeEvent          discrete signal: weight × multiplicity at a delivery step
    CurrentEvent        continuous signal: amplitude at a delivery step
    DataLoggingRequest  synchronous read of the receiver's recordables

Outgoing traffic is a stream of ``OutgoingSpike`` records, one per state
transition of the sender. The ``EventScheduler`` holds spikes in flight
(emitted but not yet due) ordered by delivery step.

Architecture:
=============

    ┌──────────────┐  OutgoingSpike   ┌────────────────┐  SpikeEvent  ┌──────────────┐
    │   Unit (A)   │ ───────────────► │ EventScheduler │ ───────────► │   Unit (B)   │
    │ update(...)  │                  │ heap by step   │              │ handle(...)  │
    └──────────────┘                  └────────────────┘              └──────────────┘
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union


class SignalKind(Enum):
    """Kinds of inbound signals a unit can be asked to accept."""
    SPIKE = "spike"
    CURRENT = "current"
    DATA_LOGGING = "data_logging"


class SignalType(Enum):
    """Semantics of the spikes a unit sends or expects.

    BINARY senders encode state transitions in spike multiplicities and
    therefore require at most one connection per ordered pair of units.
    """
    SPIKE = "spike"
    BINARY = "binary"
    ALL = "all"


def signal_types_compatible(sent: SignalType, received: SignalType) -> bool:
    """Whether a receiver expecting ``received`` can interpret ``sent``."""
    return SignalType.ALL in (sent, received) or sent == received


@dataclass(frozen=True)
class SpikeEvent:
    """Discrete inbound signal.

    Attributes:
        sender_id: Node id of the sending unit
        weight: Connection weight
        step: Delivery step (absolute)
        multiplicity: Number of spikes bundled in the event
        stamp: Emission step of the sender; defaults to ``step``
    """
    sender_id: int
    weight: float
    step: int
    multiplicity: int = 1
    stamp: Optional[int] = None

    kind: ClassVar[SignalKind] = SignalKind.SPIKE

    @property
    def stamp_step(self) -> int:
        return self.step if self.stamp is None else self.stamp


@dataclass(frozen=True)
class CurrentEvent:
    """Continuous inbound signal (current amplitude for one step)."""
    sender_id: int
    amplitude: float
    step: int

    kind: ClassVar[SignalKind] = SignalKind.CURRENT


@dataclass(frozen=True)
class DataLoggingRequest:
    """Synchronous probe for a unit's recordables."""
    sender_id: int
    record_from: Tuple[str, ...] = ("y", "h")
    step: int = 0

    kind: ClassVar[SignalKind] = SignalKind.DATA_LOGGING


InboundEvent = Union[SpikeEvent, CurrentEvent, DataLoggingRequest]


@dataclass(frozen=True)
class OutgoingSpike:
    """Spike emitted by a unit when its state changes.

    Attributes:
        sender_id: Node id of the emitting unit
        step: Step at which the transition happened
        time_ms: Same moment in ms
        multiplicity: 2 for S→I and I→R, 1 for R→S
    """
    sender_id: int
    step: int
    time_ms: float
    multiplicity: int


@dataclass
class Connection:
    """A link between two units with a delivery delay in steps."""
    source: int
    target: int
    weight: float = 1.0
    delay_steps: int = 1
    receptor_type: int = 0


@dataclass(order=True)
class ScheduledDelivery:
    """A spike in flight, ordered by delivery step then insertion order."""
    step: int
    seq: int
    target: int = field(compare=False)
    event: SpikeEvent = field(compare=False)


class EventScheduler:
    """Priority queue of spikes in flight, keyed by delivery step.

    Supports:
    - Ordered delivery by step (ties keep emission order)
    - Batch retrieval of everything due up to a step
    """

    def __init__(self):
        self._queue: List[ScheduledDelivery] = []
        self._seq = itertools.count()
        self._event_count: int = 0

    @property
    def is_empty(self) -> bool:
        return len(self._queue) == 0

    @property
    def event_count(self) -> int:
        """Total number of deliveries ever scheduled."""
        return self._event_count

    def __len__(self) -> int:
        return len(self._queue)

    def schedule(self, target: int, event: SpikeEvent) -> None:
        """Add a delivery to the queue."""
        heapq.heappush(
            self._queue,
            ScheduledDelivery(step=event.step, seq=next(self._seq), target=target, event=event),
        )
        self._event_count += 1

    def peek_step(self) -> Optional[int]:
        """Delivery step of the next item without removing it."""
        if self._queue:
            return self._queue[0].step
        return None

    def pop_until(self, last_step: int) -> List[ScheduledDelivery]:
        """Remove and return every delivery due at or before ``last_step``."""
        batch = []
        while self._queue and self._queue[0].step <= last_step:
            batch.append(heapq.heappop(self._queue))
        return batch

    def clear(self) -> None:
        """Clear all pending deliveries."""
        self._queue.clear()


__all__ = [
    "SignalKind",
    "SignalType",
    "signal_types_compatible",
    "SpikeEvent",
    "CurrentEvent",
    "DataLoggingRequest",
    "InboundEvent",
    "OutgoingSpike",
    "Connection",
    "ScheduledDelivery",
    "EventScheduler",
]
