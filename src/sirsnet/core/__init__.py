"""
Core simulation infrastructure: signal kinds, event scheduling and the
network driver.

The network driver depends on the unit models, so it is imported from
``sirsnet.core.network`` (or the top-level package) rather than here.
"""

from sirsnet.core.event_system import (
    Connection,
    CurrentEvent,
    DataLoggingRequest,
    EventScheduler,
    InboundEvent,
    OutgoingSpike,
    ScheduledDelivery,
    SignalKind,
    SignalType,
    SpikeEvent,
    signal_types_compatible,
)

__all__ = [
    "Connection",
    "CurrentEvent",
    "DataLoggingRequest",
    "EventScheduler",
    "InboundEvent",
    "OutgoingSpike",
    "ScheduledDelivery",
    "SignalKind",
    "SignalType",
    "SpikeEvent",
    "signal_types_compatible",
]
