"""Tests for signal kinds and the event scheduler."""

import pytest

from sirsnet.core.event_system import (
    CurrentEvent,
    DataLoggingRequest,
    EventScheduler,
    SignalKind,
    SignalType,
    SpikeEvent,
    signal_types_compatible,
)


class TestEvents:

    def test_kinds(self):
        assert SpikeEvent(0, 1.0, 0).kind == SignalKind.SPIKE
        assert CurrentEvent(0, 1.0, 0).kind == SignalKind.CURRENT
        assert DataLoggingRequest(0).kind == SignalKind.DATA_LOGGING

    def test_stamp_defaults_to_delivery_step(self):
        assert SpikeEvent(0, 1.0, step=12).stamp_step == 12
        assert SpikeEvent(0, 1.0, step=12, stamp=2).stamp_step == 2

    @pytest.mark.parametrize(
        "sent, received, ok",
        [
            (SignalType.BINARY, SignalType.BINARY, True),
            (SignalType.SPIKE, SignalType.BINARY, False),
            (SignalType.BINARY, SignalType.SPIKE, False),
            (SignalType.ALL, SignalType.BINARY, True),
            (SignalType.SPIKE, SignalType.ALL, True),
        ],
    )
    def test_signal_type_compatibility(self, sent, received, ok):
        assert signal_types_compatible(sent, received) is ok


class TestEventScheduler:

    def test_pop_until_returns_due_events_in_order(self):
        scheduler = EventScheduler()
        scheduler.schedule(1, SpikeEvent(0, 1.0, step=5))
        scheduler.schedule(2, SpikeEvent(0, 1.0, step=3))
        scheduler.schedule(3, SpikeEvent(0, 1.0, step=5))
        scheduler.schedule(4, SpikeEvent(0, 1.0, step=9))

        due = scheduler.pop_until(5)

        assert [(d.step, d.target) for d in due] == [(3, 2), (5, 1), (5, 3)]
        assert len(scheduler) == 1
        assert scheduler.peek_step() == 9

    def test_counts_and_clear(self):
        scheduler = EventScheduler()
        assert scheduler.is_empty
        assert scheduler.peek_step() is None

        scheduler.schedule(0, SpikeEvent(0, 1.0, step=1))
        scheduler.schedule(0, SpikeEvent(0, 1.0, step=2))
        scheduler.clear()

        assert scheduler.is_empty
        assert scheduler.event_count == 2
