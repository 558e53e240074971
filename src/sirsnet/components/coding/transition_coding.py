"""
Transition coding for SIRS units.

A SIRS unit does not transmit its state. It sends one spike per state
change, and the multiplicity of that spike tells the receiver which change
happened:

    S → I   multiplicity 2   (up)
    I → R   multiplicity 2   (up)
    R → S   multiplicity 1   (down)

Because the cycle S → I → R → S has exactly one down edge, a receiver that
knows a sender's starting state can follow it from the multiplicities alone.

A multiplicity-2 spike may arrive as two multiplicity-1 events carrying the
same sender and time stamp. Since a single multiplicity-1 event is only
meaningful from R, one arriving while the sender is in S or I is held as
the first half of such a pair and completed by the second.

Duplicate connections between the same two units would deliver every spike
twice and make this decoding undefined; ``Network.connect`` refuses them.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from sirsnet.constants.unit import MULTIPLICITY_DOWN, MULTIPLICITY_UP, Compartment

logger = logging.getLogger(__name__)

Transition = Tuple[Compartment, Compartment]

_UP_EDGES = {
    (Compartment.SUSCEPTIBLE, Compartment.INFECTED),
    (Compartment.INFECTED, Compartment.RECOVERED),
}
_DOWN_EDGES = {
    (Compartment.RECOVERED, Compartment.SUSCEPTIBLE),
}


def encode_transition(old_y: int, new_y: int) -> Optional[int]:
    """Multiplicity encoding a state change, or None when nothing changed.

    Raises:
        ValueError: If ``old_y → new_y`` is not an edge of the S→I→R→S cycle
    """
    old, new = Compartment(old_y), Compartment(new_y)
    if old == new:
        return None
    if (old, new) in _UP_EDGES:
        return MULTIPLICITY_UP
    if (old, new) in _DOWN_EDGES:
        return MULTIPLICITY_DOWN
    raise ValueError(f"{old.name} → {new.name} is not a SIRS transition")


def apply_multiplicity(state: int, multiplicity: int) -> Compartment:
    """State reached from ``state`` by a complete event of ``multiplicity``.

    Raises:
        ValueError: If the multiplicity cannot follow ``state``
    """
    current = Compartment(state)
    if multiplicity == MULTIPLICITY_UP and current != Compartment.RECOVERED:
        return Compartment(current + 1)
    if multiplicity == MULTIPLICITY_DOWN and current == Compartment.RECOVERED:
        return Compartment.SUSCEPTIBLE
    raise ValueError(f"multiplicity {multiplicity} cannot follow state {current.name}")


class TransitionDecoder:
    """Receiver-side reconstruction of sender states from multiplicities.

    Args:
        default_state: State assumed for senders that were never registered
    """

    def __init__(self, default_state: int = Compartment.SUSCEPTIBLE):
        self.default_state = Compartment(default_state)
        self._states: Dict[int, Compartment] = {}
        # sender -> stamp of a held multiplicity-1 half
        self._pending_half: Dict[int, int] = {}
        self.n_inconsistent = 0

    def register(self, sender_id: int, state: int) -> None:
        """Declare the current state of ``sender_id`` (done at connect time)."""
        self._states[sender_id] = Compartment(state)
        self._pending_half.pop(sender_id, None)

    def decoded_state(self, sender_id: int) -> Compartment:
        return self._states.get(sender_id, self.default_state)

    def n_in_state(self, state: int) -> int:
        """Number of known senders currently decoded in ``state``."""
        target = Compartment(state)
        return sum(1 for s in self._states.values() if s == target)

    def observe(self, sender_id: int, multiplicity: int, stamp: int) -> Optional[Transition]:
        """Feed one received event.

        Returns:
            The decoded (old, new) transition once it is complete, None while
            half of a split pair is held or when the event is inconsistent.
        """
        state = self.decoded_state(sender_id)

        if multiplicity == MULTIPLICITY_DOWN and state != Compartment.RECOVERED:
            held = self._pending_half.pop(sender_id, None)
            if held is None or held != stamp:
                self._pending_half[sender_id] = stamp
                return None
            multiplicity = MULTIPLICITY_UP
        else:
            self._pending_half.pop(sender_id, None)

        try:
            new_state = apply_multiplicity(state, multiplicity)
        except ValueError as e:
            self.n_inconsistent += 1
            logger.warning("Inconsistent transition spike from sender %s: %s", sender_id, e)
            return None

        self._states[sender_id] = new_state
        return state, new_state

    def reset(self) -> None:
        """Forget all decoded states and held halves."""
        self._states.clear()
        self._pending_half.clear()
        self.n_inconsistent = 0


__all__ = [
    "Transition",
    "encode_transition",
    "apply_multiplicity",
    "TransitionDecoder",
]
