"""
Transition coding between SIRS units.
"""

from sirsnet.components.coding.transition_coding import (
    TransitionDecoder,
    apply_multiplicity,
    encode_transition,
)

__all__ = [
    "TransitionDecoder",
    "apply_multiplicity",
    "encode_transition",
]
