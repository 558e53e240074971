"""
Recording and diagnostics for SIRS networks.
"""

from sirsnet.diagnostics.recorder import Multimeter

__all__ = [
    "Multimeter",
]
