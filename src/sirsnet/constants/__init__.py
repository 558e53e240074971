"""
Centralized Constants for sirsnet.

Usage:
======
    from sirsnet.constants.unit import TAU_M_DEFAULT, Compartment
    from sirsnet.constants.time import ms_to_steps

Categories:
===========
- unit: SIRS unit defaults, compartments, transition multiplicities
- time: Time unit conversions (ms/s, ms/steps)
"""

from __future__ import annotations

from .time import *
from .unit import *
