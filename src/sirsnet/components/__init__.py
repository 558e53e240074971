"""
Reusable building blocks: units and transition coding.
"""

from sirsnet.components.coding import *
from sirsnet.components.units import *
