"""Mixin classes for sirsnet components.

Available Mixins:
- ResettableMixin: Standard interface for resetting component state
- DiagnosticsMixin: Transition and occupancy metric helpers
"""

from sirsnet.mixins.diagnostics_mixin import DiagnosticsMixin
from sirsnet.mixins.resettable_mixin import ResettableMixin

__all__ = [
    'DiagnosticsMixin',
    'ResettableMixin',
]
