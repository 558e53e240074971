"""
Resettable State Mixin for sirsnet components.

Provides a standard interface for resetting component state between
simulation runs.
"""

from __future__ import annotations


class ResettableMixin:
    """Mixin for components with resettable state.

    Usage:
        class MyComponent(ResettableMixin):
            def reset_state(self) -> None:
                '''Reset internal state for a new run.'''
                self.buffer.clear()
    """

    def reset_state(self) -> None:
        """Reset dynamic state for a new simulation run.

        Restores the configured initial state and clears buffers while
        preserving parameters.

        Note:
            Subclasses must override this method.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement reset_state()"
        )


__all__ = ["ResettableMixin"]
