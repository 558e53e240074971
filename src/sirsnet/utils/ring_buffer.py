"""
Input Ring Buffer - per-step accumulation of incoming signals.

This module provides the circular buffer a unit uses to collect incoming
spike weights and current amplitudes by delivery step. Deliveries for
future steps are summed into their slot; the update engine drains each slot
exactly once, when the simulation reaches that step.

Slots are addressed by absolute step number modulo the buffer size, so a
sender never needs to know the receiver's current position.
"""

from __future__ import annotations

from typing import Tuple

import torch


class InputRingBuffer:
    """Circular per-step accumulator for one kind of inbound signal.

    Values delivered for the same step are summed. ``drain(step)`` returns the
    sum and the number of contributing events, then clears the slot for reuse.

    The valid write horizon is ``[next_drain_step, next_drain_step + size)``:
    older steps have already been drained, later ones would alias an
    occupied slot.

    Memory: O(size) per buffer
    Write/Drain: O(1) per operation

    Args:
        size: Number of per-step slots (must exceed the longest delivery delay)
        device: Torch device ('cpu', 'cuda', etc.)
        dtype: Floating point dtype of the value slots (default: torch.float64)
    """

    def __init__(
        self,
        size: int,
        device: str = "cpu",
        dtype: torch.dtype = torch.float64,
    ):
        if size <= 0:
            raise ValueError(f"size must be > 0, got {size}")

        self.size = size
        self.dtype = dtype
        self.values = torch.zeros(size, dtype=dtype, device=device)
        self.counts = torch.zeros(size, dtype=torch.int64, device=device)

        # First step that has not been drained yet
        self.next_drain_step = 0

    @property
    def device(self) -> torch.device:
        """Device where the buffer tensors reside."""
        return self.values.device

    def in_horizon(self, step: int) -> bool:
        """Whether ``step`` can currently be written."""
        return self.next_drain_step <= step < self.next_drain_step + self.size

    def add_value(self, step: int, value: float) -> None:
        """Add ``value`` to the slot of ``step``.

        Raises:
            ValueError: If ``step`` lies outside the write horizon
        """
        if not self.in_horizon(step):
            raise ValueError(
                f"Step {step} outside buffer horizon "
                f"[{self.next_drain_step}, {self.next_drain_step + self.size})"
            )
        idx = step % self.size
        self.values[idx] += value
        self.counts[idx] += 1

    def drain(self, step: int) -> Tuple[float, int]:
        """Read and clear the slot of ``step``.

        Steps must be drained in increasing order; skipped steps are lost,
        so callers drain every step they simulate.

        Returns:
            (summed value, number of events) for that step

        Raises:
            ValueError: If ``step`` was already drained
        """
        if step < self.next_drain_step:
            raise ValueError(
                f"Step {step} already drained (next step is {self.next_drain_step})"
            )
        idx = step % self.size
        value = float(self.values[idx].item())
        count = int(self.counts[idx].item())
        self.values[idx] = 0.0
        self.counts[idx] = 0
        self.next_drain_step = step + 1
        return value, count

    def get_value(self, step: int) -> float:
        """Drain ``step`` and return only the summed value."""
        return self.drain(step)[0]

    def peek(self, step: int) -> float:
        """Return the pending value for ``step`` without clearing it."""
        if not self.in_horizon(step):
            return 0.0
        return float(self.values[step % self.size].item())

    def pending_total(self) -> float:
        """Sum of all values not yet drained."""
        return float(self.values.sum().item())

    def clear(self, next_drain_step: int = 0) -> None:
        """Empty all slots and restart the horizon at ``next_drain_step``."""
        self.values.zero_()
        self.counts.zero_()
        self.next_drain_step = next_drain_step

    def resize(self, new_size: int) -> None:
        """Change the number of slots, preserving pending values.

        Pending values stay attached to their absolute step. Shrinking below
        the span of pending deliveries would drop data and is refused.

        Raises:
            ValueError: If new_size <= 0 or too small for pending values
        """
        if new_size <= 0:
            raise ValueError(f"new_size must be > 0, got {new_size}")
        if new_size == self.size:
            return

        pending = [
            (step, self.values[step % self.size].item(), self.counts[step % self.size].item())
            for step in range(self.next_drain_step, self.next_drain_step + self.size)
            if self.counts[step % self.size].item() > 0
        ]
        if pending and pending[-1][0] >= self.next_drain_step + new_size:
            raise ValueError(
                f"Cannot shrink buffer to {new_size} slots: a delivery is pending "
                f"for step {pending[-1][0]}"
            )

        self.values = torch.zeros(new_size, dtype=self.dtype, device=self.device)
        self.counts = torch.zeros(new_size, dtype=torch.int64, device=self.device)
        self.size = new_size
        for step, value, count in pending:
            self.values[step % new_size] = value
            self.counts[step % new_size] = count


__all__ = ["InputRingBuffer"]
