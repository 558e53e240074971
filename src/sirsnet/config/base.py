"""
Fields shared by every sirsnet component config.

Units keep their input ring buffers as torch tensors; the base config
decides where those tensors live and their floating point precision.
Randomness is not configured here: generators are always passed in by
the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

import torch

_BUFFER_DTYPES = {
    "float64": torch.float64,
    "float32": torch.float32,
}


@dataclass
class BaseConfig:
    """Tensor placement for component buffers.

    Attributes:
        device: Torch device of the buffers ('cpu', 'cuda', 'cuda:0', ...)
        dtype: Precision of the buffer value slots ('float64' or 'float32').
            float64 keeps summed inputs exact for typical weights.
    """

    device: str = "cpu"
    dtype: str = "float64"

    def get_torch_device(self) -> torch.device:
        return torch.device(self.device)

    def get_torch_dtype(self) -> torch.dtype:
        if self.dtype not in _BUFFER_DTYPES:
            raise ValueError(
                f"Unknown dtype '{self.dtype}'. Choose from: {list(_BUFFER_DTYPES)}"
            )
        return _BUFFER_DTYPES[self.dtype]


__all__ = ["BaseConfig"]
