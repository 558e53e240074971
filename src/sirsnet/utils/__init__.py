"""Utility modules: input ring buffers and random draws."""

from sirsnet.utils.ring_buffer import InputRingBuffer
from sirsnet.utils.rng import (
    bernoulli,
    draw_exponential,
    draw_uniform,
    exponential_from_uniform,
    make_generator,
)

__all__ = [
    "InputRingBuffer",
    "bernoulli",
    "draw_exponential",
    "draw_uniform",
    "exponential_from_uniform",
    "make_generator",
]
