"""Random number utilities for sirsnet.

Units never own a random source. The driver creates one ``torch.Generator``
per simulation thread and passes it into every update call; these helpers
draw scalars from it.
"""

import math
from typing import Optional

import torch


def make_generator(seed: Optional[int] = None, device: str = "cpu") -> torch.Generator:
    """Create a generator, seeded if ``seed`` is given."""
    gen = torch.Generator(device=device)
    if seed is not None:
        gen.manual_seed(seed)
    else:
        gen.seed()
    return gen


def draw_uniform(rng: torch.Generator) -> float:
    """Uniform [0, 1) draw."""
    return float(torch.rand(1, generator=rng, dtype=torch.float64).item())


def exponential_from_uniform(u: float) -> float:
    """Standard exponential variate from a uniform [0, 1) variate by inversion."""
    return -math.log1p(-u)


def draw_exponential(rng: torch.Generator, mean: float = 1.0) -> float:
    """Exponential draw with the given mean; strictly positive for mean > 0."""
    e = exponential_from_uniform(draw_uniform(rng))
    while e <= 0.0:
        e = exponential_from_uniform(draw_uniform(rng))
    return e * mean


def bernoulli(rng: torch.Generator, p: float) -> bool:
    """Single Bernoulli trial; ``p`` is clamped to [0, 1]."""
    p = min(max(p, 0.0), 1.0)
    return draw_uniform(rng) < p
