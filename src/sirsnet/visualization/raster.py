"""Raster plot of state transitions."""

from typing import Dict, Optional

import numpy as np

from sirsnet.constants.unit import MULTIPLICITY_DOWN, MULTIPLICITY_UP


def plot_transition_raster(
    spikes: Dict[str, np.ndarray],
    unit_ids: Optional[list[int]] = None,
    title: str = "Transition Raster",
    ax=None,
):
    """Create a raster plot of emitted transitions.

    Up transitions (S -> I and I -> R, multiplicity 2) are drawn in red,
    down transitions (R -> S, multiplicity 1) in black.

    Args:
        spikes: Spike arrays as returned by ``Network.get_spikes()``
        unit_ids: Subset of senders to plot
        title: Plot title
        ax: Matplotlib axes (creates new if None)

    Returns:
        Matplotlib axes object
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for visualization. Install with: pip install matplotlib")

    senders = np.asarray(spikes["senders"])
    times = np.asarray(spikes["times"])
    multiplicities = np.asarray(spikes["multiplicities"])

    if unit_ids is not None:
        keep = np.isin(senders, unit_ids)
        senders, times, multiplicities = senders[keep], times[keep], multiplicities[keep]

    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 6))

    up = multiplicities == MULTIPLICITY_UP
    down = multiplicities == MULTIPLICITY_DOWN
    ax.scatter(times[up], senders[up], s=4, c='red', marker='|', label="up (S -> I, I -> R)")
    ax.scatter(times[down], senders[down], s=4, c='black', marker='|', label="down (R -> S)")
    ax.set_xlabel("Time (ms)")
    ax.set_ylabel("Unit")
    ax.set_title(title)
    if senders.size:
        ax.set_ylim(senders.min() - 0.5, senders.max() + 0.5)
    ax.legend(loc="upper right")

    return ax
