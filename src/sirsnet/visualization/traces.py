"""Compartment count and recordable trace visualization."""

from typing import Dict, Optional

import numpy as np

_COMPARTMENT_COLORS = {"S": "tab:blue", "I": "tab:red", "R": "tab:green"}


def plot_population_trace(
    counts: Dict[str, np.ndarray],
    fraction: bool = False,
    title: str = "Compartment Occupancy",
    ax=None,
):
    """Plot the number of units in S, I and R over time.

    Args:
        counts: Output of ``Multimeter.population_trace()``
        fraction: Plot fractions of the population instead of counts
        title: Plot title
        ax: Matplotlib axes

    Returns:
        Matplotlib axes object
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for visualization")

    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 4))

    times = np.asarray(counts["times"])
    total = sum(np.asarray(counts[name], dtype=np.float64) for name in _COMPARTMENT_COLORS)

    for name, color in _COMPARTMENT_COLORS.items():
        values = np.asarray(counts[name], dtype=np.float64)
        if fraction:
            values = np.divide(values, total, out=np.zeros_like(values), where=total > 0)
        ax.plot(times, values, color=color, label=name)

    ax.set_xlabel("Time (ms)")
    ax.set_ylabel("Fraction of units" if fraction else "Units")
    ax.set_title(title)
    ax.legend()

    return ax


def plot_recordable_traces(
    traces: Dict[int, Dict[str, np.ndarray]],
    recordable: str = "h",
    title: Optional[str] = None,
    ax=None,
):
    """Plot one recordable for several units.

    Args:
        traces: Mapping of unit id to ``Multimeter.get_trace()`` output
        recordable: Name of the recordable to plot ("y" or "h")
        title: Plot title (defaults to the recordable name)
        ax: Matplotlib axes

    Returns:
        Matplotlib axes object
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for visualization")

    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 4))

    for unit_id, trace in sorted(traces.items()):
        if recordable not in trace:
            raise KeyError(f"trace of unit {unit_id} has no recordable '{recordable}'")
        # y is piecewise constant between samples
        drawstyle = "steps-post" if recordable == "y" else "default"
        ax.plot(trace["times"], trace[recordable], drawstyle=drawstyle, label=f"Unit {unit_id}")

    ax.set_xlabel("Time (ms)")
    ax.set_ylabel(recordable)
    ax.set_title(title or recordable)
    ax.legend()

    return ax
