"""
Plotting helpers for SIRS simulations.

Provides:
- Transition rasters from ``Network.get_spikes()``
- Compartment counts from ``Multimeter.population_trace()``
- Per-unit recordable traces from ``Multimeter.get_trace()``
"""

from .raster import plot_transition_raster
from .traces import plot_population_trace, plot_recordable_traces

__all__ = [
    'plot_transition_raster',
    'plot_population_trace',
    'plot_recordable_traces',
]
