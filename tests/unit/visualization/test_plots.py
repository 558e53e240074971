"""
Smoke tests for the plotting helpers.

Plots are drawn on the non-interactive Agg backend and saved to a
temporary directory.
"""

import numpy as np
import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from sirsnet.core.network import Network  # noqa: E402
from sirsnet.utils.rng import make_generator  # noqa: E402
from sirsnet.visualization import (  # noqa: E402
    plot_population_trace,
    plot_recordable_traces,
    plot_transition_raster,
)


@pytest.fixture
def simulated_network():
    net = Network(resolution_ms=0.1, min_delay_steps=10)
    ids = net.create(5, tau_m=2.0, beta_sirs=1.0, mu_sirs=0.5)
    net.get_unit(ids[0]).set_status({"y": 1})
    for source in ids:
        for target in ids:
            if source != target:
                net.connect(source, target, weight=1.0, delay_ms=1.0)
    meter = net.add_multimeter(interval_ms=1.0)
    net.simulate(50.0, make_generator(seed=3))
    return net, meter


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_transition_raster_saves(simulated_network, tmp_path):
    net, _ = simulated_network
    ax = plot_transition_raster(net.get_spikes())
    path = tmp_path / "raster.png"
    ax.figure.savefig(path)
    assert path.exists()
    assert ax.get_xlabel() == "Time (ms)"
    legend = [text.get_text() for text in ax.get_legend().get_texts()]
    assert legend == ["up (S -> I, I -> R)", "down (R -> S)"]


def test_transition_raster_subset_and_empty():
    empty = {
        "senders": np.empty(0, dtype=np.int64),
        "times": np.empty(0),
        "multiplicities": np.empty(0, dtype=np.int64),
    }
    ax = plot_transition_raster(empty, unit_ids=[0])
    assert ax.get_title() == "Transition Raster"


def test_population_trace_counts_and_fraction(simulated_network):
    _, meter = simulated_network
    counts = meter.population_trace()

    ax = plot_population_trace(counts)
    assert [line.get_label() for line in ax.get_lines()] == ["S", "I", "R"]

    fig, ax = plt.subplots()
    plot_population_trace(counts, fraction=True, ax=ax)
    total = sum(line.get_ydata() for line in ax.get_lines())
    assert np.allclose(total, 1.0)


def test_recordable_traces(simulated_network):
    _, meter = simulated_network
    traces = {uid: meter.get_trace(uid) for uid in meter.targets}

    ax = plot_recordable_traces(traces, recordable="y")
    assert len(ax.get_lines()) == len(traces)
    assert ax.get_title() == "y"


def test_recordable_traces_unknown_name(simulated_network):
    _, meter = simulated_network
    traces = {uid: meter.get_trace(uid) for uid in meter.targets}
    with pytest.raises(KeyError):
        plot_recordable_traces(traces, recordable="v_m")
