"""Tests for the SIRS unit update engine.

Covers the transition rule, scheduling of re-evaluations, the input window,
emission of transition spikes and the configuration interface.
"""

import pytest
import torch

from sirsnet.components.units import LinearGain, SigmoidGain, SIRSUnit
from sirsnet.config import SIRSUnitConfig
from sirsnet.constants import Compartment
from sirsnet.core.event_system import (
    CurrentEvent,
    DataLoggingRequest,
    SignalKind,
    SignalType,
    SpikeEvent,
)
from sirsnet.errors import (
    ConfigurationError,
    IncompatibleConnectionError,
    SchedulingError,
    UnknownReceptorError,
)
from sirsnet.utils.rng import draw_exponential, draw_uniform, make_generator


def run(unit, n_steps, rng, origin=0):
    """Update ``unit`` over ``n_steps`` steps starting at ``origin``."""
    return unit.update(origin_step=origin, from_lag=0, to_lag=n_steps, rng=rng)


class TestDefaults:
    """Construction and initial state."""

    def test_default_parameters(self):
        """Test default parameters and state of a new unit."""
        unit = SIRSUnit()
        status = unit.get_status()

        assert status["tau_m"] == 10.0
        assert status["beta"] == 0.1
        assert status["mu"] == 0.1
        assert status["y"] == 0
        assert status["h"] == 0.0
        assert status["t_next"] is None
        assert status["recordables"] == ("y", "h")
        assert status["gain"] == "linear"

    def test_gain_by_name(self):
        unit = SIRSUnit(gain="sigmoid")
        assert isinstance(unit.gain, SigmoidGain)

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigurationError):
            SIRSUnit(config=SIRSUnitConfig(tau_m=-1.0))

    def test_signal_types(self):
        unit = SIRSUnit()
        assert unit.sends_signal() == SignalType.BINARY
        assert unit.receives_signal() == SignalType.BINARY


class TestTransitions:
    """Transition rule at re-evaluations."""

    def test_susceptible_without_input_stays_susceptible(self, rng):
        """With g(0) = 0 a susceptible unit never becomes infected on its own."""
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=10.0, beta_sirs=0.8, mu_sirs=0.3))

        spikes = run(unit, 5000, rng)

        assert spikes == []
        assert unit.y == Compartment.SUSCEPTIBLE
        assert unit.get_diagnostics()["reevaluations"] > 0

    def test_nonzero_gain_at_zero_input(self, rng):
        """If g(0) > 0 infection happens without input with probability g(0) * beta."""
        unit = SIRSUnit(
            config=SIRSUnitConfig(beta_sirs=1.0, mu_sirs=0.0),
            gain=LinearGain(offset=1.0),
        )

        spikes = run(unit, 2000, rng)

        assert [s.multiplicity for s in spikes] == [2]
        assert unit.y == Compartment.INFECTED

    def test_input_drives_infection(self, rng):
        """A spike in the window makes p = g(h) * beta = 1."""
        unit = SIRSUnit(7, config=SIRSUnitConfig(beta_sirs=1.0, mu_sirs=0.0))
        unit.handle(SpikeEvent(sender_id=3, weight=1.0, step=0, multiplicity=1))

        spikes = run(unit, 2000, rng)

        assert len(spikes) == 1
        assert spikes[0].multiplicity == 2
        assert spikes[0].sender_id == 7
        assert unit.y == Compartment.INFECTED
        assert unit.S.last_sender_id == 3

    def test_infected_with_mu_one_recovers_at_next_reevaluation(self, rng):
        """I → R with probability 1, then R → S deterministically."""
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=1, beta_sirs=0.0, mu_sirs=1.0))

        spikes = run(unit, 3000, rng)

        assert [s.multiplicity for s in spikes] == [2, 1]
        assert unit.y == Compartment.SUSCEPTIBLE
        diag = unit.get_diagnostics()
        assert diag["i_to_r"] == 1
        assert diag["r_to_s"] == 1
        assert diag["s_to_i"] == 0

    def test_recovered_always_returns_to_susceptible(self, rng):
        """R → S regardless of input."""
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=2, beta_sirs=0.0))
        unit.handle(SpikeEvent(sender_id=1, weight=100.0, step=0))
        unit.handle(CurrentEvent(sender_id=2, amplitude=-50.0, step=1))

        spikes = run(unit, 2000, rng)

        assert [s.multiplicity for s in spikes] == [1]
        assert unit.y == Compartment.SUSCEPTIBLE

    def test_negative_input_clamps_to_zero_probability(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=1.0))
        unit.S.t_next = 49.95
        unit.handle(SpikeEvent(sender_id=1, weight=-5.0, step=0))

        spikes = run(unit, 501, rng)

        assert spikes == []
        assert unit.y == Compartment.SUSCEPTIBLE
        assert unit.get_diagnostics()["reevaluations"] == 1

    def test_infection_probability_is_clamped(self):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.5), gain=LinearGain(slope=10.0))
        assert unit.infection_probability(1.0) == 0.5
        assert unit.infection_probability(-1.0) == 0.0

    def test_first_reevaluation_is_stay_or_infect(self):
        """From S the only outcomes are no emission or multiplicity 2."""
        for seed in range(20):
            unit = SIRSUnit(
                config=SIRSUnitConfig(tau_m=10.0, beta_sirs=0.8, mu_sirs=0.3),
                gain=LinearGain(offset=0.5),
            )
            rng = make_generator(seed=seed)

            spikes, step = [], 0
            while unit.get_diagnostics()["reevaluations"] == 0:
                spikes += run(unit, 1, rng, origin=step)
                step += 1

            assert unit.get_diagnostics()["reevaluations"] == 1
            assert [s.multiplicity for s in spikes] in ([], [2])
            assert unit.y == (Compartment.INFECTED if spikes else Compartment.SUSCEPTIBLE)


class TestScheduling:
    """Self-paced re-evaluation times."""

    def test_first_t_next_drawn_before_run(self, rng):
        unit = SIRSUnit()
        unit.pre_run_hook(rng)
        assert unit.t_next is not None and unit.t_next > 0.0

    def test_pending_t_next_not_redrawn(self, rng):
        unit = SIRSUnit()
        unit.S.t_next = 12.5
        unit.pre_run_hook(rng)
        assert unit.t_next == 12.5

    def test_t_next_strictly_increases(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=2.0))
        unit.pre_run_hook(rng)

        seen = [unit.t_next]
        for k in range(0, 2000, 10):
            run(unit, 10, rng, origin=k)
            if unit.t_next != seen[-1]:
                seen.append(unit.t_next)

        assert len(seen) > 10
        assert all(b > a for a, b in zip(seen, seen[1:]))

    def test_reevaluation_rate_matches_tau_m(self, rng):
        """Re-evaluations form a Poisson process with mean interval tau_m."""
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=10.0, resolution_ms=1.0))

        run(unit, 10000, rng)

        n = unit.get_diagnostics()["reevaluations"]
        assert 880 < n < 1120, f"Expected ~1000 re-evaluations, got {n}"

    def test_coarse_grid_keeps_rate(self):
        """A step that is half of tau_m does not stretch the intervals."""
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=2.0, resolution_ms=1.0))

        run(unit, 20000, make_generator(seed=3))

        n = unit.get_diagnostics()["reevaluations"]
        assert 9600 < n < 10400, f"Expected ~10000 re-evaluations, got {n}"

    def test_next_interval_starts_at_scheduled_time(self):
        """t_next advances from the previous t_next, not from the grid step."""
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.0, tau_m=10.0))
        unit.S.t_next = 1.05
        rng, replay = make_generator(seed=17), make_generator(seed=17)

        run(unit, 12, rng)

        draw_uniform(replay)  # transition draw from S
        assert unit.get_diagnostics()["reevaluations"] == 1
        assert unit.t_next == pytest.approx(1.05 + draw_exponential(replay, 10.0))

    def test_no_reevaluation_before_t_next(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=1.0))
        unit.S.t_next = 100.0
        unit.handle(SpikeEvent(sender_id=1, weight=1.0, step=0))

        run(unit, 500, rng)

        assert unit.get_diagnostics()["reevaluations"] == 0
        assert unit.y == Compartment.SUSCEPTIBLE
        assert unit.h == pytest.approx(1.0)


class TestInputWindow:
    """Accumulation of buffered input into h."""

    def test_spikes_and_currents_are_summed(self, rng):
        unit = SIRSUnit()
        unit.S.t_next = 100.0
        unit.handle(SpikeEvent(sender_id=1, weight=0.3, step=0))
        unit.handle(CurrentEvent(sender_id=2, amplitude=0.2, step=1))
        unit.handle(SpikeEvent(sender_id=1, weight=0.25, step=1, multiplicity=2))

        run(unit, 3, rng)

        assert unit.h == pytest.approx(1.0)

    def test_window_includes_reevaluation_step(self, rng):
        """Input arriving on the re-evaluation step is part of that window."""
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=1.0, mu_sirs=0.0))
        unit.S.t_next = 99.95

        run(unit, 900, rng)
        unit.handle(SpikeEvent(sender_id=4, weight=1.0, step=1000))
        spikes = run(unit, 101, rng, origin=900)

        assert [s.step for s in spikes] == [1000]
        assert unit.y == Compartment.INFECTED

    def test_init_buffers_keeps_open_window(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.0))
        unit.S.t_next = 1.0
        unit.handle(CurrentEvent(sender_id=1, amplitude=0.5, step=3))
        run(unit, 5, rng)

        unit.init_buffers(5)
        run(unit, 6, rng, origin=5)

        assert unit.get_diagnostics()["reevaluations"] == 1
        assert unit.S.t_last_input == pytest.approx(0.3)

    def test_reset_state_closes_open_window(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.0))
        unit.S.t_next = 1.0
        unit.handle(CurrentEvent(sender_id=1, amplitude=0.5, step=3))
        run(unit, 5, rng)

        unit.reset_state()
        unit.S.t_next = 1.0
        run(unit, 11, rng)

        assert unit.h == 0.0
        assert unit.S.t_last_input is None

    def test_h_resets_after_reevaluation(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.0))
        unit.S.t_next = 1.05
        unit.handle(SpikeEvent(sender_id=1, weight=2.0, step=1))

        run(unit, 12, rng)

        assert unit.get_diagnostics()["reevaluations"] == 1
        assert unit.h == 0.0
        assert unit.S.t_last_input == pytest.approx(0.1)

    def test_empty_window_keeps_t_last_input(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(beta_sirs=0.0, tau_m=1.0))
        unit.S.t_next = 0.55
        unit.handle(CurrentEvent(sender_id=1, amplitude=1.0, step=2))

        run(unit, 7, rng)
        assert unit.S.t_last_input == pytest.approx(0.2)

        run(unit, 200, rng, origin=7)
        assert unit.get_diagnostics()["reevaluations"] > 1
        assert unit.S.t_last_input == pytest.approx(0.2)

    def test_spike_beyond_horizon_raises(self):
        unit = SIRSUnit(config=SIRSUnitConfig(buffer_steps=16))
        with pytest.raises(SchedulingError):
            unit.handle(SpikeEvent(sender_id=1, weight=1.0, step=16))

    def test_spike_for_drained_step_raises(self, rng):
        unit = SIRSUnit()
        run(unit, 5, rng)
        with pytest.raises(SchedulingError):
            unit.handle(CurrentEvent(sender_id=1, amplitude=1.0, step=3))

    def test_unknown_event_type_raises(self):
        with pytest.raises(TypeError):
            SIRSUnit().handle(object())


class TestEmission:
    """Outgoing transition spikes."""

    def test_emit_called_before_state_commit(self, rng):
        seen = []
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=2))
        unit.set_emitter(lambda spike: seen.append((spike.multiplicity, unit.y)))

        run(unit, 2000, rng)

        assert seen == [(1, int(Compartment.RECOVERED))]
        assert unit.y == Compartment.SUSCEPTIBLE

    def test_emitted_spike_carries_time(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=2))
        spikes = run(unit, 2000, rng)

        assert len(spikes) == 1
        assert spikes[0].time_ms == pytest.approx(spikes[0].step * unit.resolution_ms)
        assert spikes[0].time_ms >= 0.0


class TestConnectivityChecks:
    """Link-time compatibility checks."""

    @pytest.mark.parametrize("kind", list(SignalKind))
    def test_accepts_all_known_kinds(self, kind):
        unit = SIRSUnit()
        assert unit.handles_test_event(kind) == 0
        assert unit.accepts(kind)

    def test_unknown_receptor_rejected(self):
        unit = SIRSUnit()
        with pytest.raises(UnknownReceptorError):
            unit.handles_test_event(SignalKind.SPIKE, receptor_type=1)
        assert not unit.accepts(SignalKind.CURRENT, receptor_type=2)

    def test_send_test_event_asks_target(self):
        source, target = SIRSUnit(0), SIRSUnit(1)
        assert source.send_test_event(target) == 0
        with pytest.raises(IncompatibleConnectionError):
            source.send_test_event(target, receptor_type=3)


class TestStatusDictionary:
    """get_status / set_status."""

    def test_set_parameters(self):
        unit = SIRSUnit()
        unit.set_status({"tau_m": 5.0, "beta": 0.7, "mu": 0.2})

        assert unit.P.tau_m == 5.0
        assert unit.P.beta == 0.7
        assert unit.P.mu == 0.2

    def test_long_names_accepted(self):
        unit = SIRSUnit()
        unit.set_status({"beta_sirs": 0.4, "mu_sirs": 0.6})
        assert (unit.P.beta, unit.P.mu) == (0.4, 0.6)

    def test_conflicting_aliases_rejected(self):
        unit = SIRSUnit()
        with pytest.raises(ConfigurationError):
            unit.set_status({"beta": 0.4, "beta_sirs": 0.5})

    def test_set_state(self):
        unit = SIRSUnit()
        unit.set_status({"y": 1.0, "h": 0.5})
        assert unit.y == 1
        assert isinstance(unit.y, int)
        assert unit.h == 0.5

    @pytest.mark.parametrize(
        "status",
        [
            {"tau_m": 0.0},
            {"tau_m": float("nan")},
            {"beta": 1.5},
            {"mu": -0.1},
            {"y": 3},
            {"y": 0.5},
            {"h": float("inf")},
            {"unknown_key": 1.0},
        ],
    )
    def test_invalid_values_rejected(self, status):
        with pytest.raises(ConfigurationError):
            SIRSUnit().set_status(status)

    def test_failed_update_leaves_unit_unchanged(self):
        """Validation happens before any assignment."""
        unit = SIRSUnit()
        before = unit.get_status()

        with pytest.raises(ConfigurationError):
            unit.set_status({"tau_m": 3.0, "beta": 0.9, "y": 7})

        assert unit.get_status() == before

    def test_status_round_trip(self):
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=4.0, beta_sirs=0.3, y_initial=2))
        other = SIRSUnit()
        other.set_status(unit.get_status())

        assert other.P == unit.P
        assert other.y == unit.y


class TestTimeRescaling:
    """calibrate_time."""

    def test_rescales_times(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(tau_m=10.0))
        unit.pre_run_hook(rng)
        unit.S.t_last_input = 3.0
        t_next = unit.t_next

        unit.calibrate_time(2.0)

        assert unit.P.tau_m == 20.0
        assert unit.t_next == 2.0 * t_next
        assert unit.S.t_last_input == 6.0
        assert unit.resolution_ms == 0.2

    def test_invalid_factor(self):
        with pytest.raises(ConfigurationError):
            SIRSUnit().calibrate_time(0.0)

    def test_same_state_sequence_after_rescaling(self):
        """Rescaling time units reproduces the same transitions step for step."""
        config = SIRSUnitConfig(tau_m=5.0, beta_sirs=0.6, mu_sirs=0.4)
        reference = SIRSUnit(0, config=config, gain=LinearGain(offset=1.0))
        rescaled = SIRSUnit(0, config=config, gain=LinearGain(offset=1.0))
        rng_a, rng_b = make_generator(seed=99), make_generator(seed=99)

        spikes_a = run(reference, 2000, rng_a)
        spikes_b = run(rescaled, 2000, rng_b)
        rescaled.calibrate_time(2.0)
        spikes_a += run(reference, 2000, rng_a, origin=2000)
        spikes_b += run(rescaled, 2000, rng_b, origin=2000)

        assert len(spikes_a) > 10
        assert [(s.step, s.multiplicity) for s in spikes_a] == [(s.step, s.multiplicity) for s in spikes_b]


class TestRecordables:
    """Data logging taps."""

    def test_data_logging_request(self):
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=1, h_initial=0.25))
        sample = unit.handle(DataLoggingRequest(sender_id=-2, record_from=("y", "h")))
        assert sample == {"y": 1.0, "h": 0.25}

    def test_unknown_recordable(self):
        with pytest.raises(KeyError):
            SIRSUnit().get_recordable("V_m")

    def test_attached_logger_called_every_step(self, rng):
        unit = SIRSUnit()
        steps = []
        unit.attach_data_logger(lambda u, step: steps.append(step))

        run(unit, 25, rng, origin=10)

        assert steps == list(range(10, 35))


class TestLifecycle:
    """reset_state, clone, diagnostics."""

    def test_reset_restores_initial_state(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=2))
        run(unit, 2000, rng)
        assert unit.y == Compartment.SUSCEPTIBLE

        unit.reset_state()

        assert unit.y == Compartment.RECOVERED
        assert unit.h == 0.0
        assert unit.t_next is None
        assert unit.spikes.pending_total() == 0.0
        assert unit.get_diagnostics()["reevaluations"] == 0

    def test_reset_keeps_state_set_through_status(self):
        unit = SIRSUnit()
        unit.set_status({"y": 1})
        unit.reset_state()
        assert unit.y == Compartment.INFECTED

    def test_clone_copies_parameters_not_state(self, rng):
        unit = SIRSUnit(3, config=SIRSUnitConfig(tau_m=7.0, beta_sirs=0.9), gain=SigmoidGain(2.0, 1.0))
        unit.pre_run_hook(rng)

        twin = unit.clone(4)

        assert twin.unit_id == 4
        assert twin.P == unit.P
        assert twin.gain.get_status() == unit.gain.get_status()
        assert twin.gain is not unit.gain
        assert twin.t_next is None

    def test_diagnostics_rates(self, rng):
        unit = SIRSUnit(config=SIRSUnitConfig(y_initial=1, mu_sirs=1.0, beta_sirs=0.0))
        run(unit, 10000, rng)
        diag = unit.get_diagnostics()

        assert diag["elapsed_ms"] == pytest.approx(1000.0)
        assert diag["i_to_r_rate_hz"] == pytest.approx(1.0)
        assert diag["emitted_up"] == 1
        assert diag["emitted_down"] == 1

    def test_buffers_live_on_configured_dtype(self):
        unit = SIRSUnit(config=SIRSUnitConfig(dtype="float32"))
        assert unit.spikes.values.dtype == torch.float32
