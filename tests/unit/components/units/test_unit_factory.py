"""Tests for SIRS unit factory functions."""

import pytest

from sirsnet.components.units import (
    LinearGain,
    SigmoidGain,
    create_linear_sirs_unit,
    create_sigmoidal_sirs_unit,
    create_sirs_unit,
)
from sirsnet.config import SIRSUnitConfig
from sirsnet.errors import ConfigurationError


class TestUnitFactory:

    def test_create_default(self):
        unit = create_sirs_unit(5)
        assert unit.unit_id == 5
        assert isinstance(unit.gain, LinearGain)

    def test_create_with_overrides(self):
        unit = create_sirs_unit(0, gain="sigmoid", gain_params={"theta": 1.0}, tau_m=3.0, y_initial=1)
        assert isinstance(unit.gain, SigmoidGain)
        assert unit.gain.theta == 1.0
        assert unit.P.tau_m == 3.0
        assert unit.y == 1

    def test_overrides_applied_to_given_config(self):
        base = SIRSUnitConfig(tau_m=4.0, beta_sirs=0.5)
        unit = create_sirs_unit(0, config=base, beta_sirs=0.9)
        assert (unit.P.tau_m, unit.P.beta) == (4.0, 0.9)
        assert base.beta_sirs == 0.5

    def test_invalid_override_rejected(self):
        with pytest.raises(ConfigurationError):
            create_sirs_unit(0, mu_sirs=1.5)

    def test_linear(self):
        unit = create_linear_sirs_unit(1, slope=0.5, offset=0.25, beta_sirs=0.9)
        assert unit.gain.get_status() == {"slope": 0.5, "offset": 0.25}
        assert unit.P.beta == 0.9

    def test_sigmoidal(self):
        unit = create_sigmoidal_sirs_unit(2, gain=4.0, theta=2.0)
        assert unit.gain.get_status() == {"gain": 4.0, "theta": 2.0}
        assert unit.get_status()["gain"] == "sigmoid"
