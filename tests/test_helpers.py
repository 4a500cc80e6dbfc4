import pytest

from arm_sim.errors import NumericDegeneracy
from arm_sim.utils.helpers import clamp, loaded_battery_voltage, require_finite, seed_rngs


def test_clamp():
    assert clamp(5.0, -1.0, 1.0) == 1.0
    assert clamp(-5.0, -1.0, 1.0) == -1.0
    assert clamp(0.5, -1.0, 1.0) == 0.5


def test_require_finite():
    require_finite("x", 1.0, -2.0)
    with pytest.raises(NumericDegeneracy):
        require_finite("x", 1.0, float("-inf"))


def test_loaded_battery_voltage_sags_with_current():
    assert loaded_battery_voltage() == 12.0
    assert loaded_battery_voltage(100.0, 50.0) == pytest.approx(9.0)
    assert loaded_battery_voltage(10_000.0) == 0.0


def test_seed_rngs_is_reproducible():
    assert seed_rngs(3).normal() == seed_rngs(3).normal()
