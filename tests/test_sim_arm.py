import numpy as np
import pytest

from arm_sim.errors import ConfigurationError, NumericDegeneracy
from arm_sim.robots.arm_dynamics import ArmState
from arm_sim.robots.interfaces import MotorActuator, PositionSensor
from arm_sim.robots.sim_arm import SimulatedActuatorSensor
from arm_sim.utils.constants import ARM_ENCODER_DIST_PER_PULSE


def test_implements_both_capabilities(quiet_backend):
    assert isinstance(quiet_backend, MotorActuator)
    assert isinstance(quiet_backend, PositionSensor)


def test_set_voltage_does_not_move_arm_until_advance(quiet_backend):
    quiet_backend.set_voltage(6.0)
    assert quiet_backend.state == ArmState()
    state = quiet_backend.advance(0.02)
    assert state.angular_vel_rad_per_sec > 0.0
    assert quiet_backend.state is state


def test_voltage_saturates_to_supply(quiet_backend):
    quiet_backend.set_voltage(40.0)
    assert quiet_backend.applied_voltage == 12.0
    quiet_backend.set_voltage(-40.0)
    assert quiet_backend.applied_voltage == -12.0


def test_stop_commands_zero(quiet_backend):
    quiet_backend.set_voltage(5.0)
    quiet_backend.stop()
    assert quiet_backend.applied_voltage == 0.0


def test_non_finite_voltage_rejected(quiet_backend):
    quiet_backend.set_voltage(3.0)
    with pytest.raises(NumericDegeneracy):
        quiet_backend.set_voltage(float("nan"))
    assert quiet_backend.applied_voltage == 3.0


def test_noise_is_bounded_and_not_accumulated(no_gravity_params):
    sigma = ARM_ENCODER_DIST_PER_PULSE
    backend = SimulatedActuatorSensor(no_gravity_params, noise_std=sigma, seed=1)
    backend.reset(ArmState(0.5, 0.0))
    samples = np.array([backend.read_angle_rad() for _ in range(10_000)])
    deviation = samples - 0.5
    assert np.all(np.abs(deviation) <= 5.0 * sigma)
    assert np.std(deviation) == pytest.approx(sigma, rel=0.1)
    assert backend.state.angle_rad == 0.5


def test_velocity_reading_is_noise_free(no_gravity_params):
    backend = SimulatedActuatorSensor(no_gravity_params, noise_std=0.01, seed=2)
    backend.reset(ArmState(0.0, 1.25))
    assert {backend.read_angular_vel_rad_per_sec() for _ in range(50)} == {1.25}


def test_zero_noise_reads_true_angle(quiet_backend):
    quiet_backend.reset(ArmState(1.0, 0.0))
    assert quiet_backend.read_angle_rad() == 1.0


def test_same_seed_gives_same_noise(no_gravity_params):
    a = SimulatedActuatorSensor(no_gravity_params, seed=7)
    b = SimulatedActuatorSensor(no_gravity_params, seed=7)
    assert [a.read_angle_rad() for _ in range(5)] == [b.read_angle_rad() for _ in range(5)]


def test_current_draw_uses_latched_voltage(quiet_backend):
    assert quiet_backend.read_current_draw_amps() == 0.0
    quiet_backend.set_voltage(12.0)
    expected = quiet_backend.model.current_draw_amps(quiet_backend.state, 12.0)
    assert quiet_backend.read_current_draw_amps() == pytest.approx(expected)


def test_reset_restores_rest_and_clears_voltage(quiet_backend):
    quiet_backend.set_voltage(12.0)
    for _ in range(10):
        quiet_backend.advance(0.02)
    state = quiet_backend.reset()
    assert state == quiet_backend.model.initial_state()
    assert quiet_backend.applied_voltage == 0.0


def test_close_is_idempotent(quiet_backend):
    quiet_backend.set_voltage(4.0)
    quiet_backend.close()
    quiet_backend.close()
    assert quiet_backend.closed
    assert quiet_backend.applied_voltage == 0.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"noise_std": -1.0},
        {"noise_std": float("nan")},
        {"noise_std": float("inf")},
        {"noise_clip_sigmas": 0.0},
        {"noise_clip_sigmas": float("nan")},
        {"max_voltage": 0.0},
        {"max_voltage": float("nan")},
        {"max_voltage": float("inf")},
    ],
)
def test_invalid_backend_settings(no_gravity_params, kwargs):
    with pytest.raises(ConfigurationError):
        SimulatedActuatorSensor(no_gravity_params, **kwargs)
