import logging
import math

import pytest

from arm_sim.configs import ArmSimConfig
from arm_sim.control.arm_controller import ArmController
from arm_sim.control.feedback import FeedbackController
from arm_sim.control.preferences import InMemoryPreferences
from arm_sim.errors import ConfigurationError, NumericDegeneracy, OutOfRangeCommand
from arm_sim.robots.sim_arm import SimulatedActuatorSensor
from arm_sim.utils.constants import ARM_P_KEY, ARM_POSITION_KEY, TELEMETRY_NAME


def _cycle(controller: ArmController, cycles: int) -> None:
    for _ in range(cycles):
        controller.control_step()
        controller.simulation_step()


# ----------------------------------------------------------------------
# Closed-loop behaviour
# ----------------------------------------------------------------------


def test_proportional_only_loop_converges(quiet_config):
    quiet_config.kp = 10.0
    quiet_config.kd = 0.0
    quiet_config.setpoint_degrees = 45.0
    controller = ArmController.simulated(quiet_config)
    target = math.radians(45.0)
    converged_at = None
    for cycle in range(500):
        controller.control_step()
        controller.simulation_step()
        if converged_at is None and abs(controller.sensor.read_angle_rad() - target) < 1e-3:
            converged_at = cycle
    assert converged_at is not None
    assert abs(controller.sensor.read_angle_rad() - target) < 1e-3
    assert abs(controller.commanded_voltage) < 1e-2


def test_reference_scenario_reaches_45_degrees(quiet_config):
    quiet_config.setpoint_degrees = 45.0
    quiet_config.kp = 40.0
    quiet_config.kd = 4.0
    # Noise-free: encoder noise through kd / period keeps |V| above 0.5.
    controller = ArmController.simulated(quiet_config)
    assert controller.sensor.state.angle_rad == 0.0
    _cycle(controller, 300)
    assert controller.sensor.state.angle_rad == pytest.approx(math.radians(45.0), abs=0.01)
    assert abs(controller.commanded_voltage) < 0.5


def test_scenario_with_encoder_noise_stays_near_setpoint():
    # kd=0 since the derivative term amplifies one-tick encoder noise.
    cfg = ArmSimConfig(setpoint_degrees=45.0, kp=40.0, kd=0.0, simulate_gravity=False, seed=3)
    controller = ArmController.simulated(cfg)
    _cycle(controller, 300)
    assert controller.sensor.state.angle_rad == pytest.approx(math.radians(45.0), abs=0.01)


def test_control_step_writes_and_records_command(actuator, sensor):
    cfg = ArmSimConfig(setpoint_degrees=90.0, kp=2.0, kd=0.0)
    controller = ArmController(actuator, sensor, config=cfg)
    output = controller.control_step()
    assert output == pytest.approx(2.0 * math.pi / 2)
    assert actuator.voltages == [output]
    assert controller.commanded_voltage == output
    assert controller.last_measurement_rad == 0.0


def test_gain_change_applies_on_next_control_step(actuator, sensor):
    cfg = ArmSimConfig(setpoint_degrees=90.0, kp=1.0, kd=0.0)
    controller = ArmController(actuator, sensor, config=cfg)
    first = controller.control_step()
    controller.set_proportional_gain(3.0)
    second = controller.control_step()
    assert second == pytest.approx(3.0 * first)
    assert controller.kp == 3.0
    assert controller.feedback.gains.kd == 0.0


def test_set_derivative_gain_keeps_kp(actuator, sensor):
    controller = ArmController(actuator, sensor, config=ArmSimConfig(kp=5.0))
    controller.set_derivative_gain(0.5)
    assert controller.feedback.gains.kp == 5.0
    assert controller.feedback.gains.kd == 0.5


# ----------------------------------------------------------------------
# Stop
# ----------------------------------------------------------------------


def test_stop_is_idempotent(actuator, sensor):
    controller = ArmController(actuator, sensor, config=ArmSimConfig(setpoint_degrees=90.0))
    controller.control_step()
    for _ in range(3):
        controller.stop()
        assert controller.commanded_voltage == 0.0
    assert actuator.voltages[1:] == [0.0, 0.0, 0.0]


def test_stop_does_not_reset_arm_state(quiet_config):
    controller = ArmController.simulated(quiet_config)
    _cycle(controller, 20)
    state = controller.sensor.state
    controller.stop()
    assert controller.sensor.state == state
    assert controller.sensor.applied_voltage == 0.0


# ----------------------------------------------------------------------
# Setpoints and preferences
# ----------------------------------------------------------------------


@pytest.mark.parametrize("degrees", [-80.0, 256.0])
def test_out_of_range_setpoint_rejected(actuator, sensor, degrees):
    controller = ArmController(actuator, sensor)
    with pytest.raises(OutOfRangeCommand):
        controller.set_setpoint_degrees(degrees)
    assert controller.setpoint_degrees == 75.0


def test_non_finite_setpoint_rejected(actuator, sensor):
    controller = ArmController(actuator, sensor)
    with pytest.raises(NumericDegeneracy):
        controller.set_setpoint_degrees(float("nan"))


def test_setpoint_on_travel_limit_accepted(actuator, sensor):
    controller = ArmController(actuator, sensor)
    controller.set_setpoint_degrees(-75.0)
    assert controller.setpoint_degrees == -75.0


def test_empty_travel_limits_rejected(actuator, sensor):
    with pytest.raises(ConfigurationError):
        ArmController(actuator, sensor, travel_limits_rad=(1.0, 1.0))


def test_construction_seeds_missing_preferences(actuator, sensor):
    prefs = InMemoryPreferences()
    ArmController(actuator, sensor, preferences=prefs, config=ArmSimConfig(kp=7.0))
    assert prefs.values == {ARM_POSITION_KEY: 75.0, ARM_P_KEY: 7.0}


def test_construction_keeps_existing_preferences(actuator, sensor):
    prefs = InMemoryPreferences({ARM_POSITION_KEY: 30.0, ARM_P_KEY: 5.0})
    controller = ArmController(actuator, sensor, preferences=prefs)
    assert prefs.values == {ARM_POSITION_KEY: 30.0, ARM_P_KEY: 5.0}
    assert controller.setpoint_degrees == 75.0
    controller.load_preferences()
    assert controller.setpoint_degrees == 30.0
    assert controller.kp == 5.0
    assert controller.feedback.gains.kp == 5.0


def test_load_preferences_rejects_out_of_range_setpoint(actuator, sensor):
    prefs = InMemoryPreferences()
    controller = ArmController(actuator, sensor, preferences=prefs)
    prefs.set_double(ARM_POSITION_KEY, 300.0)
    prefs.set_double(ARM_P_KEY, 12.0)
    with pytest.raises(OutOfRangeCommand):
        controller.load_preferences()
    assert controller.setpoint_degrees == 75.0
    assert controller.kp == 12.0


# ----------------------------------------------------------------------
# Telemetry
# ----------------------------------------------------------------------


def test_simulated_controller_publishes_once_per_cycle(quiet_config, sink):
    controller = ArmController.simulated(quiet_config, telemetry=sink)
    _cycle(controller, 5)
    assert len(sink.published) == 5
    name, values = sink.published[-1]
    assert name == TELEMETRY_NAME
    assert values["angle_deg"] == pytest.approx(math.degrees(controller.sensor.state.angle_rad))
    assert values["setpoint_deg"] == quiet_config.setpoint_degrees
    assert values["voltage"] == controller.commanded_voltage
    assert 0.0 <= values["battery_voltage"] <= 12.0


def test_hardware_controller_publishes_from_control_step(actuator, sensor, sink):
    sensor.angle_rad = math.radians(10.0)
    controller = ArmController(actuator, sensor, telemetry=sink)
    controller.control_step()
    assert len(sink.published) == 1
    assert sink.published[0][1]["angle_deg"] == pytest.approx(10.0)


def test_telemetry_failure_does_not_interrupt_control(quiet_config, failing_sink, caplog):
    controller = ArmController.simulated(quiet_config, telemetry=failing_sink)
    with caplog.at_level(logging.WARNING, logger="arm_sim.control.arm_controller"):
        _cycle(controller, 3)
    assert controller.sensor.state.angular_vel_rad_per_sec != 0.0
    assert "Telemetry update failed" in caplog.text


# ----------------------------------------------------------------------
# Backends and teardown
# ----------------------------------------------------------------------


def test_simulation_step_requires_simulated_backend(actuator, sensor):
    controller = ArmController(actuator, sensor)
    assert not controller.is_simulated
    with pytest.raises(RuntimeError):
        controller.simulation_step()


def test_simulated_factory_shares_one_backend(quiet_config):
    controller = ArmController.simulated(quiet_config)
    assert isinstance(controller.actuator, SimulatedActuatorSensor)
    assert controller.actuator is controller.sensor
    assert controller.travel_limits_rad == (
        controller.sensor.model.params.min_angle_rad,
        controller.sensor.model.params.max_angle_rad,
    )


def test_close_releases_everything_once(actuator, sensor, sink):
    controller = ArmController(actuator, sensor, telemetry=sink, config=ArmSimConfig(setpoint_degrees=90.0))
    controller.control_step()
    controller.close()
    assert actuator.voltages[-1] == 0.0
    assert actuator.closed and sensor.closed and sink.closed
    calls = len(actuator.voltages)
    controller.close()
    controller.stop()
    assert len(actuator.voltages) == calls
    assert controller.commanded_voltage == 0.0


def test_closed_controller_refuses_to_step(quiet_config):
    controller = ArmController.simulated(quiet_config)
    controller.close()
    with pytest.raises(RuntimeError):
        controller.control_step()
    with pytest.raises(RuntimeError):
        controller.simulation_step()


def test_context_manager_releases_on_error(actuator, sensor):
    with pytest.raises(KeyError):
        with ArmController(actuator, sensor) as controller:
            controller.control_step()
            raise KeyError("boom")
    assert actuator.closed and sensor.closed
    assert actuator.voltages[-1] == 0.0


def test_repeated_acquire_release_cycles(quiet_config):
    for _ in range(5):
        with ArmController.simulated(quiet_config) as controller:
            _cycle(controller, 2)
        assert controller.sensor.closed


def test_custom_feedback_controller_is_used(actuator, sensor):
    feedback = FeedbackController(kp=3.0, kd=0.0)
    controller = ArmController(actuator, sensor, feedback=feedback)
    assert controller.feedback is feedback
    assert controller.kp == 3.0
