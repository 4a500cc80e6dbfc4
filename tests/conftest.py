"""Shared fixtures: parameter sets, quiet backends and stand-in hardware."""

from __future__ import annotations

from typing import List, Mapping

import pytest

from arm_sim.configs import ArmSimConfig
from arm_sim.robots.arm_dynamics import ArmParameters
from arm_sim.robots.interfaces import MotorActuator, PositionSensor
from arm_sim.robots.sim_arm import SimulatedActuatorSensor
from arm_sim.visualization.telemetry import TelemetrySink


class RecordingActuator(MotorActuator):
    """Actuator double that remembers every command."""

    def __init__(self) -> None:
        self.voltages: List[float] = []
        self.closed = False

    def set_voltage(self, voltage: float) -> None:
        self.voltages.append(voltage)

    def close(self) -> None:
        self.closed = True


class FixedSensor(PositionSensor):
    """Sensor double reporting a settable angle."""

    def __init__(self, angle_rad: float = 0.0) -> None:
        self.angle_rad = angle_rad
        self.closed = False

    def read_angle_rad(self) -> float:
        return self.angle_rad

    def read_angular_vel_rad_per_sec(self) -> float:
        return 0.0

    def close(self) -> None:
        self.closed = True


class ListSink(TelemetrySink):
    """Telemetry sink collecting (name, values) tuples."""

    def __init__(self) -> None:
        self.published: List[tuple] = []
        self.closed = False

    def publish(self, name: str, values: Mapping[str, float]) -> None:
        self.published.append((name, dict(values)))

    def close(self) -> None:
        self.closed = True


class FailingSink(TelemetrySink):
    """Telemetry sink whose every update fails."""

    def publish(self, name: str, values: Mapping[str, float]) -> None:
        raise RuntimeError("display unavailable")


@pytest.fixture
def params() -> ArmParameters:
    return ArmParameters()


@pytest.fixture
def no_gravity_params() -> ArmParameters:
    return ArmParameters(simulate_gravity=False)


@pytest.fixture
def quiet_backend(no_gravity_params: ArmParameters) -> SimulatedActuatorSensor:
    return SimulatedActuatorSensor(no_gravity_params, noise_std=0.0, seed=0)


@pytest.fixture
def quiet_config() -> ArmSimConfig:
    return ArmSimConfig(noise_std=0.0, simulate_gravity=False, seed=0)


@pytest.fixture
def actuator() -> RecordingActuator:
    return RecordingActuator()


@pytest.fixture
def sensor() -> FixedSensor:
    return FixedSensor()


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()
