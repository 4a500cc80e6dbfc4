"""
Actuator and sensor capabilities consumed by the arm controller.

Any backend implementing this pair, whether a hardware driver or the
simulated arm, can be handed to ``ArmController`` unchanged.

Classes:
    MotorActuator: Accepts voltage commands.
    PositionSensor: Reports arm angle and angular velocity.
"""

from __future__ import annotations

import abc


class MotorActuator(abc.ABC):
    """A motor that can be driven by a voltage command.

    Saturation to the supply range is the actuator's responsibility; the
    value passed to ``set_voltage`` is whatever the control law produced.
    """

    @abc.abstractmethod
    def set_voltage(self, voltage: float) -> None:
        """Command the motor with *voltage* volts.

        Args:
            voltage: Requested motor voltage.
        """
        raise NotImplementedError

    def stop(self) -> None:
        """Command zero volts."""
        self.set_voltage(0.0)

    def close(self) -> None:
        """Release any handle held on the motor.  No-op by default."""


class PositionSensor(abc.ABC):
    """An angular position/velocity sensor on the arm pivot."""

    @abc.abstractmethod
    def read_angle_rad(self) -> float:
        """Return the measured arm angle in radians."""
        raise NotImplementedError

    @abc.abstractmethod
    def read_angular_vel_rad_per_sec(self) -> float:
        """Return the measured angular velocity in radians per second."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any handle held on the sensor.  No-op by default."""
