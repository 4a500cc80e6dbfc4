"""
Periodic position control of a single-jointed arm.

``ArmController`` owns a feedback controller and an actuator/sensor pair
(hardware or simulated) and exposes the two periodic entry points an
external fixed-rate scheduler calls: ``control_step`` and, for simulated
backends, ``simulation_step``.  Setpoint and proportional gain are
reloadable from a ``PreferenceStore``.

Classes:
    ArmController: The control-loop orchestrator.
"""

from __future__ import annotations

import contextlib
import logging
import math
from typing import Dict, Optional, Tuple

from arm_sim.configs import ArmSimConfig
from arm_sim.control.feedback import FeedbackController
from arm_sim.control.preferences import InMemoryPreferences, PreferenceStore
from arm_sim.errors import ConfigurationError, OutOfRangeCommand
from arm_sim.robots.arm_dynamics import ArmParameters, ArmState
from arm_sim.robots.interfaces import MotorActuator, PositionSensor
from arm_sim.robots.sim_arm import SimulatedActuatorSensor
from arm_sim.utils.constants import ARM_MAX_ANGLE_RAD, ARM_MIN_ANGLE_RAD, TELEMETRY_NAME
from arm_sim.utils.helpers import loaded_battery_voltage, require_finite
from arm_sim.visualization.telemetry import TelemetrySink

logger = logging.getLogger(__name__)


class ArmController:
    """Drives the arm to the stored setpoint once per control period.

    Setpoints outside the travel limits are rejected with
    ``OutOfRangeCommand``; the previous setpoint stays in force.

    Telemetry is published once per cycle: from ``simulation_step`` for a
    simulated backend, from ``control_step`` otherwise.  Sink failures are
    logged and never interrupt control.

    ``stop`` commands zero volts and zeroes ``commanded_voltage`` on every
    call.  After ``close`` the actuator handle has been released, so
    ``stop`` only zeroes ``commanded_voltage`` and issues no command.

    Attributes:
        actuator: Motor receiving voltage commands.
        sensor: Encoder providing the measured angle.
        feedback: The PD control law.
        preferences: Store holding the tunable setpoint and kp.
        telemetry: Optional display sink.
        config: Run configuration (keys, period, defaults).
    """

    def __init__(
        self,
        actuator: MotorActuator,
        sensor: PositionSensor,
        feedback: Optional[FeedbackController] = None,
        preferences: Optional[PreferenceStore] = None,
        telemetry: Optional[TelemetrySink] = None,
        config: Optional[ArmSimConfig] = None,
        travel_limits_rad: Tuple[float, float] = (ARM_MIN_ANGLE_RAD, ARM_MAX_ANGLE_RAD),
    ) -> None:
        """Wire up the loop and seed the preference store.

        Existing preference values are never overwritten; the defaults are
        only written for keys that do not exist yet.

        Args:
            actuator: Motor backend.
            sensor: Position sensor backend (may be the same object).
            feedback: Control law; built from *config* gains when *None*.
            preferences: Tunable-parameter store; in-memory when *None*.
            telemetry: Optional telemetry sink.
            config: Run configuration; defaults when *None*.
            travel_limits_rad: ``(lower, upper)`` bounds for setpoints.

        Raises:
            ConfigurationError: If the travel limits are empty.
            OutOfRangeCommand: If the configured setpoint is out of range.
        """
        self.config = config or ArmSimConfig()
        self.actuator = actuator
        self.sensor = sensor
        self.feedback = feedback or FeedbackController(
            self.config.kp, self.config.kd, self.config.period_s
        )
        self.preferences = preferences if preferences is not None else InMemoryPreferences()
        self.telemetry = telemetry
        lower, upper = travel_limits_rad
        if not lower < upper:
            raise ConfigurationError(f"Empty travel limits ({lower}, {upper})")
        self._travel_limits_rad = (lower, upper)
        self._setpoint_degrees = 0.0
        self.set_setpoint_degrees(self.config.setpoint_degrees)
        self._kp = self.feedback.gains.kp
        self._commanded_voltage = 0.0
        self._last_measurement_rad: Optional[float] = None
        self._closed = False
        self.preferences.init_double(self.config.position_key, self._setpoint_degrees)
        self.preferences.init_double(self.config.kp_key, self._kp)

    @classmethod
    def simulated(
        cls,
        config: Optional[ArmSimConfig] = None,
        params: Optional[ArmParameters] = None,
        preferences: Optional[PreferenceStore] = None,
        telemetry: Optional[TelemetrySink] = None,
    ) -> ArmController:
        """Build a controller around a fresh ``SimulatedActuatorSensor``.

        Args:
            config: Run configuration; defaults when *None*.
            params: Arm parameters; reference arm with the config's
                gravity flag when *None*.
            preferences: Tunable-parameter store.
            telemetry: Optional telemetry sink.

        Returns:
            A controller whose actuator and sensor are the same simulated
            backend.
        """
        cfg = config or ArmSimConfig()
        arm = params or ArmParameters(simulate_gravity=cfg.simulate_gravity)
        backend = SimulatedActuatorSensor(
            arm,
            noise_std=cfg.noise_std,
            noise_clip_sigmas=cfg.noise_clip_sigmas,
            max_voltage=cfg.max_voltage,
            seed=cfg.seed,
        )
        return cls(
            backend,
            backend,
            preferences=preferences,
            telemetry=telemetry,
            config=cfg,
            travel_limits_rad=(arm.min_angle_rad, arm.max_angle_rad),
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def setpoint_degrees(self) -> float:
        return self._setpoint_degrees

    @property
    def setpoint_rad(self) -> float:
        return math.radians(self._setpoint_degrees)

    @property
    def kp(self) -> float:
        return self._kp

    @property
    def travel_limits_rad(self) -> Tuple[float, float]:
        return self._travel_limits_rad

    @property
    def commanded_voltage(self) -> float:
        """Last controller output written to the actuator (0 after ``stop``)."""
        return self._commanded_voltage

    @property
    def last_measurement_rad(self) -> Optional[float]:
        """Angle read by the most recent ``control_step``."""
        return self._last_measurement_rad

    @property
    def is_simulated(self) -> bool:
        return isinstance(self.sensor, SimulatedActuatorSensor)

    def set_setpoint_degrees(self, degrees: float) -> None:
        """Set the target angle.

        Args:
            degrees: Target angle in degrees.

        Raises:
            NumericDegeneracy: If *degrees* is NaN or infinite.
            OutOfRangeCommand: If the target is outside the travel limits.
        """
        require_finite("setpoint", degrees)
        lower, upper = self._travel_limits_rad
        if not lower <= math.radians(degrees) <= upper:
            raise OutOfRangeCommand(degrees, math.degrees(lower), math.degrees(upper))
        self._setpoint_degrees = float(degrees)

    def set_proportional_gain(self, kp: float) -> None:
        """Set kp; kd is unchanged.  Applies from the next ``control_step``."""
        self.feedback.set_p(kp)
        self._kp = kp

    def set_derivative_gain(self, kd: float) -> None:
        """Set kd; kp is unchanged."""
        self.feedback.set_d(kd)

    def load_preferences(self) -> None:
        """Reload kp and the setpoint from the preference store.

        kp is applied first and only when it changed; a stored setpoint that
        is out of range raises and leaves the previous setpoint in force.

        Raises:
            OutOfRangeCommand: If the stored setpoint is out of range.
        """
        kp = self.preferences.get_double(self.config.kp_key, self._kp)
        if kp != self._kp:
            logger.info("Reloaded kp %.4f -> %.4f", self._kp, kp)
            self.set_proportional_gain(kp)
        setpoint = self.preferences.get_double(self.config.position_key, self._setpoint_degrees)
        self.set_setpoint_degrees(setpoint)

    # ------------------------------------------------------------------
    # Periodic entry points
    # ------------------------------------------------------------------

    def control_step(self) -> float:
        """Run one control cycle: read, compute, command.

        Returns:
            The voltage written to the actuator.

        Raises:
            RuntimeError: If the controller has been closed.
        """
        self._ensure_open()
        measurement = self.sensor.read_angle_rad()
        output = self.feedback.compute(measurement, self.setpoint_rad)
        self.actuator.set_voltage(output)
        self._commanded_voltage = output
        self._last_measurement_rad = measurement
        if not self.is_simulated:
            self._publish({"angle_deg": math.degrees(measurement)})
        return output

    def simulation_step(self, dt: Optional[float] = None) -> ArmState:
        """Advance the simulated arm by one period.

        Args:
            dt: Timestep; the configured period when *None*.

        Returns:
            The new true ``ArmState``.

        Raises:
            RuntimeError: If closed, or if the backend is not simulated.
        """
        self._ensure_open()
        if not self.is_simulated:
            raise RuntimeError("simulation_step requires a SimulatedActuatorSensor backend")
        sim: SimulatedActuatorSensor = self.sensor
        state = sim.advance(self.config.period_s if dt is None else dt)
        current = sim.read_current_draw_amps()
        self._publish(
            {
                "angle_deg": math.degrees(state.angle_rad),
                "current_a": current,
                "battery_voltage": loaded_battery_voltage(current),
            }
        )
        return state

    def stop(self) -> None:
        """Command zero volts and zero the recorded command.

        Safe to call any number of times.  After ``close`` the actuator has
        been released and only the recorded command is zeroed.
        """
        if not self._closed:
            self.actuator.set_voltage(0.0)
        self._commanded_voltage = 0.0

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def _publish(self, values: Dict[str, float]) -> None:
        if self.telemetry is None:
            return
        values = dict(values, setpoint_deg=self._setpoint_degrees, voltage=self._commanded_voltage)
        try:
            self.telemetry.publish(TELEMETRY_NAME, values)
        except Exception:
            logger.warning("Telemetry update failed", exc_info=True)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ArmController is closed")

    def close(self) -> None:
        """Stop the motor and release every owned handle.

        Every handle is released even if stopping or an earlier release
        fails; the failure propagates once all releases have run.
        Idempotent.
        """
        if self._closed:
            return
        with contextlib.ExitStack() as stack:
            if self.telemetry is not None:
                stack.callback(self.telemetry.close)
            stack.callback(self.feedback.close)
            if self.sensor is not self.actuator:
                stack.callback(self.sensor.close)
            stack.callback(self.actuator.close)
            try:
                self.stop()
            finally:
                self._closed = True

    def __enter__(self) -> ArmController:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
