"""
Discrete-time dynamics of a single-jointed arm.

The arm is a rigid rod pivoting about one end, driven through a gear
reduction by a DC motor gearbox and pulled down by gravity acting at its
centre of mass.  Motion is bounded by hard mechanical stops.

Classes:
    ArmParameters: Immutable physical description of the arm.
    ArmState: Angle and angular velocity at one instant.
    ArmDynamicsModel: Pure step function advancing an ``ArmState``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from wpimath.system.plant import DCMotor

from arm_sim.errors import ConfigurationError
from arm_sim.utils.constants import (
    ARM_LENGTH_M,
    ARM_MASS_KG,
    ARM_MAX_ANGLE_RAD,
    ARM_MIN_ANGLE_RAD,
    ARM_NUM_MOTORS,
    ARM_REDUCTION,
    ARM_STARTING_ANGLE_RAD,
    GRAVITY_MPS2,
)
from arm_sim.utils.helpers import require_finite


def _default_motor() -> DCMotor:
    return DCMotor.vex775Pro(ARM_NUM_MOTORS)


@dataclass(frozen=True)
class ArmParameters:
    """Physical description of the arm, fixed for the life of a model.

    Attributes:
        motor: WPILib gearbox characteristic driving the arm (two 775pro
            motors by default).
        gearing: Reduction ratio (motor turns per arm turn).
        moment_of_inertia: Arm inertia about the pivot (kg·m²).
        arm_length: Pivot-to-tip length (m).
        arm_mass: Arm mass (kg), lumped at ``arm_length / 2``.
        min_angle_rad: Lower hard stop.
        max_angle_rad: Upper hard stop.
        simulate_gravity: Whether gravity torque is applied.
        gravity: Gravitational acceleration (m/s²).
        starting_angle_rad: Angle the arm rests at when a model is created.
    """

    motor: DCMotor = field(default_factory=_default_motor)
    gearing: float = ARM_REDUCTION
    moment_of_inertia: float = ARM_MASS_KG * ARM_LENGTH_M**2 / 3.0
    arm_length: float = ARM_LENGTH_M
    arm_mass: float = ARM_MASS_KG
    min_angle_rad: float = ARM_MIN_ANGLE_RAD
    max_angle_rad: float = ARM_MAX_ANGLE_RAD
    simulate_gravity: bool = True
    gravity: float = GRAVITY_MPS2
    starting_angle_rad: float = ARM_STARTING_ANGLE_RAD

    def __post_init__(self) -> None:
        """Fail fast on parameters that cannot describe a real arm.

        Raises:
            ConfigurationError: On any invalid field.
        """
        self._require_valid_motor(self.motor)
        self._require_positive("gearing", self.gearing)
        self._require_positive("moment_of_inertia", self.moment_of_inertia)
        self._require_positive("arm_length", self.arm_length)
        if not math.isfinite(self.arm_mass) or self.arm_mass < 0.0:
            raise ConfigurationError(f"arm_mass must be non-negative, got {self.arm_mass}")
        if not math.isfinite(self.gravity) or self.gravity < 0.0:
            raise ConfigurationError(f"gravity must be non-negative, got {self.gravity}")
        if not (math.isfinite(self.min_angle_rad) and math.isfinite(self.max_angle_rad)):
            raise ConfigurationError("Angle limits must be finite")
        if self.min_angle_rad >= self.max_angle_rad:
            raise ConfigurationError(
                f"min_angle_rad ({self.min_angle_rad}) must be below "
                f"max_angle_rad ({self.max_angle_rad})"
            )
        if not self.min_angle_rad <= self.starting_angle_rad <= self.max_angle_rad:
            raise ConfigurationError("starting_angle_rad must lie within the angle limits")

    @staticmethod
    def _require_valid_motor(motor: DCMotor) -> None:
        if not isinstance(motor, DCMotor):
            raise ConfigurationError(f"motor must be a wpimath DCMotor, got {type(motor).__name__}")
        for name, value in (("R", motor.R), ("Kv", motor.Kv), ("Kt", motor.Kt)):
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(f"motor.{name} must be positive, got {value}")

    @staticmethod
    def _require_positive(name: str, value: float) -> None:
        if not math.isfinite(value) or value <= 0.0:
            raise ConfigurationError(f"{name} must be positive, got {value}")

    @staticmethod
    def estimate_moi(length: float, mass: float) -> float:
        """Moment of inertia of a uniform rod about one end.

        Args:
            length: Rod length (m).
            mass: Rod mass (kg).

        Returns:
            ``mass * length**2 / 3`` in kg·m².
        """
        return mass * length**2 / 3.0

    @property
    def center_of_mass_length(self) -> float:
        """Distance from the pivot to the centre of mass (m)."""
        return self.arm_length / 2.0


@dataclass(frozen=True)
class ArmState:
    """Arm angle and angular velocity.

    Attributes:
        angle_rad: Angle from horizontal, counter-clockwise positive.
        angular_vel_rad_per_sec: Angular velocity.
    """

    angle_rad: float = 0.0
    angular_vel_rad_per_sec: float = 0.0


class ArmDynamicsModel:
    """Advances an ``ArmState`` under an applied motor voltage.

    The model holds no mutable state: every method is a function of the
    state and voltage it is given.  Torque balance per step::

        I_motor = (V - w*G/Kv) / R
        T_motor = G * Kt * I_motor
        T_grav  = -m * g * (L/2) * cos(theta)
        alpha   = (T_motor + T_grav) / J

    integrated with semi-implicit Euler and clamped at the hard stops.

    Attributes:
        params: The arm's ``ArmParameters``.
    """

    def __init__(self, params: ArmParameters | None = None) -> None:
        self.params = params or ArmParameters()

    def initial_state(self) -> ArmState:
        """Return the arm at rest at its starting angle."""
        return ArmState(angle_rad=self.params.starting_angle_rad)

    # ------------------------------------------------------------------
    # Torque terms
    # ------------------------------------------------------------------

    def _motor_current(self, state: ArmState, voltage: float) -> float:
        motor_speed = state.angular_vel_rad_per_sec * self.params.gearing
        return self.params.motor.current(motor_speed, voltage)

    def motor_torque(self, state: ArmState, voltage: float) -> float:
        """Torque delivered at the arm pivot by the gearbox (N·m)."""
        current = self._motor_current(state, voltage)
        return self.params.gearing * self.params.motor.torque(current)

    def gravity_torque(self, angle_rad: float) -> float:
        """Gravity torque about the pivot at *angle_rad* (N·m)."""
        if not self.params.simulate_gravity:
            return 0.0
        p = self.params
        return -p.arm_mass * p.gravity * p.center_of_mass_length * math.cos(angle_rad)

    def angular_acceleration(self, state: ArmState, voltage: float) -> float:
        """Net angular acceleration (rad/s²) for *state* under *voltage*."""
        net_torque = self.motor_torque(state, voltage) + self.gravity_torque(state.angle_rad)
        return net_torque / self.params.moment_of_inertia

    def current_draw_amps(self, state: ArmState, voltage: float) -> float:
        """Supply current drawn by the gearbox.

        Uses the same current term as ``motor_torque``, signed by the input
        voltage so that a motor driven against its motion reports a
        positive draw.

        Args:
            state: Current arm state.
            voltage: Applied voltage.

        Returns:
            Current draw in amps.
        """
        if voltage == 0.0:
            return 0.0
        return self._motor_current(state, voltage) * math.copysign(1.0, voltage)

    # ------------------------------------------------------------------
    # Limits
    # ------------------------------------------------------------------

    def would_hit_lower_limit(self, angle_rad: float) -> bool:
        """Whether *angle_rad* is at or below the lower hard stop."""
        return angle_rad <= self.params.min_angle_rad

    def would_hit_upper_limit(self, angle_rad: float) -> bool:
        """Whether *angle_rad* is at or above the upper hard stop."""
        return angle_rad >= self.params.max_angle_rad

    def has_hit_lower_limit(self, state: ArmState) -> bool:
        """Whether *state* rests on the lower hard stop."""
        return self.would_hit_lower_limit(state.angle_rad)

    def has_hit_upper_limit(self, state: ArmState) -> bool:
        """Whether *state* rests on the upper hard stop."""
        return self.would_hit_upper_limit(state.angle_rad)

    def _apply_hard_stops(self, angle: float, velocity: float) -> ArmState:
        if angle < self.params.min_angle_rad:
            return ArmState(self.params.min_angle_rad, 0.0)
        if angle > self.params.max_angle_rad:
            return ArmState(self.params.max_angle_rad, 0.0)
        return ArmState(angle, velocity)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def step(self, state: ArmState, voltage: float, dt: float) -> ArmState:
        """Advance *state* by *dt* seconds with *voltage* applied.

        Args:
            state: State at the start of the step.
            voltage: Motor input voltage, held for the whole step.
            dt: Timestep in seconds.

        Returns:
            The new ``ArmState``, inside the angle limits.

        Raises:
            NumericDegeneracy: If any input is NaN or infinite.
            ValueError: If *dt* is not positive.
        """
        require_finite("voltage", voltage)
        require_finite("dt", dt)
        require_finite("state", state.angle_rad, state.angular_vel_rad_per_sec)
        if dt <= 0.0:
            raise ValueError(f"dt must be positive, got {dt}")
        accel = self.angular_acceleration(state, voltage)
        velocity = state.angular_vel_rad_per_sec + accel * dt
        angle = state.angle_rad + velocity * dt
        return self._apply_hard_stops(angle, velocity)
