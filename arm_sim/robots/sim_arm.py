"""
Simulated actuator/sensor pair backed by the arm dynamics model.

Stands in for the motor controller and encoder of the real arm.  Voltage
commands are latched and only take effect when ``advance`` integrates the
physics; angle readings carry bounded Gaussian encoder noise applied at
read time, never accumulated into the true state.

Classes:
    SimulatedActuatorSensor: The simulated backend.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from arm_sim.errors import ConfigurationError
from arm_sim.robots.arm_dynamics import ArmDynamicsModel, ArmParameters, ArmState
from arm_sim.robots.interfaces import MotorActuator, PositionSensor
from arm_sim.utils.constants import (
    ARM_ENCODER_DIST_PER_PULSE,
    MAX_MOTOR_VOLTAGE,
    NOISE_CLIP_SIGMAS,
)
from arm_sim.utils.helpers import clamp, require_finite, seed_rngs

logger = logging.getLogger(__name__)


class SimulatedActuatorSensor(MotorActuator, PositionSensor):
    """Motor and encoder of a simulated single-jointed arm.

    Attributes:
        model: The ``ArmDynamicsModel`` integrating the arm.
        noise_std: Standard deviation of angle read noise (radians).
        noise_clip_sigmas: Noise samples are clipped to this many std-devs.
        max_voltage: Commands are saturated to ``[-max_voltage, max_voltage]``.
    """

    def __init__(
        self,
        params: ArmParameters | None = None,
        noise_std: float = ARM_ENCODER_DIST_PER_PULSE,
        noise_clip_sigmas: float = NOISE_CLIP_SIGMAS,
        max_voltage: float = MAX_MOTOR_VOLTAGE,
        seed: int | None = None,
    ) -> None:
        """Create the backend with the arm at rest at its starting angle.

        Args:
            params: Physical parameters; reference arm defaults when *None*.
            noise_std: Angle noise std-dev in radians (0 disables noise).
            noise_clip_sigmas: Bound on noise magnitude in std-devs.
            max_voltage: Supply voltage limit.
            seed: Seed for the noise generator.

        Raises:
            ConfigurationError: On negative or non-finite noise, or limits
                that are not positive and finite.
        """
        if not math.isfinite(noise_std) or noise_std < 0.0:
            raise ConfigurationError(f"noise_std must be non-negative, got {noise_std}")
        if not math.isfinite(noise_clip_sigmas) or noise_clip_sigmas <= 0.0:
            raise ConfigurationError("noise_clip_sigmas must be positive")
        if not math.isfinite(max_voltage) or max_voltage <= 0.0:
            raise ConfigurationError("max_voltage must be positive")
        self.model = ArmDynamicsModel(params)
        self.noise_std = noise_std
        self.noise_clip_sigmas = noise_clip_sigmas
        self.max_voltage = max_voltage
        self._rng = seed_rngs(seed)
        self._state = self.model.initial_state()
        self._voltage = 0.0
        self._closed = False

    # ------------------------------------------------------------------
    # MotorActuator
    # ------------------------------------------------------------------

    def set_voltage(self, voltage: float) -> None:
        """Latch *voltage*, saturated to the supply range, for the next step.

        Args:
            voltage: Requested motor voltage.

        Raises:
            NumericDegeneracy: If *voltage* is NaN or infinite.
        """
        require_finite("voltage", voltage)
        self._voltage = clamp(voltage, -self.max_voltage, self.max_voltage)

    @property
    def applied_voltage(self) -> float:
        """The saturated voltage the next ``advance`` will apply."""
        return self._voltage

    # ------------------------------------------------------------------
    # Physics
    # ------------------------------------------------------------------

    def advance(self, dt: float) -> ArmState:
        """Integrate the arm forward by *dt* seconds under the latched voltage.

        Args:
            dt: Timestep in seconds.

        Returns:
            The new true ``ArmState``.
        """
        was_at_stop = self._at_hard_stop(self._state)
        self._state = self.model.step(self._state, self._voltage, dt)
        if not was_at_stop and self._at_hard_stop(self._state):
            logger.debug("Arm reached hard stop at %.3f rad", self._state.angle_rad)
        return self._state

    def _at_hard_stop(self, state: ArmState) -> bool:
        return self.model.has_hit_lower_limit(state) or self.model.has_hit_upper_limit(state)

    @property
    def state(self) -> ArmState:
        """The true (noise-free) arm state."""
        return self._state

    def reset(self, state: ArmState | None = None, seed: int | None = None) -> ArmState:
        """Put the arm back at rest, or at *state*, with zero voltage latched.

        Args:
            state: State to restore; the starting angle at rest when *None*.
            seed: Optional new seed for the noise generator.

        Returns:
            The restored state.
        """
        self._state = state if state is not None else self.model.initial_state()
        self._voltage = 0.0
        if seed is not None:
            self._rng = seed_rngs(seed)
        return self._state

    # ------------------------------------------------------------------
    # PositionSensor
    # ------------------------------------------------------------------

    def _sample_noise(self) -> float:
        if self.noise_std == 0.0:
            return 0.0
        bound = self.noise_clip_sigmas * self.noise_std
        return float(np.clip(self._rng.normal(0.0, self.noise_std), -bound, bound))

    def read_angle_rad(self) -> float:
        """Return the true angle plus bounded encoder noise."""
        return self._state.angle_rad + self._sample_noise()

    def read_angular_vel_rad_per_sec(self) -> float:
        """Return the true angular velocity (noise-free)."""
        return self._state.angular_vel_rad_per_sec

    def read_current_draw_amps(self) -> float:
        """Return the gearbox current draw at the latched voltage."""
        return self.model.current_draw_amps(self._state, self._voltage)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Zero the latched voltage.  Safe to call more than once."""
        self._voltage = 0.0
        self._closed = True

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed
