"""
Dataclass configuration for a simulated arm control run.

Classes:
    ArmSimConfig: Controller, backend and tunable-parameter settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from arm_sim.utils.constants import (
    ARM_ENCODER_DIST_PER_PULSE,
    ARM_P_KEY,
    ARM_POSITION_KEY,
    DEFAULT_ARM_KD,
    DEFAULT_ARM_KP,
    DEFAULT_ARM_SETPOINT_DEGREES,
    DEFAULT_PERIOD_S,
    MAX_MOTOR_VOLTAGE,
    NOISE_CLIP_SIGMAS,
)


@dataclass
class ArmSimConfig:
    """Settings for an ``ArmController`` and its simulated backend.

    Attributes:
        setpoint_degrees: Initial target angle.
        kp: Proportional gain (volts per radian).
        kd: Derivative gain (volts per radian-per-second).
        period_s: Control and simulation period.
        noise_std: Encoder read noise std-dev (radians).
        noise_clip_sigmas: Noise bound in std-devs.
        max_voltage: Motor supply limit.
        simulate_gravity: Apply gravity torque in the simulation.
        seed: Noise generator seed.
        position_key: Preference key for the setpoint (degrees).
        kp_key: Preference key for kp.
    """

    setpoint_degrees: float = DEFAULT_ARM_SETPOINT_DEGREES
    kp: float = DEFAULT_ARM_KP
    kd: float = DEFAULT_ARM_KD
    period_s: float = DEFAULT_PERIOD_S
    noise_std: float = ARM_ENCODER_DIST_PER_PULSE
    noise_clip_sigmas: float = NOISE_CLIP_SIGMAS
    max_voltage: float = MAX_MOTOR_VOLTAGE
    simulate_gravity: bool = True
    seed: Optional[int] = 42
    position_key: str = ARM_POSITION_KEY
    kp_key: str = ARM_P_KEY
