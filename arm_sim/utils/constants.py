"""
Shared constants for the arm_sim package.

Physical defaults describe the reference arm: a 30 inch, 8 kg arm driven
through a 200:1 reduction by two Vex 775pro motors, free to travel from
-75 degrees (rotated down in front) to 255 degrees (rotated down in the
back).
"""

from __future__ import annotations

import math
from typing import Tuple

# ---------------------------------------------------------------------------
# Loop timing
# ---------------------------------------------------------------------------
DEFAULT_PERIOD_S: float = 0.020
DEFAULT_FPS: int = 50

# ---------------------------------------------------------------------------
# Reference arm geometry and drivetrain
# ---------------------------------------------------------------------------
ARM_REDUCTION: float = 200.0
ARM_MASS_KG: float = 8.0
ARM_LENGTH_M: float = 30.0 * 0.0254
ARM_NUM_MOTORS: int = 2
ARM_MIN_ANGLE_RAD: float = math.radians(-75.0)
ARM_MAX_ANGLE_RAD: float = math.radians(255.0)
ARM_STARTING_ANGLE_RAD: float = 0.0
GRAVITY_MPS2: float = 9.8

# One encoder tick (4096 ticks per revolution) used as the read-noise std-dev
ARM_ENCODER_DIST_PER_PULSE: float = 2.0 * math.pi / 4096.0
NOISE_CLIP_SIGMAS: float = 5.0

# ---------------------------------------------------------------------------
# Supply
# ---------------------------------------------------------------------------
MAX_MOTOR_VOLTAGE: float = 12.0
BATTERY_NOMINAL_VOLTAGE: float = 12.0
BATTERY_RESISTANCE_OHMS: float = 0.020

# ---------------------------------------------------------------------------
# Controller defaults and tunable-parameter keys
# ---------------------------------------------------------------------------
DEFAULT_ARM_KP: float = 50.0
DEFAULT_ARM_KD: float = 0.0
DEFAULT_ARM_SETPOINT_DEGREES: float = 75.0
ARM_POSITION_KEY: str = "ArmPosition"
ARM_P_KEY: str = "ArmP"
TELEMETRY_NAME: str = "Arm Sim"

# ---------------------------------------------------------------------------
# Color palette (RGB 0-255) used by the 2-D renderers
# ---------------------------------------------------------------------------
COLOR_BACKGROUND: Tuple[int, int, int] = (30, 30, 30)
COLOR_TOWER: Tuple[int, int, int] = (0, 0, 255)
COLOR_ARM: Tuple[int, int, int] = (255, 255, 0)
COLOR_SETPOINT: Tuple[int, int, int] = (120, 120, 120)
COLOR_TEXT: Tuple[int, int, int] = (230, 230, 230)
