"""
Small stateless helpers used across the arm_sim package.

Provides functions for numerical clamping, finiteness checks, battery
sag estimation, and seeding.
"""

from __future__ import annotations

import math

import numpy as np

from arm_sim.errors import NumericDegeneracy
from arm_sim.utils.constants import BATTERY_NOMINAL_VOLTAGE, BATTERY_RESISTANCE_OHMS


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def require_finite(name: str, *values: float) -> None:
    """Raise if any of *values* is NaN or infinite.

    Args:
        name: Label used in the error message.
        values: Scalars to check.

    Raises:
        NumericDegeneracy: When a value is not finite.
    """
    for value in values:
        if not math.isfinite(value):
            raise NumericDegeneracy(f"{name} must be finite, got {value!r}")


def loaded_battery_voltage(
    *currents: float,
    nominal_voltage: float = BATTERY_NOMINAL_VOLTAGE,
    resistance: float = BATTERY_RESISTANCE_OHMS,
) -> float:
    """Estimate the battery terminal voltage under load.

    Args:
        currents: Current draws of every load on the battery (amps).
        nominal_voltage: Open-circuit battery voltage.
        resistance: Internal battery resistance (ohms).

    Returns:
        ``nominal_voltage - resistance * sum(currents)``, never below zero.
    """
    return max(0.0, nominal_voltage - resistance * sum(currents))


def seed_rngs(seed: int | None) -> np.random.Generator:
    """Create and return a NumPy random generator seeded with *seed*.

    Args:
        seed: The integer seed value, or *None* for OS entropy.

    Returns:
        A seeded ``numpy.random.Generator``.
    """
    return np.random.default_rng(seed)
