"""
Exception hierarchy for the arm_sim package.

Every concrete error also derives from ``ValueError`` so callers that
already guard argument validation with ``except ValueError`` keep working.

Classes:
    ArmSimError: Root of all package-specific errors.
    ConfigurationError: Invalid physical or controller parameters.
    OutOfRangeCommand: A setpoint outside the configured travel limits.
    NumericDegeneracy: NaN or infinite input to the control/physics math.
"""

from __future__ import annotations


class ArmSimError(Exception):
    """Base class for errors raised by arm_sim."""


class ConfigurationError(ArmSimError, ValueError):
    """Raised at construction time when parameters are physically invalid."""


class OutOfRangeCommand(ArmSimError, ValueError):
    """Raised when a commanded setpoint lies outside the travel limits.

    Attributes:
        value: The rejected value, in the caller's units.
        lower: Lower travel bound, same units.
        upper: Upper travel bound, same units.
    """

    def __init__(self, value: float, lower: float, upper: float) -> None:
        super().__init__(
            f"Setpoint {value:.3f} outside travel limits [{lower:.3f}, {upper:.3f}]"
        )
        self.value = value
        self.lower = lower
        self.upper = upper


class NumericDegeneracy(ArmSimError, ValueError):
    """Raised when a NaN or infinite value reaches the control or physics math."""
