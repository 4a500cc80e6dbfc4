"""
Proportional-derivative feedback law.

Classes:
    ControlGains: Immutable (kp, kd) pair.
    FeedbackController: Stateful PD controller sampled at a fixed period.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from arm_sim.errors import ConfigurationError
from arm_sim.utils.constants import DEFAULT_PERIOD_S
from arm_sim.utils.helpers import require_finite


@dataclass(frozen=True)
class ControlGains:
    """Proportional and derivative gains.

    Attributes:
        kp: Volts per radian of error.
        kd: Volts per radian-per-second of error rate.
    """

    kp: float = 0.0
    kd: float = 0.0

    def __post_init__(self) -> None:
        """Reject NaN/infinite or negative gains."""
        require_finite("gains", self.kp, self.kd)
        if self.kp < 0.0 or self.kd < 0.0:
            raise ConfigurationError(f"Gains must be non-negative, got kp={self.kp}, kd={self.kd}")


class FeedbackController:
    """PD controller ``u = kp*e + kd*de/dt`` with ``e = setpoint - measurement``.

    The error rate is the finite difference of consecutive errors over the
    fixed ``period``; the first call after construction or ``reset`` has a
    zero derivative term.  The output is not clamped.

    The difference is taken on the measured error, so sensor noise reaches
    the output amplified by ``kd / period``.  With one-tick encoder noise
    and kd=4 the steady output dithers by a few volts while the angle
    itself stays on target.

    Attributes:
        period: Assumed time between ``compute`` calls (seconds).
    """

    def __init__(self, kp: float = 0.0, kd: float = 0.0, period: float = DEFAULT_PERIOD_S) -> None:
        if not math.isfinite(period) or period <= 0.0:
            raise ConfigurationError(f"period must be positive, got {period}")
        self._gains = ControlGains(kp, kd)
        self.period = period
        self._prev_error: Optional[float] = None

    @property
    def gains(self) -> ControlGains:
        """The gains used by the next ``compute`` call."""
        return self._gains

    def set_gains(self, kp: float, kd: float) -> None:
        """Replace both gains; the error history is kept."""
        self._gains = ControlGains(kp, kd)

    def set_p(self, kp: float) -> None:
        """Replace kp, keeping kd."""
        self.set_gains(kp, self._gains.kd)

    def set_d(self, kd: float) -> None:
        """Replace kd, keeping kp."""
        self.set_gains(self._gains.kp, kd)

    @property
    def position_error(self) -> float:
        """Error seen by the last ``compute`` call (0 before the first)."""
        return self._prev_error if self._prev_error is not None else 0.0

    def at_setpoint(self, tolerance: float) -> bool:
        """Whether the last error is within *tolerance* radians."""
        return self._prev_error is not None and abs(self._prev_error) <= tolerance

    def reset(self) -> None:
        """Forget the previous error."""
        self._prev_error = None

    def compute(self, measurement: float, setpoint: float) -> float:
        """Return the drive command for one control period.

        Args:
            measurement: Measured angle (radians).
            setpoint: Target angle (radians).

        Returns:
            Command in volts.

        Raises:
            NumericDegeneracy: If an input is NaN or infinite; the error
                history is left untouched.
        """
        require_finite("measurement", measurement)
        require_finite("setpoint", setpoint)
        error = setpoint - measurement
        if self._prev_error is None:
            error_rate = 0.0
        else:
            error_rate = (error - self._prev_error) / self.period
        self._prev_error = error
        gains = self._gains
        return gains.kp * error + gains.kd * error_rate

    def close(self) -> None:
        """Release controller state."""
        self.reset()
