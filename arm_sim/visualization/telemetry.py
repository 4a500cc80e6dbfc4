"""
Telemetry sink interface.

Classes:
    TelemetrySink: Destination for named composite values published once
        per control/simulation cycle.
"""

from __future__ import annotations

import abc
from typing import Mapping


class TelemetrySink(abc.ABC):
    """Best-effort destination for display values.

    Publishers must not let a sink failure interrupt control; see
    ``ArmController``.
    """

    @abc.abstractmethod
    def publish(self, name: str, values: Mapping[str, float]) -> None:
        """Accept the latest values of the composite *name*.

        Args:
            name: Composite identifier (e.g. ``'Arm Sim'``).
            values: Field name to scalar value.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any display handle.  No-op by default."""
