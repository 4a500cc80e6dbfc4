"""
Single-jointed arm position control with a physics simulator.

A closed-loop position controller for a rotating arm driven by DC motors,
paired with a discrete-time simulation of the arm (gravity, motor torque,
inertia, hard stops, encoder noise) so that the control logic can be
exercised without physical hardware.

Modules:
    robots: DC-motor model, arm dynamics, actuator/sensor capabilities and
        the simulated backend.
    control: Feedback law, tunable-parameter stores and the periodic
        ``ArmController`` orchestrator.
    visualization: Telemetry sink interface and a Pygame arm display.
    datasets: In-memory telemetry recording with ``.npz`` export.
    envs: Gymnasium-compatible environment around the simulated arm.
    utils: Shared constants and helper utilities.
"""

from arm_sim.configs import ArmSimConfig
from arm_sim.control.arm_controller import ArmController
from arm_sim.control.feedback import ControlGains, FeedbackController
from arm_sim.errors import (
    ArmSimError,
    ConfigurationError,
    NumericDegeneracy,
    OutOfRangeCommand,
)
from arm_sim.robots.arm_dynamics import ArmDynamicsModel, ArmParameters, ArmState
from arm_sim.robots.sim_arm import SimulatedActuatorSensor

__version__ = "0.1.0"

__all__ = [
    "ArmController",
    "ArmDynamicsModel",
    "ArmParameters",
    "ArmSimConfig",
    "ArmSimError",
    "ArmState",
    "ConfigurationError",
    "ControlGains",
    "FeedbackController",
    "NumericDegeneracy",
    "OutOfRangeCommand",
    "SimulatedActuatorSensor",
]
