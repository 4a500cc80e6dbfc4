"""
Gymnasium-compatible environment around the simulated arm.

Exposes the arm's motor voltage as the action and its measured state as
the observation, for experimenting with controllers other than the PD law.
"""

from arm_sim.envs.arm_env import ArmSimEnv
from arm_sim.envs.configs import ArmEnvConfig
from arm_sim.envs.factory import make_sim_env

__all__ = [
    "ArmSimEnv",
    "ArmEnvConfig",
    "make_sim_env",
]
