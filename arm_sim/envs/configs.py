"""
Dataclass configuration for the simulated arm environment.

Classes:
    ArmEnvConfig: Episode, observation and rendering settings plus the
        nested ``ArmSimConfig`` describing the simulated backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from arm_sim.configs import ArmSimConfig
from arm_sim.utils.constants import DEFAULT_FPS


@dataclass
class ArmEnvConfig:
    """Configuration for ``ArmSimEnv``.

    Attributes:
        task: Human-readable task identifier.
        fps: Control rate; the simulation period is ``1 / fps``.
        episode_length: Maximum steps per episode.
        obs_type: ``'state'`` or ``'pixels_agent_pos'``.
        render_mode: Gymnasium render mode (``'rgb_array'``).
        observation_height: Pixel height of rendered observations.
        observation_width: Pixel width of rendered observations.
        seed: Random seed for setpoint sampling and sensor noise.
        success_tolerance_rad: Error and speed under which the episode ends.
        sim: Backend settings (noise, voltage limit, gravity).
    """

    task: str = "ArmReach-Sim-v0"
    fps: int = DEFAULT_FPS
    episode_length: int = 500
    obs_type: str = "state"
    render_mode: str = "rgb_array"
    observation_height: int = 128
    observation_width: int = 128
    seed: int = 42
    success_tolerance_rad: float = 0.01
    sim: ArmSimConfig = field(default_factory=ArmSimConfig)

    @property
    def env_type(self) -> str:
        """Return the ``task`` field value."""
        return self.task

    @property
    def dt(self) -> float:
        """Simulation timestep in seconds."""
        return 1.0 / self.fps
