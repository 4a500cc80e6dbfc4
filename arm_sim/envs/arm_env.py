"""
Single-jointed arm reaching environment (Gymnasium-compatible).

The agent commands the motor voltage directly and must bring the arm to a
randomly sampled setpoint inside its travel range.  Observations are the
measured (noisy) angle, the angular velocity and the setpoint.

Classes:
    ArmSimEnv: Gymnasium environment for the arm reaching task.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from arm_sim.envs.configs import ArmEnvConfig
from arm_sim.robots.arm_dynamics import ArmParameters
from arm_sim.robots.sim_arm import SimulatedActuatorSensor
from arm_sim.visualization.canvas import render_arm_canvas


class ArmSimEnv(gym.Env):
    """Gymnasium environment wrapping ``SimulatedActuatorSensor``.

    Attributes:
        metadata: Gymnasium metadata with supported render modes.
        cfg: ``ArmEnvConfig`` controlling episode length, resolution, etc.
        arm: The simulated backend.
    """

    metadata: Dict[str, Any] = {"render_modes": ["rgb_array"]}

    def __init__(self, cfg: ArmEnvConfig | None = None) -> None:
        """Initialise the environment.

        Args:
            cfg: Optional configuration; a default ``ArmEnvConfig`` is used
                when *None*.
        """
        super().__init__()
        self.cfg = cfg or ArmEnvConfig()
        self.render_mode = self.cfg.render_mode
        self._rng = np.random.default_rng(self.cfg.seed)
        self.arm = SimulatedActuatorSensor(
            ArmParameters(simulate_gravity=self.cfg.sim.simulate_gravity),
            noise_std=self.cfg.sim.noise_std,
            noise_clip_sigmas=self.cfg.sim.noise_clip_sigmas,
            max_voltage=self.cfg.sim.max_voltage,
            seed=self.cfg.seed,
        )
        self._setpoint_rad = math.radians(self.cfg.sim.setpoint_degrees)
        self._step_count = 0
        self._init_spaces()

    def _init_spaces(self) -> None:
        """Define action and observation Gymnasium spaces."""
        limit = self.cfg.sim.max_voltage
        self.action_space = spaces.Box(low=-limit, high=limit, shape=(1,), dtype=np.float32)
        obs_dict: Dict[str, spaces.Space] = {
            "agent_pos": spaces.Box(low=-np.inf, high=np.inf, shape=(3,), dtype=np.float32)
        }
        if "pixels" in self.cfg.obs_type:
            h, w = self.cfg.observation_height, self.cfg.observation_width
            obs_dict["pixels"] = spaces.Box(low=0, high=255, shape=(h, w, 3), dtype=np.uint8)
        self.observation_space = spaces.Dict(obs_dict)

    # ------------------------------------------------------------------
    # Gymnasium API
    # ------------------------------------------------------------------

    @property
    def setpoint_rad(self) -> float:
        """Target angle of the current episode."""
        return self._setpoint_rad

    def _sample_setpoint(self) -> float:
        params = self.arm.model.params
        return float(self._rng.uniform(params.min_angle_rad, params.max_angle_rad))

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Reset the arm to rest and sample a new setpoint.

        Args:
            seed: Optional seed for setpoint sampling and sensor noise.
            options: ``{'setpoint_rad': float}`` fixes the setpoint.

        Returns:
            Tuple of (observation dict, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self._rng = np.random.default_rng(seed)
        self.arm.reset(seed=seed)
        self._step_count = 0
        if options and "setpoint_rad" in options:
            self._setpoint_rad = float(options["setpoint_rad"])
        else:
            self._setpoint_rad = self._sample_setpoint()
        return self._build_observation(), {"setpoint_rad": self._setpoint_rad}

    def _compute_reward(self) -> Tuple[float, bool]:
        """Compute the reward and success flag.

        Returns:
            Tuple of (scalar reward, success boolean).
        """
        state = self.arm.state
        error = abs(self._setpoint_rad - state.angle_rad)
        tol = self.cfg.success_tolerance_rad
        success = error < tol and abs(state.angular_vel_rad_per_sec) < tol
        return -error, success

    def step(
        self, action: np.ndarray
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """Apply a voltage for one period.

        Args:
            action: Array holding one voltage.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        voltage = float(np.asarray(action, dtype=np.float64).reshape(-1)[0])
        self.arm.set_voltage(voltage)
        self.arm.advance(self.cfg.dt)
        self._step_count += 1
        reward, success = self._compute_reward()
        truncated = self._step_count >= self.cfg.episode_length
        info = {
            "is_success": success,
            "current_draw_amps": self.arm.read_current_draw_amps(),
        }
        return self._build_observation(), reward, success, truncated, info

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """Assemble the observation dictionary.

        Returns:
            Dictionary with ``'agent_pos'`` (3-D) and optionally ``'pixels'``.
        """
        state = np.array(
            [
                self.arm.read_angle_rad(),
                self.arm.read_angular_vel_rad_per_sec(),
                self._setpoint_rad,
            ],
            dtype=np.float32,
        )
        obs: Dict[str, np.ndarray] = {"agent_pos": state}
        if "pixels" in self.cfg.obs_type:
            obs["pixels"] = self.render()
        return obs

    def render(self) -> np.ndarray:
        """Render the arm and its setpoint as an RGB image.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        return render_arm_canvas(
            math.degrees(self.arm.state.angle_rad),
            math.degrees(self._setpoint_rad),
            height=self.cfg.observation_height,
            width=self.cfg.observation_width,
        )

    def close(self) -> None:
        """Release the simulated backend."""
        self.arm.close()
