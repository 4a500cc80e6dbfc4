"""
Factory function for creating vectorised arm environments.

Functions:
    make_sim_env: Create one or more vectorised ``ArmSimEnv`` copies.
"""

from __future__ import annotations

from typing import Dict

import gymnasium as gym

from arm_sim.envs.arm_env import ArmSimEnv
from arm_sim.envs.configs import ArmEnvConfig


def _validate_n_envs(n_envs: int) -> None:
    """Raise if *n_envs* is less than one.

    Args:
        n_envs: Requested number of parallel environments.

    Raises:
        ValueError: When ``n_envs < 1``.
    """
    if n_envs < 1:
        raise ValueError("`n_envs` must be at least 1")


def _build_vector_env(cfg: ArmEnvConfig, n_envs: int, use_async: bool) -> gym.vector.VectorEnv:
    """Construct a Gymnasium vector environment.

    Args:
        cfg: Environment configuration forwarded to every copy.
        n_envs: Number of parallel copies.
        use_async: If *True*, use ``AsyncVectorEnv``; otherwise ``SyncVectorEnv``.

    Returns:
        A ``VectorEnv`` wrapping *n_envs* instances.
    """
    wrapper_cls = gym.vector.AsyncVectorEnv if use_async else gym.vector.SyncVectorEnv
    fns = [lambda c=cfg: ArmSimEnv(c) for _ in range(n_envs)]
    return wrapper_cls(fns)


def make_sim_env(
    cfg: ArmEnvConfig | None = None,
    n_envs: int = 1,
    use_async_envs: bool = False,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Create vectorised arm environments.

    Args:
        cfg: Environment configuration; defaults when *None*.
        n_envs: Number of parallel environments (default 1).
        use_async_envs: Whether to use ``AsyncVectorEnv`` (default *False*).

    Returns:
        ``{suite_name: {0: VectorEnv}}`` mapping.
    """
    resolved = cfg or ArmEnvConfig()
    _validate_n_envs(n_envs)
    vec = _build_vector_env(resolved, n_envs, use_async_envs)
    return {resolved.env_type: {0: vec}}
