#!/usr/bin/env python3
"""
Main entry point for the simulated arm position controller.

Acts as the fixed-period scheduler: builds an ``ArmController`` around the
simulated arm, reloads its tunable parameters, runs ``control_step`` and
``simulation_step`` once per 20 ms cycle, then stops the motor and
releases everything.

Usage examples::

    # Headless run, printing progress
    python run_sim.py --mode run --setpoint 45 --kp 40 --kd 4

    # Live Pygame display at wall-clock speed
    python run_sim.py --mode visualize

    # Record telemetry to ./sim_output as .npz + meta.json
    python run_sim.py --mode record --no-gravity

    # Drive the Gymnasium environment with the PD law
    python run_sim.py --mode env
"""

from __future__ import annotations

import argparse
import logging
import math
import time
from typing import List, Optional

from arm_sim.configs import ArmSimConfig
from arm_sim.control.arm_controller import ArmController
from arm_sim.control.feedback import FeedbackController
from arm_sim.control.preferences import InMemoryPreferences, JsonPreferences, PreferenceStore
from arm_sim.datasets.recorder import TelemetryRecorder
from arm_sim.envs.arm_env import ArmSimEnv
from arm_sim.envs.configs import ArmEnvConfig
from arm_sim.visualization.telemetry import TelemetrySink
from arm_sim.visualization.visualizer import ArmVisualizer

# ======================================================================
# Configuration builders
# ======================================================================


def _build_sim_config(args: argparse.Namespace) -> ArmSimConfig:
    """Construct an ``ArmSimConfig`` from parsed CLI arguments.

    Args:
        args: Namespace from ``argparse``.

    Returns:
        An ``ArmSimConfig`` instance.
    """
    return ArmSimConfig(
        setpoint_degrees=args.setpoint,
        kp=args.kp,
        kd=args.kd,
        noise_std=args.noise_std,
        simulate_gravity=not args.no_gravity,
        seed=args.seed,
    )


def _build_preferences(args: argparse.Namespace) -> PreferenceStore:
    """Return a JSON-backed store when ``--prefs`` is given, else in-memory."""
    if args.prefs:
        return JsonPreferences(args.prefs)
    return InMemoryPreferences()


# ======================================================================
# Control loop
# ======================================================================


def _run_cycles(
    controller: ArmController,
    cycles: int,
    realtime: bool,
    is_alive=lambda: True,
) -> None:
    """Call the periodic entry points *cycles* times.

    Args:
        controller: The controller to drive.
        cycles: Number of 20 ms cycles.
        realtime: Sleep so that each cycle takes one period of wall time.
        is_alive: Checked every cycle; the loop ends early when it is False.
    """
    period = controller.config.period_s
    report_every = max(1, int(round(1.0 / period)))
    next_tick = time.monotonic()
    for cycle in range(1, cycles + 1):
        controller.control_step()
        state = controller.simulation_step()
        if cycle % report_every == 0:
            print(
                f"t={cycle * period:6.2f}s angle={math.degrees(state.angle_rad):8.3f}deg "
                f"setpoint={controller.setpoint_degrees:7.2f}deg "
                f"voltage={controller.commanded_voltage:7.3f}V"
            )
        if not is_alive():
            print("Display closed, stopping.")
            break
        if realtime:
            next_tick += period
            time.sleep(max(0.0, next_tick - time.monotonic()))


def _run_controller(
    args: argparse.Namespace, telemetry: Optional[TelemetrySink] = None, is_alive=lambda: True
) -> ArmController:
    """Construct, run and tear down a simulated controller.

    Args:
        args: Parsed CLI arguments.
        telemetry: Optional sink handed to the controller.
        is_alive: Early-exit check forwarded to the loop.

    Returns:
        The (closed) controller, for final reporting.
    """
    cfg = _build_sim_config(args)
    with ArmController.simulated(
        cfg, preferences=_build_preferences(args), telemetry=telemetry
    ) as controller:
        controller.load_preferences()
        print(f"Setpoint: {controller.setpoint_degrees:.2f} deg | kp={controller.kp:.3f}")
        try:
            _run_cycles(controller, args.cycles, args.realtime, is_alive)
        finally:
            controller.stop()
    return controller


# ======================================================================
# Mode runners
# ======================================================================


def _run_headless(args: argparse.Namespace) -> None:
    """Run the loop with no telemetry sink."""
    controller = _run_controller(args)
    state = controller.sensor.state
    print(f"\nFinal angle: {math.degrees(state.angle_rad):.3f} deg")


def _run_visualize(args: argparse.Namespace) -> None:
    """Run the loop with the live Pygame display."""
    viz = ArmVisualizer()
    _run_controller(args, telemetry=viz, is_alive=lambda: viz.alive)


def _run_record(args: argparse.Namespace) -> None:
    """Run the loop and save the recorded telemetry."""
    recorder = TelemetryRecorder(output_dir=args.output_dir, save_on_close=True)
    _run_controller(args, telemetry=recorder)
    print(f"Telemetry recorded to {args.output_dir}")


def _run_env(args: argparse.Namespace) -> None:
    """Drive one ``ArmSimEnv`` episode with the PD law as the policy."""
    env_cfg = ArmEnvConfig(sim=_build_sim_config(args), seed=args.seed, episode_length=args.cycles)
    env = ArmSimEnv(env_cfg)
    feedback = FeedbackController(args.kp, args.kd, env_cfg.dt)
    obs, _ = env.reset(options={"setpoint_rad": math.radians(args.setpoint)})
    total_reward = 0.0
    steps = 0
    success = False
    try:
        while steps < env_cfg.episode_length:
            angle, _, setpoint = obs["agent_pos"]
            action = [feedback.compute(float(angle), float(setpoint))]
            obs, reward, terminated, truncated, info = env.step(action)
            steps += 1
            total_reward += reward
            success = info["is_success"]
            if terminated or truncated:
                break
    finally:
        env.close()
    print(f"Episode done after {steps} steps (reward={total_reward:.3f}, success={success})")


# ======================================================================
# CLI
# ======================================================================


def _positive_int(text: str) -> int:
    """``argparse`` type accepting integers of at least one."""
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list; ``sys.argv[1:]`` when *None*.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    defaults = ArmSimConfig()
    parser = argparse.ArgumentParser(description="Single-jointed arm position control simulator")
    parser.add_argument("--mode", choices=["run", "visualize", "record", "env"], default="run")
    parser.add_argument("--cycles", type=_positive_int, default=500)
    parser.add_argument("--setpoint", type=float, default=defaults.setpoint_degrees)
    parser.add_argument("--kp", type=float, default=defaults.kp)
    parser.add_argument("--kd", type=float, default=defaults.kd)
    parser.add_argument("--noise-std", type=float, default=defaults.noise_std)
    parser.add_argument("--no-gravity", action="store_true")
    parser.add_argument("--prefs", default=None, help="JSON file holding tunable values")
    parser.add_argument("--output-dir", default="./sim_output")
    parser.add_argument("--realtime", action="store_true")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "run": _run_headless,
    "visualize": _run_visualize,
    "record": _run_record,
    "env": _run_env,
}


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    args = _parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")
    print(f"Mode: {args.mode} | Cycles: {args.cycles} | Seed: {args.seed}")
    print("-" * 60)
    _MODE_DISPATCH[args.mode](args)
