"""
NumPy rendering of the arm mechanism.

Draws a fixed tower and the rotating arm, pivoting at the centre of the
image, onto an RGB canvas.  Used by both the Gymnasium environment's
``render`` and the live Pygame display.

Functions:
    render_arm_canvas: Render the arm at a given angle.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from arm_sim.utils.constants import COLOR_ARM, COLOR_BACKGROUND, COLOR_SETPOINT, COLOR_TOWER


def _segment_mask(
    shape: Tuple[int, int], start: Tuple[float, float], end: Tuple[float, float], thickness: float
) -> np.ndarray:
    """Boolean mask of pixels within *thickness* / 2 of a segment.

    Args:
        shape: ``(height, width)`` of the canvas.
        start: ``(col, row)`` of the first endpoint.
        end: ``(col, row)`` of the second endpoint.
        thickness: Line width in pixels.

    Returns:
        ``(H, W)`` boolean array.
    """
    h, w = shape
    rr, cc = np.ogrid[:h, :w]
    x0, y0 = start
    dx, dy = end[0] - x0, end[1] - y0
    length_sq = max(dx * dx + dy * dy, 1e-9)
    t = np.clip(((cc - x0) * dx + (rr - y0) * dy) / length_sq, 0.0, 1.0)
    dist_sq = (cc - (x0 + t * dx)) ** 2 + (rr - (y0 + t * dy)) ** 2
    return dist_sq <= (thickness / 2.0) ** 2


def _arm_tip(pivot: Tuple[float, float], length: float, angle_deg: float) -> Tuple[float, float]:
    """Image coordinates of the arm tip; angles are counter-clockwise from +x."""
    theta = math.radians(angle_deg)
    return pivot[0] + length * math.cos(theta), pivot[1] - length * math.sin(theta)


def render_arm_canvas(
    angle_deg: float,
    setpoint_deg: Optional[float] = None,
    height: int = 384,
    width: int = 384,
) -> np.ndarray:
    """Render the arm mechanism as an RGB image.

    Args:
        angle_deg: Arm angle in degrees.
        setpoint_deg: Optional target angle, drawn as a thin grey line.
        height: Image height in pixels.
        width: Image width in pixels.

    Returns:
        (H, W, 3) uint8 NumPy array.
    """
    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    canvas[:] = COLOR_BACKGROUND
    scale = min(height, width)
    pivot = (width / 2.0, height / 2.0)
    arm_length = 0.45 * scale
    tower_base = (pivot[0], pivot[1] + 0.5 * scale)
    canvas[_segment_mask((height, width), pivot, tower_base, 0.03 * scale)] = COLOR_TOWER
    if setpoint_deg is not None:
        target = _arm_tip(pivot, arm_length, setpoint_deg)
        canvas[_segment_mask((height, width), pivot, target, 0.008 * scale)] = COLOR_SETPOINT
    tip = _arm_tip(pivot, arm_length, angle_deg)
    canvas[_segment_mask((height, width), pivot, tip, 0.03 * scale)] = COLOR_ARM
    return canvas
