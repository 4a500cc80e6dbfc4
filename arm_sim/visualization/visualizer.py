"""
Real-time arm display.

Provides a Pygame-based window that renders the arm mechanism from the
telemetry the controller publishes, with a heads-up display of the
remaining fields (setpoint, voltage, battery voltage).

Classes:
    ArmVisualizer: Live telemetry sink drawing the arm.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import numpy as np

from arm_sim.utils.constants import COLOR_TEXT, DEFAULT_FPS
from arm_sim.visualization.canvas import render_arm_canvas
from arm_sim.visualization.telemetry import TelemetrySink


@dataclass
class ArmVisualizer(TelemetrySink):
    """Pygame window showing the simulated arm.

    Every ``publish`` call renders one frame and ticks the clock at
    ``fps``, so a loop publishing once per cycle runs at wall-clock speed.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        fps: Target frames per second.
        window_title: Caption displayed in the title bar.
        alive: False once the user has closed the window.
    """

    width: int = 384
    height: int = 384
    fps: int = DEFAULT_FPS
    window_title: str = "Arm Sim"
    alive: bool = True
    _screen: Optional[Any] = None
    _clock: Optional[Any] = None

    # ------------------------------------------------------------------
    # Initialisation / teardown
    # ------------------------------------------------------------------

    def init_display(self) -> None:
        """Create the Pygame window and clock."""
        import pygame

        pygame.init()
        self._screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.window_title)
        self._clock = pygame.time.Clock()

    def close(self) -> None:
        """Destroy the Pygame window and quit Pygame."""
        if self._screen is None:
            return
        import pygame

        pygame.quit()
        self._screen = None
        self._clock = None

    # ------------------------------------------------------------------
    # TelemetrySink
    # ------------------------------------------------------------------

    def publish(self, name: str, values: Mapping[str, float]) -> None:
        """Render the arm described by *values*.

        Args:
            name: Composite name, shown in the HUD.
            values: Must contain ``'angle_deg'``; ``'setpoint_deg'`` is drawn
                when present and every other field is listed in the HUD.
        """
        if not self.alive:
            return
        image = render_arm_canvas(
            values["angle_deg"],
            values.get("setpoint_deg"),
            height=self.height,
            width=self.width,
        )
        lines = [name] + [f"{key}: {value:.3f}" for key, value in values.items()]
        self.alive = self.render_frame(image, lines)

    # ------------------------------------------------------------------
    # Live rendering
    # ------------------------------------------------------------------

    def _image_to_surface(self, image: np.ndarray) -> Any:
        """Convert an (H, W, 3) uint8 NumPy image to a Pygame surface.

        Args:
            image: RGB image array.

        Returns:
            A Pygame ``Surface`` object.
        """
        import pygame

        return pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))

    def _draw_hud(self, lines: List[str]) -> None:
        """Draw one HUD line per entry of *lines*, top-left aligned."""
        import pygame

        font = pygame.font.SysFont("monospace", 14)
        for idx, text in enumerate(lines):
            rendered = font.render(text, True, COLOR_TEXT)
            self._screen.blit(rendered, (8, 4 + 18 * idx))

    def render_frame(self, image: np.ndarray, lines: Optional[List[str]] = None) -> bool:
        """Blit one frame to the window with HUD overlay.

        Args:
            image: (H, W, 3) uint8 RGB image of the window size.
            lines: HUD text lines.

        Returns:
            True if still running, False if user closed the window.
        """
        if self._screen is None:
            self.init_display()
        self._screen.blit(self._image_to_surface(image), (0, 0))
        self._draw_hud(lines or [])
        return self._flip_display()

    def _pump_events(self) -> bool:
        """Process Pygame events and return False if user quit."""
        import pygame

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
        return True

    def _flip_display(self) -> bool:
        """Update the Pygame display, pump events, and tick the clock.

        Returns:
            True if still running, False if user closed the window.
        """
        import pygame

        pygame.display.flip()
        alive = self._pump_events()
        if self._clock is not None:
            self._clock.tick(self.fps)
        return alive
