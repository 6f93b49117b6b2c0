"""Desktop driver and fixed-tick game loop.

Owns the window, clock and every collaborator of the MatchController.
Logical time runs at one tick per millisecond, decoupled from the render
frame rate: each frame accumulates the elapsed milliseconds and runs that
many controller steps, then scales the canvas onto the window.
"""

from __future__ import annotations

import logging
import time

import pygame

from armada.audio.buzzer import Buzzer
from armada.config import FPS, MAX_TICKS_PER_FRAME, TICK_DURATION_MS
from armada.input.handler import AXIS_X, AXIS_Y, InputSource
from armada.input.keyboard import KeyboardInput
from armada.networking.peer import Transport
from armada.rendering.renderer import PygameDisplay
from armada.simulation.ai import LocalOpponent
from armada.simulation.controller import MatchController
from armada.simulation.state import GameSession, Settings

logger = logging.getLogger(__name__)


def make_seed_source(source: InputSource):
    """Entropy for the AI: two stick readings mixed with a fast clock."""
    def seed() -> int:
        x = source.read_axis(AXIS_X)
        y = source.read_axis(AXIS_Y)
        return (x << 10 | y) ^ time.perf_counter_ns()
    return seed


class Game:
    """Main game object. Owns the session, the opponents and the window."""

    def __init__(
        self,
        window: pygame.Surface,
        channel: Transport,
        settings: Settings,
    ) -> None:
        self._window = window
        self._channel = channel
        self._settings = settings
        self._clock = pygame.time.Clock()

        self._input = KeyboardInput()
        self._display = PygameDisplay()
        self._buzzer = Buzzer(settings)
        self._session = GameSession()
        self._opponent = LocalOpponent(
            self._session.own, settings, make_seed_source(self._input),
        )
        self._controller = MatchController(
            self._session,
            channel=channel,
            opponent=self._opponent,
            display=self._display,
            sounds=self._buzzer,
            input_source=self._input,
            settings=settings,
        )

        self._tick_accumulator_ms = 0
        self._last_frame_time_ms = pygame.time.get_ticks()

    @property
    def controller(self) -> MatchController:
        return self._controller

    def run(self) -> None:
        """Main loop. Returns when the window is closed or Escape pressed."""
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
            if not running:
                break

            now_ms = pygame.time.get_ticks()
            self._tick_accumulator_ms += now_ms - self._last_frame_time_ms
            self._last_frame_time_ms = now_ms

            ticks_to_run = min(
                self._tick_accumulator_ms // TICK_DURATION_MS, MAX_TICKS_PER_FRAME,
            )
            for _ in range(ticks_to_run):
                self._controller.step()
            self._tick_accumulator_ms -= ticks_to_run * TICK_DURATION_MS

            # Cap accumulator to prevent spiral of death
            if self._tick_accumulator_ms > TICK_DURATION_MS * MAX_TICKS_PER_FRAME:
                self._tick_accumulator_ms = TICK_DURATION_MS * MAX_TICKS_PER_FRAME

            self._display.blit_to(self._window)
            pygame.display.flip()
            self._clock.tick(FPS)

        logger.info("Shutting down")
        self._channel.close()
