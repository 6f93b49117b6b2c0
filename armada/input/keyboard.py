"""Keyboard stand-in for the analog stick and its button.

Arrow keys / WASD push the matching axis to its end stop; Space or Enter
is the button. Reads the live key state, so it must be polled after the
frame's events have been pumped.
"""

from __future__ import annotations

import pygame

from armada.config import JOY_CENTER_RAW, JOY_FULL_RAW
from armada.input.handler import AXIS_X, AXIS_Y, InputSource

_BUTTON_KEYS = (pygame.K_SPACE, pygame.K_RETURN)


class KeyboardInput(InputSource):
    """Maps the keyboard onto the raw stick interface."""

    def read_axis(self, axis: int) -> int:
        keys = pygame.key.get_pressed()
        if axis == AXIS_X:
            low = keys[pygame.K_LEFT] or keys[pygame.K_a]
            high = keys[pygame.K_RIGHT] or keys[pygame.K_d]
        elif axis == AXIS_Y:
            low = keys[pygame.K_UP] or keys[pygame.K_w]
            high = keys[pygame.K_DOWN] or keys[pygame.K_s]
        else:
            raise ValueError(f"unknown axis {axis}")

        if low and not high:
            return 0
        if high and not low:
            return JOY_FULL_RAW
        return JOY_CENTER_RAW

    def button_pressed(self) -> bool:
        keys = pygame.key.get_pressed()
        return any(keys[k] for k in _BUTTON_KEYS)
