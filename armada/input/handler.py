"""Input handler: turns raw stick and button readings into per-tick events.

The stick is read as two analog axes (0..1023, centred on 512) and
mapped to one direction against a dead zone, with a repeat delay so that
holding the stick moves the cursor at a steady pace. The button is
classified three ways: the press edge, a short press (released early) and
a long press (released late, or held long enough).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from armada.config import (
    HOLD_LIMIT_TICKS,
    JOY_MAX_RAW,
    JOY_MIN_RAW,
    JOY_REPEAT_DELAY_TICKS,
    LONG_PRESS_TICKS,
)

AXIS_X = 0
AXIS_Y = 1


class Direction(Enum):
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()

    @property
    def delta(self) -> tuple[int, int]:
        """(d_row, d_col) on the grid."""
        return _DELTAS[self]


_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


class InputSource(ABC):
    """Raw input collaborator: an analog stick with a push button."""

    @abstractmethod
    def read_axis(self, axis: int) -> int:
        """Raw reading for AXIS_X or AXIS_Y, 0..1023."""
        ...

    @abstractmethod
    def button_pressed(self) -> bool:
        ...


@dataclass(frozen=True, slots=True)
class InputFrame:
    """What happened on one tick."""
    direction: Direction | None = None
    pressed: bool = False       # button went down this tick
    short_press: bool = False   # released before LONG_PRESS_TICKS
    long_press: bool = False    # held LONG_PRESS_TICKS or more


def axis_direction(x: int, y: int) -> Direction | None:
    """Map raw axes to a direction. Vertical wins over horizontal."""
    if y < JOY_MIN_RAW:
        return Direction.UP
    if y > JOY_MAX_RAW:
        return Direction.DOWN
    if x < JOY_MIN_RAW:
        return Direction.LEFT
    if x > JOY_MAX_RAW:
        return Direction.RIGHT
    return None


class InputHandler:
    """Polls an InputSource once per tick and debounces it into events."""

    def __init__(self, source: InputSource) -> None:
        self._source = source
        self._next_move_allowed = 0
        self._was_down = False
        self._down_since = 0
        self._resolved = False  # the current press already produced its event

    def poll(self, tick: int) -> InputFrame:
        direction = axis_direction(
            self._source.read_axis(AXIS_X), self._source.read_axis(AXIS_Y),
        )
        if direction is not None:
            if tick >= self._next_move_allowed:
                self._next_move_allowed = tick + JOY_REPEAT_DELAY_TICKS
            else:
                direction = None

        down = self._source.button_pressed()
        pressed = short_press = long_press = False

        if down and not self._was_down:
            pressed = True
            self._down_since = tick
            self._resolved = False
        elif down and not self._resolved:
            if tick - self._down_since >= HOLD_LIMIT_TICKS:
                long_press = True
                self._resolved = True
        elif not down and self._was_down and not self._resolved:
            if tick - self._down_since >= LONG_PRESS_TICKS:
                long_press = True
            else:
                short_press = True
            self._resolved = True

        self._was_down = down
        return InputFrame(direction, pressed, short_press, long_press)

    def consume(self) -> None:
        """Discard the rest of the current press.

        Used when a press edge already triggered something (like leaving
        the menu) so its release is not read again as a placement.
        """
        self._resolved = True

    def allow_move_now(self, tick: int) -> None:
        """Lift the repeat delay, e.g. when a turn starts."""
        self._next_move_allowed = tick
