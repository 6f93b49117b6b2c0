"""Panel geometry in canvas pixels.

Two 10x10 grids side by side under a header band, with a status line
below them. Pure arithmetic, no PyGame dependency, so it can be tested
headless.
"""

from __future__ import annotations

from armada.config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    CELL_SIZE_PX,
    ENEMY_GRID_X_PX,
    GRID_COLS,
    GRID_ROWS,
    GRID_Y_PX,
    HEADER_HEIGHT_PX,
    PLAYER_GRID_X_PX,
    STATUS_Y_PX,
)
from armada.rendering.display import Side

Rect = tuple[int, int, int, int]  # x, y, width, height

STATUS_HEIGHT_PX = 20


def grid_origin(side: Side) -> tuple[int, int]:
    """Top-left pixel of a side's grid."""
    x = PLAYER_GRID_X_PX if side == Side.PLAYER else ENEMY_GRID_X_PX
    return x, GRID_Y_PX


def cell_rect(row: int, col: int, side: Side) -> Rect:
    """Pixel rectangle covering one cell."""
    if not (0 <= row < GRID_ROWS and 0 <= col < GRID_COLS):
        raise IndexError(f"cell ({row}, {col}) is off the grid")
    x0, y0 = grid_origin(side)
    return x0 + col * CELL_SIZE_PX, y0 + row * CELL_SIZE_PX, CELL_SIZE_PX, CELL_SIZE_PX


def grid_rect(side: Side) -> Rect:
    x0, y0 = grid_origin(side)
    return x0, y0, GRID_COLS * CELL_SIZE_PX, GRID_ROWS * CELL_SIZE_PX


def header_rect() -> Rect:
    return 0, 0, CANVAS_WIDTH, HEADER_HEIGHT_PX


def status_rect() -> Rect:
    return 0, STATUS_Y_PX, CANVAS_WIDTH, STATUS_HEIGHT_PX


def window_size(scale: int) -> tuple[int, int]:
    return CANVAS_WIDTH * scale, CANVAS_HEIGHT * scale
