"""PyGame display: draws the panel onto a persistent canvas.

The controller draws incrementally and never asks for a full redraw, so
the canvas keeps everything drawn so far, like the frame memory of a
small LCD. Once per frame the canvas is scaled onto the window.
"""

from __future__ import annotations

import logging

import pygame

from armada.config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    COLOR_BLACK,
    COLOR_CYAN,
    COLOR_DARK_GRAY,
    COLOR_GREEN,
    COLOR_LIGHT_GRAY,
    COLOR_NAVY,
    COLOR_ORANGE,
    COLOR_RED,
    COLOR_WHITE,
    COLOR_YELLOW,
)
from armada.rendering.display import CellVisual, Display, Screen, Side
from armada.rendering.layout import cell_rect, grid_origin, grid_rect, header_rect, status_rect
from armada.simulation.state import MenuItem, Settings, SettingsItem

logger = logging.getLogger(__name__)

CELL_COLORS = {
    CellVisual.WATER: COLOR_NAVY,
    CellVisual.SHIP: COLOR_LIGHT_GRAY,
    CellVisual.HIT: COLOR_RED,
    CellVisual.MISS: COLOR_WHITE,
    CellVisual.FOG: COLOR_DARK_GRAY,
    CellVisual.PENDING: COLOR_YELLOW,
    CellVisual.GHOST_OK: COLOR_GREEN,
    CellVisual.GHOST_BAD: COLOR_ORANGE,
}

_TITLES = {
    Screen.MAIN_MENU: "ARMADA",
    Screen.SETTINGS: "Settings",
    Screen.PLACEMENT: "Place Your Ships",
    Screen.PLAY: "Battle",
    Screen.WIN: "You win!",
    Screen.LOSE: "You lose!",
}

# Menu buttons as (x, y, w, h) on the canvas
_MENU_BUTTONS = {
    MenuItem.MULTIPLAYER: (80, 80, 160, 36),
    MenuItem.SINGLEPLAYER: (80, 130, 160, 36),
    MenuItem.SETTINGS: (252, 130, 36, 36),
}
_MENU_LABELS = {
    MenuItem.MULTIPLAYER: "Multiplayer",
    MenuItem.SINGLEPLAYER: "Versus AI",
    MenuItem.SETTINGS: "*",
}
_SETTINGS_TOP_PX = 70
_SETTINGS_ROW_PX = 36


class PygameDisplay(Display):
    """Display backed by a 320x240 pygame surface."""

    def __init__(self) -> None:
        self._canvas = pygame.Surface((CANVAS_WIDTH, CANVAS_HEIGHT))
        self._font = pygame.font.SysFont("monospace", 12)
        self._large_font = pygame.font.SysFont("monospace", 20, bold=True)
        self._canvas.fill(COLOR_BLACK)

    @property
    def canvas(self) -> pygame.Surface:
        return self._canvas

    def blit_to(self, window: pygame.Surface) -> None:
        """Scale the canvas onto the whole window."""
        if window.get_size() == self._canvas.get_size():
            window.blit(self._canvas, (0, 0))
        else:
            pygame.transform.scale(self._canvas, window.get_size(), window)

    # --- Display ---

    def render_cell(self, row: int, col: int, side: Side, visual: CellVisual) -> None:
        x, y, w, h = cell_rect(row, col, side)
        pygame.draw.rect(self._canvas, CELL_COLORS[visual], (x, y, w, h))
        pygame.draw.rect(self._canvas, COLOR_BLACK, (x, y, w, h), 1)

    def render_cursor(self, row: int, col: int, side: Side) -> None:
        x, y, w, h = cell_rect(row, col, side)
        pygame.draw.rect(self._canvas, COLOR_CYAN, (x + 1, y + 1, w - 2, h - 2), 2)

    def show_status(self, text: str) -> None:
        rect = status_rect()
        self._canvas.fill(COLOR_BLACK, rect)
        surf = self._font.render(text, True, COLOR_WHITE)
        self._canvas.blit(surf, surf.get_rect(center=_center(rect)))

    def render_screen(self, screen: Screen) -> None:
        self._canvas.fill(COLOR_BLACK)
        title = self._large_font.render(_TITLES[screen], True, COLOR_WHITE)
        self._canvas.blit(title, title.get_rect(center=_center(header_rect())))

        if screen in (Screen.PLACEMENT, Screen.PLAY):
            self._draw_grid_label(Side.PLAYER, "Your Board")
            self._draw_grid_label(Side.ENEMY, "Enemy Board")
            for side in Side:
                pygame.draw.rect(self._canvas, COLOR_LIGHT_GRAY, grid_rect(side), 1)
        elif screen in (Screen.WIN, Screen.LOSE):
            color = COLOR_GREEN if screen == Screen.WIN else COLOR_RED
            banner = self._large_font.render(_TITLES[screen], True, color)
            self._canvas.blit(banner, banner.get_rect(center=(CANVAS_WIDTH // 2, CANVAS_HEIGHT // 2)))
        logger.debug("Screen: %s", screen.name)

    def render_menu(self, selected: MenuItem | None) -> None:
        for item, rect in _MENU_BUTTONS.items():
            fill = COLOR_CYAN if item == selected else COLOR_DARK_GRAY
            pygame.draw.rect(self._canvas, fill, rect)
            pygame.draw.rect(self._canvas, COLOR_WHITE, rect, 1)
            text_color = COLOR_BLACK if item == selected else COLOR_WHITE
            label = self._font.render(_MENU_LABELS[item], True, text_color)
            self._canvas.blit(label, label.get_rect(center=_center(rect)))

    def render_settings(self, settings: Settings, selected: SettingsItem) -> None:
        lines = {
            SettingsItem.SOUND: f"Sounds: {'On' if settings.sounds_enabled else 'Off'}",
            SettingsItem.DIFFICULTY: f"AI: {settings.difficulty.label}",
            SettingsItem.BACK: "Back",
        }
        for i, item in enumerate(SettingsItem):
            rect = (60, _SETTINGS_TOP_PX + i * _SETTINGS_ROW_PX, 200, 28)
            fill = COLOR_CYAN if item == selected else COLOR_DARK_GRAY
            pygame.draw.rect(self._canvas, fill, rect)
            text_color = COLOR_BLACK if item == selected else COLOR_WHITE
            label = self._font.render(lines[item], True, text_color)
            self._canvas.blit(label, label.get_rect(center=_center(rect)))

    # --- Helpers ---

    def _draw_grid_label(self, side: Side, text: str) -> None:
        x, y = grid_origin(side)
        surf = self._font.render(text, True, COLOR_LIGHT_GRAY)
        self._canvas.blit(surf, (x + 4, y - surf.get_height() - 2))


def _center(rect: tuple[int, int, int, int]) -> tuple[int, int]:
    x, y, w, h = rect
    return x + w // 2, y + h // 2
