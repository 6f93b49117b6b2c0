"""Display interface consumed by the match controller.

Every call is fire-and-forget: the controller draws incrementally, the
way a panel with its own frame memory is driven, and never reads
anything back. PygameDisplay is the real implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto

from armada.simulation.state import MenuItem, Settings, SettingsItem


class Side(Enum):
    PLAYER = auto()
    ENEMY = auto()


class CellVisual(Enum):
    WATER = auto()      # own board, empty
    SHIP = auto()       # own board, ship segment
    HIT = auto()
    MISS = auto()
    FOG = auto()        # enemy board, not fired at yet
    PENDING = auto()    # enemy board, shot awaiting its result
    GHOST_OK = auto()   # placement preview, fits
    GHOST_BAD = auto()  # placement preview, blocked


class Screen(Enum):
    MAIN_MENU = auto()
    SETTINGS = auto()
    PLACEMENT = auto()
    PLAY = auto()
    WIN = auto()
    LOSE = auto()


class Display(ABC):
    """Rendering collaborator."""

    @abstractmethod
    def render_cell(self, row: int, col: int, side: Side, visual: CellVisual) -> None:
        ...

    @abstractmethod
    def render_cursor(self, row: int, col: int, side: Side) -> None:
        ...

    @abstractmethod
    def show_status(self, text: str) -> None:
        ...

    @abstractmethod
    def render_screen(self, screen: Screen) -> None:
        """Clear and draw the static chrome of a screen."""
        ...

    @abstractmethod
    def render_menu(self, selected: MenuItem | None) -> None:
        """Redraw the main menu buttons with one highlighted."""
        ...

    @abstractmethod
    def render_settings(self, settings: Settings, selected: SettingsItem) -> None:
        ...
