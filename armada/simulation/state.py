"""Match state and the enumerations of the state machine.

GameSession is the single source of truth for one match: both boards,
the placement cursor, the pending shot and both turn-order tokens. It is
owned by the MatchController and only mutated from its tick loop.

Three orthogonal axes describe where the match is:
- Mode: chosen once at the main menu (who the opponent is).
- Phase: the UI/game state the player sees.
- NetState: how far the message exchange with the opponent has progressed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from armada.config import (
    AI_HIT_PROBABILITY_ADMIRAL,
    AI_HIT_PROBABILITY_CAPTAIN,
    AI_HIT_PROBABILITY_LIEUTENANT,
    GRID_COLS,
    GRID_ROWS,
    SHIP_LENGTHS,
)
from armada.simulation.board import Board


class Mode(Enum):
    NONE = auto()
    MULTIPLAYER = auto()
    SINGLEPLAYER = auto()


class Phase(Enum):
    RESET = auto()
    MAIN_MENU = auto()
    SETTINGS = auto()
    NEW_GAME = auto()
    PLACING = auto()
    WAITING_FOR_PEER = auto()
    MY_TURN = auto()
    WAITING_FOR_RESULT = auto()
    ENEMY_TURN = auto()
    OVER = auto()


class NetState(Enum):
    IDLE = auto()
    WAIT_READY = auto()
    DECIDE = auto()
    MY_TURN = auto()
    PEER_TURN = auto()
    WAIT_RESULT = auto()
    GAME_OVER = auto()


class MenuItem(Enum):
    MULTIPLAYER = auto()
    SINGLEPLAYER = auto()
    SETTINGS = auto()


class SettingsItem(Enum):
    SOUND = auto()
    DIFFICULTY = auto()
    BACK = auto()


class Difficulty(Enum):
    """AI rank. The value is the chance each shot is aimed at a ship."""
    LIEUTENANT = AI_HIT_PROBABILITY_LIEUTENANT
    CAPTAIN = AI_HIT_PROBABILITY_CAPTAIN
    ADMIRAL = AI_HIT_PROBABILITY_ADMIRAL

    @property
    def hit_probability(self) -> float:
        return self.value

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def next(self) -> Difficulty:
        members = list(Difficulty)
        return members[(members.index(self) + 1) % len(members)]


@dataclass(slots=True)
class Settings:
    """Player preferences. Survive a reset, not a restart."""
    sounds_enabled: bool = True
    difficulty: Difficulty = Difficulty.CAPTAIN


@dataclass(frozen=True, slots=True)
class PendingShot:
    row: int
    col: int


@dataclass
class GameSession:
    """Everything that describes one match.

    Attributes:
        own: Our board. `occupied` is our fleet, `attacked` the peer's shots.
        enemy: Our view of the peer. `attacked` is our shots, `occupied`
            the shots the peer confirmed as hits.
        ship_index: Index into SHIP_LENGTHS of the ship being placed.
        pending: The one shot we fired and have no result for yet.
        peer_token: The peer's READY token, None until one arrives. Any
            uint16 is valid; ours is never 0, so a 0 always loses.
        tied_tokens: Peer tokens discarded after a turn-order tie.
        tie_until: Tick until which a tied token is ignored. A peer still
            sending it after that never saw the tie and is taken at its word.
        notice_until: Tick until which an "invalid placement" notice blocks
            placement input.
        early_attack: The peer fired before the result of our pending shot
            arrived, so the turn comes back to us once it does.
        won: Outcome, meaningful only once the phase is OVER.
    """
    mode: Mode = Mode.NONE
    phase: Phase = Phase.RESET
    net_state: NetState = NetState.IDLE
    own: Board = field(default_factory=Board)
    enemy: Board = field(default_factory=Board)
    ship_index: int = 0
    horizontal: bool = True
    cursor_row: int = GRID_ROWS // 2
    cursor_col: int = GRID_COLS // 2
    pending: PendingShot | None = None
    self_token: int = 0
    peer_token: int | None = None
    tied_tokens: set[int] = field(default_factory=set)
    tie_until: int = 0
    over_taps: int = 0
    menu_item: MenuItem | None = None
    settings_item: SettingsItem = SettingsItem.SOUND
    notice_until: int = 0
    early_attack: bool = False
    won: bool = False

    def reset(self) -> None:
        """Return to a fresh match. The menu highlight is kept."""
        self.own.reset()
        self.enemy.reset()
        self.ship_index = 0
        self.horizontal = True
        self.recenter_cursor()
        self.net_state = NetState.IDLE
        self.pending = None
        self.self_token = 0
        self.peer_token = None
        self.tied_tokens.clear()
        self.tie_until = 0
        self.over_taps = 0
        self.notice_until = 0
        self.early_attack = False
        self.won = False

    @property
    def placing_done(self) -> bool:
        return self.ship_index >= len(SHIP_LENGTHS)

    @property
    def current_ship_length(self) -> int:
        return SHIP_LENGTHS[self.ship_index]

    def recenter_cursor(self) -> None:
        self.cursor_row = GRID_ROWS // 2
        self.cursor_col = GRID_COLS // 2

    def clamp_cursor_for_ship(self) -> None:
        """Pull the cursor back so the current ship stays on the grid."""
        length = self.current_ship_length
        if self.horizontal and self.cursor_col > GRID_COLS - length:
            self.cursor_col = GRID_COLS - length
        if not self.horizontal and self.cursor_row > GRID_ROWS - length:
            self.cursor_row = GRID_ROWS - length
