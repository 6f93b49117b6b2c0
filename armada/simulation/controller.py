"""Match controller: the state machine behind one Armada match.

Manages the match lifecycle: RESET -> MAIN_MENU -> NEW_GAME -> PLACING ->
WAITING_FOR_PEER -> turns -> OVER. One call to step() is one tick:

1. poll one inbound line from the active transport and apply it,
2. advance the retry engine (retransmissions, peer timeout),
3. run the handler of the current phase against this tick's input.

All match state lives in the GameSession and is only touched here, from
the single tick loop, so nothing needs locking.

The opponent is either the real channel or the local AI, chosen by Mode.
Both are Transports and both answer with protocol lines, so the handlers
below never know which one they are talking to.
"""

from __future__ import annotations

import logging
from typing import Callable

from armada.audio.sounds import AudioEvent, SoundPlayer
from armada.config import (
    FLEET_CELLS,
    GRID_COLS,
    GRID_ROWS,
    INVALID_NOTICE_TICKS,
    READY_RESEND_TICKS,
)
from armada.input.handler import Direction, InputHandler, InputSource
from armada.networking.peer import Transport
from armada.networking.protocol import Attack, Message, Ready, Result
from armada.networking.retry import RetryAction, RetryEngine
from armada.networking.serialization import decode_line, encode_line
from armada.rendering.display import CellVisual, Display, Screen, Side
from armada.simulation.board import CellState
from armada.simulation.state import (
    GameSession,
    MenuItem,
    Mode,
    NetState,
    PendingShot,
    Phase,
    Settings,
    SettingsItem,
)

logger = logging.getLogger(__name__)

STATUS_PLACE = "Use stick to place"
STATUS_INVALID = "Invalid placement!"
STATUS_SEARCHING = "Searching peer..."
STATUS_TIE = "Tie! Searching peer..."
STATUS_YOUR_TURN = "Your turn"
STATUS_ENEMY_TURN = "Enemy turn"
STATUS_WAITING = "Waiting for result..."
STATUS_WIN = "You win! - tap twice"
STATUS_LOSE = "You lose - tap twice"
STATUS_CONTINUE = "Press 2x to continue!"
STATUS_PEER_LOST = "Peer lost - reset"

_OWN_VISUALS = {
    CellState.EMPTY: CellVisual.WATER,
    CellState.SHIP: CellVisual.SHIP,
    CellState.HIT: CellVisual.HIT,
    CellState.MISS: CellVisual.MISS,
}

# Main menu layout: two stacked buttons, the settings gear right of the lower one
_MENU_MOVES: dict[tuple[MenuItem | None, Direction], MenuItem] = {
    (None, Direction.UP): MenuItem.MULTIPLAYER,
    (None, Direction.DOWN): MenuItem.SINGLEPLAYER,
    (MenuItem.MULTIPLAYER, Direction.DOWN): MenuItem.SINGLEPLAYER,
    (MenuItem.SINGLEPLAYER, Direction.UP): MenuItem.MULTIPLAYER,
    (MenuItem.SINGLEPLAYER, Direction.RIGHT): MenuItem.SETTINGS,
    (MenuItem.SETTINGS, Direction.LEFT): MenuItem.SINGLEPLAYER,
}

_SETTINGS_ORDER = list(SettingsItem)


class MatchController:
    """Owns the session and drives it one tick at a time.

    Args:
        session: Match state, exclusively owned from here on.
        channel: Transport to a remote peer (multiplayer).
        opponent: Transport to the local AI (single player).
        display: Rendering collaborator.
        sounds: Audio collaborator.
        input_source: Stick and button.
        settings: Shared preferences (sound, AI difficulty).
    """

    def __init__(
        self,
        session: GameSession,
        channel: Transport,
        opponent: Transport,
        display: Display,
        sounds: SoundPlayer,
        input_source: InputSource,
        settings: Settings,
    ) -> None:
        self.session = session
        self._channel = channel
        self._opponent = opponent
        self._display = display
        self._sounds = sounds
        self._input = InputHandler(input_source)
        self._settings = settings
        self._retry = RetryEngine()
        self.tick = 0

        self._handlers: dict[Phase, Callable[[], None]] = {
            Phase.RESET: self._handle_reset,
            Phase.MAIN_MENU: self._handle_main_menu,
            Phase.SETTINGS: self._handle_settings,
            Phase.NEW_GAME: self._handle_new_game,
            Phase.PLACING: self._handle_placing,
            Phase.WAITING_FOR_PEER: self._handle_waiting_for_peer,
            Phase.MY_TURN: self._handle_my_turn,
            Phase.WAITING_FOR_RESULT: self._handle_passive,
            Phase.ENEMY_TURN: self._handle_passive,
            Phase.OVER: self._handle_over,
        }

    @property
    def transport(self) -> Transport:
        """The opponent messages currently go to and come from."""
        if self.session.mode == Mode.SINGLEPLAYER:
            return self._opponent
        return self._channel

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def step(self) -> None:
        """Advance the match by one tick."""
        self._net_tick()
        self._handlers[self.session.phase]()
        self.tick += 1

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.step()

    def _net_tick(self) -> None:
        line = self.transport.poll()
        if line is not None:
            self.handle_line(line)

        for action in self._retry.tick(self.session.net_state):
            if action is RetryAction.RESEND_READY:
                self._send(Ready(self.session.self_token))
            elif action is RetryAction.RESEND_ATTACK:
                pending = self.session.pending
                if pending is not None:
                    self._send(Attack(pending.row, pending.col))
            elif action is RetryAction.PEER_LOST:
                self._peer_lost()

    def _send(self, message: Message) -> None:
        logger.debug("-> %s", encode_line(message))
        self.transport.send(message)

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    def handle_line(self, line: str) -> None:
        """Decode one inbound line and apply it. Bad lines are dropped."""
        try:
            message = decode_line(line)
        except ValueError as e:
            logger.debug("Dropping line %r: %s", line, e)
            return
        logger.debug("<- %s", line)
        self._retry.on_traffic()

        if isinstance(message, Ready):
            self._on_ready(message.token)
        elif isinstance(message, Attack):
            self._on_attack(message.row, message.col)
        elif isinstance(message, Result):
            self._on_result(message.row, message.col, message.hit)

    def _on_ready(self, token: int) -> None:
        s = self.session
        if token in s.tied_tokens and self.tick < s.tie_until:
            return
        s.peer_token = token
        if s.net_state == NetState.WAIT_READY:
            s.net_state = NetState.DECIDE

    def _on_attack(self, row: int, col: int) -> None:
        s = self.session
        if s.net_state == NetState.IDLE:
            logger.debug("Attack at (%d, %d) before our fleet exists, dropped", row, col)
            return
        if s.net_state in (NetState.WAIT_READY, NetState.DECIDE):
            # The peer only fires once it has decided it moves first
            logger.info("Peer fired before turn order was settled here; peer starts")
            self._begin_play(i_start=False)

        first_time = s.own.mark_attacked(row, col)
        hit = s.own.occupied.get(row, col)
        self._send(Result(row, col, hit))
        if not first_time or s.net_state == NetState.GAME_OVER:
            logger.debug("Repeat attack at (%d, %d), result resent", row, col)
            return

        self._display.render_cell(row, col, Side.PLAYER, _OWN_VISUALS[s.own.cell_state(row, col)])
        if hit:
            s.own.remaining -= 1
            if s.own.remaining == 0:
                self._game_over(won=False)
                return

        self._sounds.play(AudioEvent.ENEMY_ATTACK, hit)
        if s.pending is not None:
            # Our result is still in flight; the turn comes back when it lands
            s.early_attack = True
            return
        s.net_state = NetState.MY_TURN
        s.phase = Phase.MY_TURN
        self._input.allow_move_now(self.tick)
        self._display.render_cursor(s.cursor_row, s.cursor_col, Side.ENEMY)
        self._display.show_status(STATUS_YOUR_TURN)

    def _on_result(self, row: int, col: int, hit: bool) -> None:
        s = self.session
        pending = s.pending
        if pending is None:
            logger.debug("Stray result for (%d, %d), ignored", row, col)
            return
        if (row, col) != (pending.row, pending.col):
            logger.debug("Result for (%d, %d) does not match pending shot, ignored", row, col)
            return

        s.pending = None
        self._sounds.play(AudioEvent.ATTACK, hit)
        if hit:
            s.enemy.occupied.set(row, col)
            s.enemy.remaining -= 1
        self._display.render_cell(row, col, Side.ENEMY, self._enemy_visual(row, col))
        self._display.render_cursor(s.cursor_row, s.cursor_col, Side.ENEMY)

        if hit and s.enemy.remaining == 0:
            self._game_over(won=True)
            return
        if s.early_attack:
            s.early_attack = False
            s.net_state = NetState.MY_TURN
            s.phase = Phase.MY_TURN
            self._input.allow_move_now(self.tick)
            self._display.show_status(STATUS_YOUR_TURN)
            return
        s.net_state = NetState.PEER_TURN
        s.phase = Phase.ENEMY_TURN
        self._retry.peer.reset()
        self._display.show_status(STATUS_ENEMY_TURN)

    # ------------------------------------------------------------------
    # Player operations
    # ------------------------------------------------------------------

    def start_game(self, mode: Mode) -> None:
        """Leave the menu for a new match against the given opponent."""
        self.session.mode = mode
        self.session.phase = Phase.NEW_GAME
        logger.info("Starting %s game", mode.name.lower())

    def move_cursor(self, direction: Direction) -> None:
        s = self.session
        d_row, d_col = direction.delta
        row = min(max(s.cursor_row + d_row, 0), GRID_ROWS - 1)
        col = min(max(s.cursor_col + d_col, 0), GRID_COLS - 1)
        if (row, col) == (s.cursor_row, s.cursor_col):
            return

        if s.phase == Phase.PLACING:
            self._draw_ghost(show=False)
            s.cursor_row, s.cursor_col = row, col
            s.clamp_cursor_for_ship()
            self._draw_ghost(show=True)
        elif s.phase == Phase.MY_TURN:
            old_row, old_col = s.cursor_row, s.cursor_col
            s.cursor_row, s.cursor_col = row, col
            self._display.render_cell(
                old_row, old_col, Side.ENEMY, self._enemy_visual(old_row, old_col),
            )
            self._display.render_cursor(row, col, Side.ENEMY)

    def toggle_orientation(self) -> None:
        s = self.session
        self._draw_ghost(show=False)
        s.horizontal = not s.horizontal
        s.clamp_cursor_for_ship()
        self._draw_ghost(show=True)

    def place_current_ship(self) -> bool:
        """Place the current ship at the cursor. Returns False if it won't fit."""
        s = self.session
        length = s.current_ship_length
        if not s.own.can_place(s.cursor_row, s.cursor_col, length, s.horizontal):
            self._draw_ghost(show=True)
            self._display.show_status(STATUS_INVALID)
            s.notice_until = self.tick + INVALID_NOTICE_TICKS
            return False

        self._draw_ghost(show=False)
        ship = s.own.place(s.cursor_row, s.cursor_col, length, s.horizontal)
        for row, col in ship.cells():
            self._display.render_cell(row, col, Side.PLAYER, CellVisual.SHIP)
        s.ship_index += 1

        if s.placing_done:
            self._finish_placement()
        else:
            s.clamp_cursor_for_ship()
            self._draw_ghost(show=True)
        return True

    def fire(self) -> bool:
        """Fire at the cursor. Returns False if firing isn't possible now."""
        s = self.session
        if s.phase != Phase.MY_TURN or s.net_state != NetState.MY_TURN:
            return False
        row, col = s.cursor_row, s.cursor_col
        if not s.enemy.mark_attacked(row, col):
            return False

        s.pending = PendingShot(row, col)
        self._display.render_cell(row, col, Side.ENEMY, CellVisual.PENDING)
        self._send(Attack(row, col))
        self._retry.attack.reset()
        s.net_state = NetState.WAIT_RESULT
        s.phase = Phase.WAITING_FOR_RESULT
        self._display.show_status(STATUS_WAITING)
        return True

    def confirm_over(self) -> None:
        """One tap on the game-over screen. The second one resets."""
        s = self.session
        s.over_taps += 1
        if s.over_taps >= 2:
            self._reset_match()
            return
        self._display.show_status(STATUS_CONTINUE)

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    def _handle_reset(self) -> None:
        self._reset_match()

    def _handle_main_menu(self) -> None:
        s = self.session
        frame = self._input.poll(self.tick)
        if frame.direction is not None:
            item = _MENU_MOVES.get((s.menu_item, frame.direction), s.menu_item)
            if item != s.menu_item:
                s.menu_item = item
                self._display.render_menu(item)

        if not frame.pressed or s.menu_item is None:
            return
        self._input.consume()
        if s.menu_item == MenuItem.SETTINGS:
            s.phase = Phase.SETTINGS
            self._display.render_screen(Screen.SETTINGS)
            self._display.render_settings(self._settings, s.settings_item)
        elif s.menu_item == MenuItem.MULTIPLAYER:
            self.start_game(Mode.MULTIPLAYER)
        else:
            self.start_game(Mode.SINGLEPLAYER)

    def _handle_settings(self) -> None:
        s = self.session
        frame = self._input.poll(self.tick)
        if frame.direction in (Direction.UP, Direction.DOWN):
            step = -1 if frame.direction == Direction.UP else 1
            index = _SETTINGS_ORDER.index(s.settings_item) + step
            s.settings_item = _SETTINGS_ORDER[index % len(_SETTINGS_ORDER)]
            self._display.render_settings(self._settings, s.settings_item)

        if not frame.pressed:
            return
        self._input.consume()
        if s.settings_item == SettingsItem.SOUND:
            self._settings.sounds_enabled = not self._settings.sounds_enabled
            logger.info("Sounds %s", "on" if self._settings.sounds_enabled else "off")
        elif s.settings_item == SettingsItem.DIFFICULTY:
            self._settings.difficulty = self._settings.difficulty.next()
            logger.info("AI difficulty: %s", self._settings.difficulty.label)
        else:
            s.phase = Phase.MAIN_MENU
            self._draw_main_menu()
            return
        self._display.render_settings(self._settings, s.settings_item)

    def _handle_new_game(self) -> None:
        self.transport.reset()
        self._draw_placement_screen()
        self.session.phase = Phase.PLACING

    def _handle_placing(self) -> None:
        s = self.session
        frame = self._input.poll(self.tick)
        if s.notice_until:
            if self.tick < s.notice_until:
                if frame.pressed:
                    self._input.consume()
                return
            s.notice_until = 0
            self._display.show_status(STATUS_PLACE)

        if frame.direction is not None:
            self.move_cursor(frame.direction)
        if frame.long_press:
            self.toggle_orientation()
        elif frame.short_press:
            self.place_current_ship()

    def _handle_waiting_for_peer(self) -> None:
        self._input.poll(self.tick)
        s = self.session
        if s.net_state != NetState.DECIDE or s.peer_token is None:
            return
        if s.self_token == s.peer_token:
            self._retry_after_tie()
        else:
            self._begin_play(i_start=s.self_token > s.peer_token)

    def _handle_my_turn(self) -> None:
        frame = self._input.poll(self.tick)
        if frame.direction is not None:
            self.move_cursor(frame.direction)
        if frame.pressed:
            self.fire()

    def _handle_passive(self) -> None:
        # Keep tracking the button so a press held across turns isn't an edge
        self._input.poll(self.tick)

    def _handle_over(self) -> None:
        if self._input.poll(self.tick).pressed:
            self.confirm_over()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _reset_match(self) -> None:
        s = self.session
        s.reset()
        self._retry.reset()
        s.phase = Phase.MAIN_MENU
        self._draw_main_menu()

    def _finish_placement(self) -> None:
        s = self.session
        s.self_token = self._fresh_token()
        # A READY that arrived while we were still placing is already usable
        s.net_state = NetState.WAIT_READY if s.peer_token is None else NetState.DECIDE
        s.phase = Phase.WAITING_FOR_PEER
        self._retry.reset()
        self._send(Ready(s.self_token))
        self._display.show_status(STATUS_SEARCHING)
        logger.info("Fleet placed, token %d", s.self_token)

    def _retry_after_tie(self) -> None:
        """Equal tokens: discard the tied value on both sides and redraw."""
        s = self.session
        tied = s.self_token
        s.tied_tokens.add(tied)
        s.tie_until = self.tick + READY_RESEND_TICKS
        s.self_token = self._fresh_token()
        s.peer_token = None
        s.net_state = NetState.WAIT_READY
        self._retry.ready.reset()
        self._send(Ready(s.self_token))
        self._display.show_status(STATUS_TIE)
        logger.info("Token tie at %d, redrew %d", tied, s.self_token)

    def _begin_play(self, i_start: bool) -> None:
        s = self.session
        s.enemy.remaining = FLEET_CELLS
        if i_start:
            s.net_state = NetState.MY_TURN
            s.phase = Phase.MY_TURN
        else:
            s.net_state = NetState.PEER_TURN
            s.phase = Phase.ENEMY_TURN
            self._retry.peer.reset()
        s.recenter_cursor()
        self._retry.start_grace()
        self._input.allow_move_now(self.tick)

        self._draw_play_screen()
        self._display.render_cursor(s.cursor_row, s.cursor_col, Side.ENEMY)
        self._display.show_status(STATUS_YOUR_TURN if i_start else STATUS_ENEMY_TURN)
        logger.info(
            "Turn order decided (us %d, peer %d): %s first",
            s.self_token, s.peer_token, "we move" if i_start else "peer moves",
        )

    def _game_over(self, won: bool) -> None:
        s = self.session
        s.net_state = NetState.GAME_OVER
        s.phase = Phase.OVER
        s.pending = None
        s.early_attack = False
        s.over_taps = 0
        s.won = won
        self._display.render_screen(Screen.WIN if won else Screen.LOSE)
        self._display.show_status(STATUS_WIN if won else STATUS_LOSE)
        self._sounds.play(AudioEvent.WIN if won else AudioEvent.LOSE)
        logger.info("Game over: %s", "we won" if won else "we lost")

    def _peer_lost(self) -> None:
        logger.warning("No word from peer in %d ticks, resetting", self._retry.peer.interval)
        self._reset_match()
        self._display.show_status(STATUS_PEER_LOST)

    def _fresh_token(self) -> int:
        """Token from the tick counter: nonzero, not tied, not the current one."""
        s = self.session
        token = self.tick & 0xFFFF
        while token == 0 or token == s.self_token or token in s.tied_tokens:
            token = (token + 1) & 0xFFFF
        return token

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _enemy_visual(self, row: int, col: int) -> CellVisual:
        s = self.session
        if not s.enemy.attacked.get(row, col):
            return CellVisual.FOG
        if s.pending is not None and (row, col) == (s.pending.row, s.pending.col):
            return CellVisual.PENDING
        return CellVisual.HIT if s.enemy.occupied.get(row, col) else CellVisual.MISS

    def _draw_ghost(self, show: bool) -> None:
        """Draw (or erase) the preview of the ship being placed."""
        s = self.session
        length = s.current_ship_length
        fits = s.own.can_place(s.cursor_row, s.cursor_col, length, s.horizontal)
        ghost = CellVisual.GHOST_OK if fits else CellVisual.GHOST_BAD
        for k in range(length):
            row = s.cursor_row + (0 if s.horizontal else k)
            col = s.cursor_col + (k if s.horizontal else 0)
            if row >= GRID_ROWS or col >= GRID_COLS:
                continue
            if show:
                visual = ghost
            else:
                visual = CellVisual.SHIP if s.own.occupied.get(row, col) else CellVisual.WATER
            self._display.render_cell(row, col, Side.PLAYER, visual)

    def _draw_main_menu(self) -> None:
        self._display.render_screen(Screen.MAIN_MENU)
        self._display.render_menu(self.session.menu_item)

    def _draw_placement_screen(self) -> None:
        self._display.render_screen(Screen.PLACEMENT)
        for row in range(GRID_ROWS):
            for col in range(GRID_COLS):
                self._display.render_cell(row, col, Side.PLAYER, CellVisual.WATER)
                self._display.render_cell(row, col, Side.ENEMY, CellVisual.FOG)
        self._draw_ghost(show=True)
        self._display.show_status(STATUS_PLACE)

    def _draw_play_screen(self) -> None:
        s = self.session
        self._display.render_screen(Screen.PLAY)
        for row in range(GRID_ROWS):
            for col in range(GRID_COLS):
                self._display.render_cell(
                    row, col, Side.PLAYER, _OWN_VISUALS[s.own.cell_state(row, col)],
                )
                self._display.render_cell(row, col, Side.ENEMY, self._enemy_visual(row, col))
