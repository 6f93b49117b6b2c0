"""Local AI opponent.

LocalOpponent stands in for a remote peer without any real transport.
Every message the controller sends is answered synchronously by pushing
protocol lines into a small FIFO, and the controller polls that FIFO
exactly as it polls a real channel. The AI therefore speaks the same
wire vocabulary and goes through the same decoder as a human opponent.

The AI owns its own board. To choose targets it reads the player's board
directly, biased by the difficulty toward ship or ocean squares.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from armada.config import AI_QUEUE_CAPACITY, GRID_COLS, GRID_ROWS
from armada.networking.peer import Transport
from armada.networking.protocol import Attack, Message, Ready, Result
from armada.networking.serialization import encode_line
from armada.simulation.board import BitGrid, Board, place_fleet_randomly
from armada.simulation.rng import Lfsr16
from armada.simulation.state import Settings

logger = logging.getLogger(__name__)


class LocalOpponent(Transport):
    """AI that plays the remote side through an injection queue.

    Args:
        player_board: The human player's board (read only).
        settings: Shared settings; the difficulty is read on every shot.
        seed_source: Returns fresh entropy when a new game starts.
        capacity: Queue size. Lines pushed into a full queue are dropped.
    """

    def __init__(
        self,
        player_board: Board,
        settings: Settings,
        seed_source: Callable[[], int],
        capacity: int = AI_QUEUE_CAPACITY,
    ) -> None:
        self._player_board = player_board
        self._settings = settings
        self._seed_source = seed_source
        self._capacity = capacity
        self._queue: deque[str] = deque()
        self.board = Board()
        self.rng = Lfsr16()
        self.token = 0
        self._targeted = BitGrid()
        self.ship_squares_attacked = 0
        self.ocean_squares_attacked = 0

    # --- Transport ---

    def send(self, message: Message) -> None:
        if isinstance(message, Ready):
            self._on_ready(message.token)
        elif isinstance(message, Attack):
            self._on_attack(message.row, message.col)
        elif isinstance(message, Result):
            logger.debug(
                "Player reports %s at (%d, %d)",
                "hit" if message.hit else "miss", message.row, message.col,
            )

    def poll(self) -> str | None:
        return self._queue.popleft() if self._queue else None

    def reset(self) -> None:
        self._queue.clear()
        self.board.reset()
        self._targeted.clear_all()
        self.token = 0
        self.ship_squares_attacked = 0
        self.ocean_squares_attacked = 0

    # --- Message handlers ---

    def _on_ready(self, player_token: int) -> None:
        first = not self.board.fleet
        if first:
            self.rng.seed(self._seed_source())
            place_fleet_randomly(self.board, self.rng)
            self.token = self._draw_token()
            logger.info("AI fleet placed, token %d", self.token)
        if player_token == self.token:
            old = self.token
            while self.token == old:
                self.token = self._draw_token()
            logger.info("Token tie at %d, AI redrew %d", old, self.token)
        self._push(Ready(self.token))

        # Winning the toss means opening fire; later READYs are only echoed
        if first and self.token > player_token:
            target = self.choose_target()
            if target is not None:
                self._push(Attack(*target))

    def _on_attack(self, row: int, col: int) -> None:
        first_time = self.board.mark_attacked(row, col)
        hit = self.board.occupied.get(row, col)
        self._push(Result(row, col, hit))
        if not first_time:
            # retransmitted shot; the reply is owed but the turn was played
            return
        if hit:
            self.board.remaining -= 1
            if self.board.remaining == 0:
                logger.info("AI fleet sunk")
                return
        target = self.choose_target()
        if target is not None:
            self._push(Attack(*target))

    # --- Targeting ---

    def choose_target(self) -> tuple[int, int] | None:
        """Pick the next cell to fire at and mark it as targeted.

        With the difficulty's probability the shot goes to a random ship
        square, otherwise to a random ocean square. Either kind falls back
        to the other when none are left. Returns None once every cell has
        been targeted.
        """
        want_ship = self.rng.next_bool(self._settings.difficulty.hit_probability)
        ship_count = self._count_eligible(occupied=True)
        ocean_count = self._count_eligible(occupied=False)
        if want_ship:
            n, occupied = (ship_count, True) if ship_count else (ocean_count, False)
        else:
            n, occupied = (ocean_count, False) if ocean_count else (ship_count, True)
        if n == 0:
            return None

        row, col = self._nth_eligible(self.rng.next_int(0, n - 1), occupied)
        self._targeted.set(row, col)
        if occupied:
            self.ship_squares_attacked += 1
        else:
            self.ocean_squares_attacked += 1
        logger.debug(
            "AI targets (%d, %d) [%s]; ship squares %d, ocean squares %d",
            row, col, "ship" if occupied else "ocean",
            self.ship_squares_attacked, self.ocean_squares_attacked,
        )
        return row, col

    def _is_eligible(self, row: int, col: int, occupied: bool) -> bool:
        if self._targeted.get(row, col) or self._player_board.attacked.get(row, col):
            return False
        return self._player_board.occupied.get(row, col) == occupied

    def _count_eligible(self, occupied: bool) -> int:
        return sum(
            1
            for row in range(GRID_ROWS)
            for col in range(GRID_COLS)
            if self._is_eligible(row, col, occupied)
        )

    def _nth_eligible(self, k: int, occupied: bool) -> tuple[int, int]:
        """Row-major scan to the k-th (0-based) eligible cell."""
        for row in range(GRID_ROWS):
            for col in range(GRID_COLS):
                if self._is_eligible(row, col, occupied):
                    if k == 0:
                        return row, col
                    k -= 1
        raise IndexError("fewer eligible cells than counted")

    # --- Helpers ---

    def _draw_token(self) -> int:
        return self.rng.next_int(1, 0xFFFF)

    def _push(self, message: Message) -> None:
        line = encode_line(message)
        if len(self._queue) >= self._capacity:
            logger.warning("AI queue full, dropping %r", line)
            return
        self._queue.append(line)
