"""Bitmap board model and ship placement.

Each side's board is two 100-bit grids: which cells hold a ship segment
(`occupied`) and which cells the opponent has fired on (`attacked`).
Hit and miss are derived from the pair and never stored separately.

No PyGame dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Sequence

from armada.config import GRID_COLS, GRID_ROWS, PLACEMENT_ATTEMPTS, SHIP_LENGTHS
from armada.simulation.rng import Lfsr16


class PlacementError(RuntimeError):
    """Random placement could not seat every ship of a fleet."""


class CellState(IntEnum):
    EMPTY = 0
    SHIP = 1
    HIT = 2
    MISS = 3


class BitGrid:
    """Fixed-size 10x10 bit set, row-major: bit (row * GRID_COLS + col)."""

    __slots__ = ("_bits",)

    def __init__(self) -> None:
        self._bits = 0

    @staticmethod
    def _index(row: int, col: int) -> int:
        if not (0 <= row < GRID_ROWS and 0 <= col < GRID_COLS):
            raise IndexError(f"cell ({row}, {col}) is off the grid")
        return row * GRID_COLS + col

    def get(self, row: int, col: int) -> bool:
        return bool(self._bits >> self._index(row, col) & 1)

    def set(self, row: int, col: int) -> None:
        self._bits |= 1 << self._index(row, col)

    def clear(self, row: int, col: int) -> None:
        self._bits &= ~(1 << self._index(row, col))

    def clear_all(self) -> None:
        self._bits = 0

    def count(self) -> int:
        return bin(self._bits).count("1")

    def cells(self) -> Iterator[tuple[int, int]]:
        """Yield set cells in row-major order."""
        for idx in range(GRID_ROWS * GRID_COLS):
            if self._bits >> idx & 1:
                yield divmod(idx, GRID_COLS)

    def __int__(self) -> int:
        return self._bits

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitGrid):
            return NotImplemented
        return self._bits == other._bits

    def __repr__(self) -> str:
        return f"BitGrid({self._bits:#027x})"


@dataclass(frozen=True, slots=True)
class Ship:
    row: int
    col: int
    length: int
    horizontal: bool

    def cells(self) -> Iterator[tuple[int, int]]:
        for k in range(self.length):
            if self.horizontal:
                yield self.row, self.col + k
            else:
                yield self.row + k, self.col


class Board:
    """One side's grid pair plus its fleet and the count of unhit ship cells.

    For the local player `occupied` holds the placed fleet. For the view of
    the opponent it holds confirmed hits only, since the opponent's layout
    is never sent over the wire.
    """

    def __init__(self) -> None:
        self.occupied = BitGrid()
        self.attacked = BitGrid()
        self.fleet: list[Ship] = []
        self.remaining: int = 0

    def reset(self) -> None:
        """Clear in place; holders of a reference see the empty board."""
        self.occupied.clear_all()
        self.attacked.clear_all()
        self.fleet.clear()
        self.remaining = 0

    def can_place(self, row: int, col: int, length: int, horizontal: bool) -> bool:
        """Whether a ship fits inside the grid without overlapping another."""
        if row < 0 or col < 0:
            return False
        if horizontal:
            if row >= GRID_ROWS or col + length > GRID_COLS:
                return False
            return not any(self.occupied.get(row, c) for c in range(col, col + length))
        if col >= GRID_COLS or row + length > GRID_ROWS:
            return False
        return not any(self.occupied.get(r, col) for r in range(row, row + length))

    def place(self, row: int, col: int, length: int, horizontal: bool) -> Ship:
        """Mark a ship's cells occupied. Caller validates with can_place()."""
        ship = Ship(row, col, length, horizontal)
        for r, c in ship.cells():
            if not self.occupied.get(r, c):
                self.occupied.set(r, c)
                self.remaining += 1
        self.fleet.append(ship)
        return ship

    def mark_attacked(self, row: int, col: int) -> bool:
        """Record an attack. Returns True only the first time per cell."""
        if self.attacked.get(row, col):
            return False
        self.attacked.set(row, col)
        return True

    def cell_state(self, row: int, col: int) -> CellState:
        occupied = self.occupied.get(row, col)
        if self.attacked.get(row, col):
            return CellState.HIT if occupied else CellState.MISS
        return CellState.SHIP if occupied else CellState.EMPTY


def valid_positions(board: Board, length: int) -> list[tuple[int, int, bool]]:
    """All (row, col, horizontal) where a ship of `length` fits, row-major."""
    positions: list[tuple[int, int, bool]] = []
    for row in range(GRID_ROWS):
        for col in range(GRID_COLS):
            for horizontal in (True, False):
                if board.can_place(row, col, length, horizontal):
                    positions.append((row, col, horizontal))
    return positions


def place_fleet_randomly(
    board: Board,
    rng: Lfsr16,
    lengths: Sequence[int] = SHIP_LENGTHS,
) -> list[Ship]:
    """Seat a whole fleet at random positions on an empty board.

    For each length, every valid position is listed, the list is shuffled
    and the head is taken. If an earlier ship leaves no room for a later
    one, the board is cleared and the fleet starts over.

    Raises:
        PlacementError: if every attempt starved a ship.
    """
    for attempt in range(PLACEMENT_ATTEMPTS):
        for length in lengths:
            positions = valid_positions(board, length)
            if not positions:
                break
            rng.shuffle(positions)
            row, col, horizontal = positions[0]
            board.place(row, col, length, horizontal)
        else:
            return list(board.fleet)
        board.reset()
    raise PlacementError(
        f"could not place fleet {tuple(lengths)} in {PLACEMENT_ATTEMPTS} attempts"
    )
