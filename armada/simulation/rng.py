"""Seeded 16-bit Galois LFSR.

Used for fleet placement and AI targeting. Deliberately not Python's random
module: the sequence is fully determined by the seed, so tests and replays
can pin it down.
"""

from __future__ import annotations

from typing import MutableSequence, TypeVar

from armada.config import LFSR_DEFAULT_SEED, LFSR_TAPS

T = TypeVar("T")


class Lfsr16:
    """16-bit Galois linear-feedback shift register."""

    def __init__(self, seed: int = LFSR_DEFAULT_SEED) -> None:
        self._state = LFSR_DEFAULT_SEED
        self.seed(seed)

    @property
    def state(self) -> int:
        return self._state

    def seed(self, value: int) -> None:
        """Reseed. A zero seed would lock the register, so it is replaced."""
        value &= 0xFFFF
        self._state = value if value else LFSR_DEFAULT_SEED

    def next_u16(self) -> int:
        lsb = self._state & 1
        self._state >>= 1
        if lsb:
            self._state ^= LFSR_TAPS
        return self._state

    def next_int(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi], both ends inclusive."""
        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return lo + self.next_u16() % (hi - lo + 1)

    def next_float(self, lo: float, hi: float) -> float:
        """Float in [lo, hi)."""
        return lo + (hi - lo) * self.next_u16() / 65536

    def next_bool(self, probability: float) -> bool:
        """True with the given probability (0.0 never, 1.0 always)."""
        return self.next_float(0.0, 1.0) < probability

    def shuffle(self, items: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(0, i)
            items[i], items[j] = items[j], items[i]
