"""Audio interface consumed by the match controller.

The controller reports what happened; implementations decide whether and
how it is heard. Buzzer (pygame) is the real implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto


class AudioEvent(Enum):
    ATTACK = auto()        # result of our own shot
    ENEMY_ATTACK = auto()  # the peer fired at us
    WIN = auto()
    LOSE = auto()


class SoundPlayer(ABC):
    """Audio collaborator."""

    @abstractmethod
    def play(self, event: AudioEvent, outcome: bool | None = None) -> None:
        """Play the sound for an event. `outcome` is hit/miss where relevant."""
        ...
