"""Network protocol definitions.

Three message kinds are exchanged between peers, one per text line.
These types are the shared contract between the codec, the real channel
and the local AI opponent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MessageType(Enum):
    """Wire tags, the first field of every line."""
    READY = "READY"   # placement finished; carries the turn-order token
    ATTACK = "A"      # shot at a cell
    RESULT = "R"      # outcome of the peer's shot


@dataclass(frozen=True, slots=True)
class Ready:
    """Announces placement completion. Higher token moves first."""
    token: int  # uint16

    message_type = MessageType.READY


@dataclass(frozen=True, slots=True)
class Attack:
    row: int
    col: int

    message_type = MessageType.ATTACK


@dataclass(frozen=True, slots=True)
class Result:
    row: int
    col: int
    hit: bool

    message_type = MessageType.RESULT


Message = Union[Ready, Attack, Result]
