"""Retransmission cadences and peer-timeout detection.

All timing is counted in ticks by the caller's loop. There is no backoff
and no sequence numbering: the last unacknowledged message is repeated
verbatim and the receiving handlers are idempotent.
"""

from __future__ import annotations

from enum import Enum, auto

from armada.config import (
    ATTACK_RESEND_TICKS,
    PEER_TIMEOUT_TICKS,
    POST_READY_GRACE_TICKS,
    READY_RESEND_TICKS,
)
from armada.simulation.state import NetState


class RetryAction(Enum):
    RESEND_READY = auto()
    RESEND_ATTACK = auto()
    PEER_LOST = auto()


class RetryTimer:
    """Counts ticks toward a fixed interval."""

    __slots__ = ("interval", "elapsed")

    def __init__(self, interval: int) -> None:
        self.interval = interval
        self.elapsed = 0

    def tick(self) -> bool:
        """Advance one tick. Returns whether the interval has elapsed."""
        self.elapsed += 1
        return self.due()

    def due(self) -> bool:
        return self.elapsed >= self.interval

    def reset(self) -> None:
        self.elapsed = 0


class RetryEngine:
    """One timer per cadence, driven by the current NetState.

    - READY is repeated while waiting for the peer's READY and during the
      grace window after turn order is decided.
    - The pending ATTACK is repeated while waiting for its result.
    - Silence for the whole peer timeout during the peer's turn is fatal.
    """

    def __init__(self) -> None:
        self.ready = RetryTimer(READY_RESEND_TICKS)
        self.attack = RetryTimer(ATTACK_RESEND_TICKS)
        self.peer = RetryTimer(PEER_TIMEOUT_TICKS)
        self.grace_left = 0

    def reset(self) -> None:
        self.on_traffic()
        self.grace_left = 0

    def on_traffic(self) -> None:
        """Any successfully parsed inbound line restarts every cadence."""
        self.ready.reset()
        self.attack.reset()
        self.peer.reset()

    def start_grace(self) -> None:
        self.grace_left = POST_READY_GRACE_TICKS
        self.ready.reset()

    def tick(self, net_state: NetState) -> list[RetryAction]:
        """Advance all active cadences by one tick and report what is due."""
        actions: list[RetryAction] = []

        if net_state == NetState.WAIT_READY or self.grace_left > 0:
            if self.ready.tick():
                self.ready.reset()
                actions.append(RetryAction.RESEND_READY)

        if net_state == NetState.WAIT_RESULT:
            if self.attack.tick():
                self.attack.reset()
                actions.append(RetryAction.RESEND_ATTACK)

        if net_state == NetState.PEER_TURN:
            if self.peer.tick():
                self.peer.reset()
                actions.append(RetryAction.PEER_LOST)

        if self.grace_left > 0:
            self.grace_left -= 1

        return actions
