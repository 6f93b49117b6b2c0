"""Transport interface and mock implementation.

Transport is the seam between the match controller and whoever plays the
other side. The controller codes against this interface only; it cannot
tell a remote peer (UdpChannel) from the local AI (LocalOpponent).

Outbound traffic is handed over as messages. Inbound traffic comes back as
raw text lines so that every opponent feeds the same decoder.

A MockTransport is provided so tests can script the peer without sockets.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque

from armada.networking.protocol import Message
from armada.networking.serialization import encode_line


class Transport(ABC):
    """Abstract two-party message channel."""

    @abstractmethod
    def send(self, message: Message) -> None:
        """Deliver a message to the other side (at most once; may be lost)."""
        ...

    @abstractmethod
    def poll(self) -> str | None:
        """Return the next complete inbound line, or None. Non-blocking."""
        ...

    def reset(self) -> None:
        """Drop any per-match buffers. Called at the start of a match."""

    def close(self) -> None:
        """Release underlying resources."""


class MockTransport(Transport):
    """In-memory transport for tests.

    Records every sent message and hands out injected lines, one per poll,
    as if they had arrived from the peer.
    """

    def __init__(self) -> None:
        self.sent: list[Message] = []
        self._inbox: deque[str] = deque()
        self.closed = False

    def send(self, message: Message) -> None:
        self.sent.append(message)

    def poll(self) -> str | None:
        return self._inbox.popleft() if self._inbox else None

    def reset(self) -> None:
        self._inbox.clear()

    def close(self) -> None:
        self.closed = True

    def inject_line(self, line: str) -> None:
        """Test helper: queue a raw inbound line."""
        self._inbox.append(line)

    def inject(self, message: Message) -> None:
        """Test helper: queue a well-formed inbound message."""
        self._inbox.append(encode_line(message))

    def sent_of(self, message_type: type) -> list[Message]:
        """Test helper: sent messages of one kind, in order."""
        return [m for m in self.sent if isinstance(m, message_type)]
