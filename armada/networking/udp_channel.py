"""UDP-based Transport implementation.

Carries the newline-terminated text protocol between two machines. UDP
may drop or duplicate datagrams; the controller's retry engine and its
idempotent handlers cover both, so this layer adds no reliability of its
own.

The host binds a port and adopts the first sender as its peer until the
next reset. The joining side simply targets the host; its first READY is
what introduces it.
"""

from __future__ import annotations

import logging
import socket
from collections import deque

from armada.config import MAX_DATAGRAM_SIZE, MAX_LINE_LENGTH
from armada.networking.peer import Transport
from armada.networking.protocol import Message
from armada.networking.serialization import frame

logger = logging.getLogger(__name__)


class LineBuffer:
    """Reassembles a character stream into lines.

    Splits on CR or LF, skips empty lines, and keeps at most
    MAX_LINE_LENGTH characters of any one line (the rest is discarded).
    """

    def __init__(self, max_length: int = MAX_LINE_LENGTH) -> None:
        self._max_length = max_length
        self._partial: list[str] = []
        self._lines: deque[str] = deque()

    def feed(self, text: str) -> None:
        for ch in text:
            if ch in "\r\n":
                if self._partial:
                    self._lines.append("".join(self._partial))
                    self._partial.clear()
            elif len(self._partial) < self._max_length:
                self._partial.append(ch)

    def pop(self) -> str | None:
        return self._lines.popleft() if self._lines else None

    def clear(self) -> None:
        self._partial.clear()
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)


class UdpChannel(Transport):
    """Real UDP channel to a remote peer."""

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._peer_addr: tuple[str, int] | None = None
        self._is_host = False
        self._buffer = LineBuffer()

    @property
    def address(self) -> tuple[str, int] | None:
        """Local (host, port) the socket is bound to."""
        if self._sock is None:
            return None
        return self._sock.getsockname()

    @property
    def peer_address(self) -> tuple[str, int] | None:
        return self._peer_addr

    def host(self, port: int) -> None:
        """Bind a UDP socket and wait for a peer to speak first."""
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("0.0.0.0", port))
        self._sock.setblocking(False)
        self._is_host = True
        logger.info("Listening for a peer on port %d", self.address[1])

    def connect(self, host: str, port: int) -> None:
        """Target a hosting peer. Nothing is sent until the first message."""
        if self._sock is None:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._sock.setblocking(False)
            self._is_host = False
        # Resolve now so replies can be matched against the sender address
        self._peer_addr = (socket.gethostbyname(host), port)
        logger.info("Peer set to %s:%d", *self._peer_addr)

    def is_connected(self) -> bool:
        return self._peer_addr is not None

    def send(self, message: Message) -> None:
        if self._sock is None or self._peer_addr is None:
            logger.debug("No peer yet, dropping %r", message)
            return
        try:
            self._sock.sendto(frame(message), self._peer_addr)
        except OSError as e:
            logger.warning("Send failed: %s", e)

    def poll(self) -> str | None:
        self._receive()
        return self._buffer.pop()

    def reset(self) -> None:
        """Drop buffered lines. A host also releases its peer.

        Whoever speaks first in the next match is adopted, which lets a
        joiner that restarted on a new port back in.
        """
        self._buffer.clear()
        if self._is_host and self._peer_addr is not None:
            logger.info("Releasing peer %s:%d", *self._peer_addr)
            self._peer_addr = None

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _receive(self) -> None:
        """Read all pending datagrams into the line buffer."""
        if self._sock is None:
            return
        while True:
            try:
                data, addr = self._sock.recvfrom(MAX_DATAGRAM_SIZE)
            except BlockingIOError:
                break
            except OSError as e:
                # ICMP port-unreachable surfaces here on some platforms
                logger.warning("Receive failed: %s", e)
                break
            if self._peer_addr is None and self._is_host:
                self._peer_addr = addr
                logger.info("Peer connected from %s:%d", addr[0], addr[1])
            elif addr != self._peer_addr:
                logger.debug("Ignoring datagram from stranger %s:%d", addr[0], addr[1])
                continue
            self._buffer.feed(data.decode("ascii", errors="replace"))
