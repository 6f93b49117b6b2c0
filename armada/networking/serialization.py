"""Text line codec for protocol messages.

Wire format, one message per line, fields separated by a single space,
terminated by a newline:

    READY <token:uint16>
    A <row:0-9> <col:0-9>
    R <row:0-9> <col:0-9> <H|M>

The codec is stateless. Anything that does not match the grammar,
including coordinates off the grid, raises ValueError; the caller drops it
and relies on the sender's retransmission.
"""

from __future__ import annotations

import re

from armada.config import GRID_COLS, GRID_ROWS
from armada.networking.protocol import Attack, Message, MessageType, Ready, Result

LINE_TERMINATOR = "\n"
MAX_TOKEN = 0xFFFF

_UINT = re.compile(r"[0-9]+")


def encode_line(message: Message) -> str:
    """Render a message as a line without its terminator."""
    if isinstance(message, Ready):
        return f"{MessageType.READY.value} {message.token}"
    if isinstance(message, Attack):
        return f"{MessageType.ATTACK.value} {message.row} {message.col}"
    if isinstance(message, Result):
        flag = "H" if message.hit else "M"
        return f"{MessageType.RESULT.value} {message.row} {message.col} {flag}"
    raise TypeError(f"not a protocol message: {message!r}")


def frame(message: Message) -> bytes:
    """Encode a message as terminated ASCII bytes, ready for the wire."""
    return (encode_line(message) + LINE_TERMINATOR).encode("ascii")


def decode_line(line: str) -> Message:
    """Parse one line (terminator optional) into a message.

    Raises ValueError if the line is malformed or out of range.
    """
    fields = line.rstrip().split(" ")
    tag = fields[0]
    if tag == MessageType.READY.value:
        _expect_fields(fields, 2, line)
        token = _parse_uint(fields[1], MAX_TOKEN, "token")
        return Ready(token)
    if tag == MessageType.ATTACK.value:
        _expect_fields(fields, 3, line)
        row, col = _parse_cell(fields[1], fields[2])
        return Attack(row, col)
    if tag == MessageType.RESULT.value:
        _expect_fields(fields, 4, line)
        row, col = _parse_cell(fields[1], fields[2])
        if fields[3] not in ("H", "M"):
            raise ValueError(f"bad result flag {fields[3]!r}")
        return Result(row, col, fields[3] == "H")
    raise ValueError(f"unknown message tag {tag!r}")


def _expect_fields(fields: list[str], count: int, line: str) -> None:
    if len(fields) != count:
        raise ValueError(f"expected {count} fields, got {len(fields)}: {line!r}")


def _parse_uint(text: str, maximum: int, name: str) -> int:
    if not _UINT.fullmatch(text):
        raise ValueError(f"{name} is not an unsigned integer: {text!r}")
    value = int(text)
    if value > maximum:
        raise ValueError(f"{name} out of range: {value}")
    return value


def _parse_cell(row_text: str, col_text: str) -> tuple[int, int]:
    row = _parse_uint(row_text, GRID_ROWS - 1, "row")
    col = _parse_uint(col_text, GRID_COLS - 1, "col")
    return row, col
