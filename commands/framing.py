"""Command framing for the STx serial protocol.

Commands are ASCII lines:
  [marker ">"][two-digit code][terminator]

The canonical frame is b">NN\\r". The hardware also accepts a CR LF
terminator, and one firmware revision takes the code without the leading
marker; both are selectable. Replies are ASCII lines ending in the reply
delimiter (CR by default).
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from common.protocol import TRACE

logger = logging.getLogger(__name__)

ENCODING = "ascii"

CR = b"\r"
CRLF = b"\r\n"
COMMAND_MARKER = b">"

TERMINATORS = {"cr": CR, "crlf": CRLF}


class LineReader(Protocol):
    """Protocol for objects that can read up to a delimiter."""

    def read_until(self, expected: bytes = ..., size: int | None = ...) -> bytes: ...


@dataclass(frozen=True)
class Framing:
    """Outbound frame layout and reply delimiter."""

    terminator: bytes = CR
    delimiter: bytes = CR
    marker: bytes = COMMAND_MARKER

    def __post_init__(self) -> None:
        """Validate delimiters are non-empty."""
        if not self.terminator:
            raise ValueError("terminator must not be empty")
        if not self.delimiter:
            raise ValueError("delimiter must not be empty")

    @classmethod
    def from_names(cls, terminator: str = "cr", marker: bool = True) -> "Framing":
        """Build a framing from CLI names ("cr" or "crlf")."""
        try:
            term = TERMINATORS[terminator]
        except KeyError:
            raise ValueError(
                f"Unknown terminator {terminator!r}, expected one of {sorted(TERMINATORS)}"
            ) from None
        return cls(terminator=term, marker=COMMAND_MARKER if marker else b"")

    def encode(self, code: str) -> bytes:
        """Encode a command code into its wire frame."""
        return self.marker + code.encode(ENCODING) + self.terminator

    def read_reply(self, reader: LineReader) -> str | None:
        """Read one delimited reply. Returns the text, or None on timeout.

        A read that stops before the delimiter means the port's read timeout
        expired; the partial bytes are discarded.
        """
        raw = reader.read_until(self.delimiter)
        if not raw.endswith(self.delimiter):
            if raw:
                logger.debug(f"Discarding {len(raw)} bytes of partial reply: {raw!r}")
            return None
        logger.log(TRACE, f"Reply frame: {raw!r}")
        return decode_text(raw[: -len(self.delimiter)])


def decode_text(data: bytes) -> str:
    """Decode reply bytes as ASCII, replacing anything outside the range."""
    return data.decode(ENCODING, errors="replace")
