"""Protocol definitions for stx-usb.

Contains:
- SerialPort Protocol for type checking
- LineConfig: fixed serial line settings of the STx counter
- Timing constants and their environment overrides
- Logging configuration
"""

import logging
import os
from dataclasses import dataclass
from typing import Protocol

import serial

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

DEFAULT_BAUDRATE = 115200

# Read timeout bounds the wait for a delimited reply (configurable via envvar)
DEFAULT_READ_TIMEOUT_S = float(os.environ.get("STX_READ_TIMEOUT_S", "1.0"))
DEFAULT_WRITE_TIMEOUT_S = float(os.environ.get("STX_WRITE_TIMEOUT_S", "1.0"))


class SerialPort(Protocol):
    """Protocol for serial port operations needed by the transport."""

    def write(self, data: bytes, /) -> int | None: ...
    def read(self, size: int = ..., /) -> bytes: ...
    def read_until(self, expected: bytes = ..., size: int | None = ...) -> bytes: ...
    def close(self) -> None: ...
    @property
    def in_waiting(self) -> int: ...
    @property
    def is_open(self) -> bool: ...


@dataclass(frozen=True)
class LineConfig:
    """Serial line settings (8N1 at 115200 baud by default)."""

    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = serial.EIGHTBITS
    parity: str = serial.PARITY_NONE
    stopbits: float = serial.STOPBITS_ONE
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S
    write_timeout_s: float = DEFAULT_WRITE_TIMEOUT_S
    exclusive: bool = True  # POSIX advisory lock, ignored on Windows
