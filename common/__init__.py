"""Common modules for stx-usb.

This package contains shared code used by the locator, session and commands:
- protocol: SerialPort Protocol, LineConfig, timing constants, TRACE level
- errors: StxError hierarchy
- io: Serial I/O helpers (drain_input, write_all)
- device: Serial device setup (open_serial, log_device_info)
- report: Reporting abstractions
"""

from common.errors import (
    CommandFailedError,
    ConnectFailedError,
    DeviceNotFoundError,
    ReplyTimeoutError,
    StxError,
    TransferError,
    UnknownCommandError,
)
from common.protocol import (
    DEFAULT_BAUDRATE,
    DEFAULT_READ_TIMEOUT_S,
    DEFAULT_WRITE_TIMEOUT_S,
    TRACE,
    LineConfig,
    SerialPort,
)

__all__ = [
    # Protocol
    "SerialPort",
    "LineConfig",
    "DEFAULT_BAUDRATE",
    "DEFAULT_READ_TIMEOUT_S",
    "DEFAULT_WRITE_TIMEOUT_S",
    "TRACE",
    # Exceptions
    "StxError",
    "DeviceNotFoundError",
    "ConnectFailedError",
    "UnknownCommandError",
    "TransferError",
    "CommandFailedError",
    "ReplyTimeoutError",
]
