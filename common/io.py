"""Serial I/O helpers for stx-usb.

Contains:
- drain_input: Clear stale data from input buffer
- write_all: Write a frame, failing on short writes
"""

import logging

from common.protocol import SerialPort

logger = logging.getLogger(__name__)


def drain_input(port: SerialPort) -> int:
    """Drain stale data from input buffer. Returns bytes drained."""
    count = port.in_waiting
    if count > 0:
        port.read(count)
        logger.debug(f"Drained {count} stale bytes from input buffer")
    return count


def write_all(port: SerialPort, data: bytes) -> int:
    """Write data in full. Returns bytes written.

    Raises:
        OSError: If the port accepted fewer bytes than given.
    """
    written = port.write(data)
    # pyserial returns None on some platforms when the write completed
    if written is None:
        written = len(data)
    if written != len(data):
        raise OSError(f"Short write: {written}/{len(data)} bytes")
    return written
