"""Exclusive port session for stx-usb.

The serial port is a non-reentrant resource with no protocol sequence
numbers, so every transfer runs as one locked unit:

  acquire lock -> open port -> transfer -> close port -> release lock

The port is reopened for each transfer so that each command starts from a
known state even if another process touched the device in between.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import TypeVar

import serial

from common.device import open_serial
from common.errors import ConnectFailedError
from common.protocol import TRACE, LineConfig, SerialPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

PortFactory = Callable[[str, LineConfig], SerialPort]


class PortSession:
    """Owns the open/closed lifecycle of one serial endpoint."""

    def __init__(
        self,
        endpoint: str,
        config: LineConfig | None = None,
        port_factory: PortFactory | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.config = config or LineConfig()
        self._port_factory = port_factory or open_serial
        self._lock = threading.RLock()
        self._port: SerialPort | None = None

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def open(self) -> None:
        """Open the endpoint with the configured line settings.

        Opening an already open session is a no-op. Transfers always close
        the port when they finish, including one opened here, so callers that
        only need to check the port can be bound should use probe().

        Raises:
            ConnectFailedError: If the port cannot be opened (in use, removed,
                permission denied, invalid settings).
        """
        with self._lock:
            if self._port is not None:
                return
            try:
                self._port = self._port_factory(self.endpoint, self.config)
            except (serial.SerialException, OSError, ValueError) as e:
                raise ConnectFailedError(self.endpoint, str(e)) from e
            logger.log(TRACE, f"Opened {self.endpoint}")

    def close(self) -> None:
        """Close the port. Closing a closed session is a no-op."""
        with self._lock:
            port, self._port = self._port, None
            if port is None:
                return
            if port.is_open:
                port.close()
            logger.log(TRACE, f"Closed {self.endpoint}")

    @contextmanager
    def exclusive(self) -> Iterator[SerialPort]:
        """Hold the lock and an open port for the duration of the block.

        The port is closed and the lock released on every exit path.
        """
        with self._lock:
            self.open()
            try:
                assert self._port is not None
                yield self._port
            finally:
                self.close()

    def transfer(self, operation: Callable[[SerialPort], T]) -> T:
        """Run operation(port) as one exclusive open-transfer-close unit."""
        with self.exclusive() as port:
            return operation(port)

    def probe(self) -> None:
        """Open and close the port once to check it can be bound.

        Raises:
            ConnectFailedError: If the port cannot be opened.
        """
        self.transfer(lambda _port: None)
        logger.debug(f"Port {self.endpoint} is available")

    def __enter__(self) -> "PortSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
