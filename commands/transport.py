"""Command transport for stx-usb.

Contains:
- CommandTransport: send catalog commands and read their replies

A command and its reply are one atomic transfer under the session lock, so a
second caller's write can never land between this caller's write and read.
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

import serial

from commands.catalog import CATALOG, Command, lookup_name
from commands.framing import Framing
from common.errors import (
    CommandFailedError,
    ConnectFailedError,
    ReplyTimeoutError,
    StxError,
    TransferError,
    UnknownCommandError,
)
from common.io import drain_input, write_all
from common.protocol import TRACE, SerialPort
from session.port import PortSession
from session.result import CommandOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CommandTransport:
    """Frames commands, writes them and reads back one reply line each."""

    def __init__(
        self,
        session: PortSession,
        framing: Framing | None = None,
        catalog: Mapping[str, Command] = CATALOG,
    ) -> None:
        self.session = session
        self.framing = framing or Framing()
        self._catalog = catalog

    def send_command(self, code: str) -> CommandOutcome:
        """Send one command code and wait for its reply.

        Never raises for per-command failures: unknown codes, timeouts and
        I/O errors are returned in the outcome.
        """
        if code not in self._catalog:
            logger.warning(f"Rejected unknown command {code!r}")
            return CommandOutcome(code=code, success=False, error=UnknownCommandError(code))

        frame = self.framing.encode(code)
        logger.debug(f"Sending {self._catalog[code].name} ({code})")
        start = time.monotonic()
        try:
            reply = self.session.transfer(lambda port: self._exchange(port, code, frame))
        except CommandFailedError as e:
            logger.warning(f"Command {code}: {e.cause}")
            return CommandOutcome(
                code=code, success=False, error=e, elapsed_s=time.monotonic() - start
            )
        except (ConnectFailedError, serial.SerialException, OSError) as e:
            logger.warning(f"Command {code}: {e}")
            return CommandOutcome(
                code=code,
                success=False,
                error=CommandFailedError(code, str(e)),
                elapsed_s=time.monotonic() - start,
            )

        elapsed = time.monotonic() - start
        logger.debug(f"Command {code}: reply {reply!r} in {elapsed * 1000:.1f}ms")
        return CommandOutcome(code=code, success=True, reply=reply, elapsed_s=elapsed)

    def send_commands(self, codes: Iterable[str]) -> list[CommandOutcome]:
        """Send commands in order. A failed command does not stop the rest."""
        return [self.send_command(code) for code in codes]

    def send_named(self, name: str) -> CommandOutcome:
        """Send a command by canonical name, e.g. "request_counts"."""
        try:
            command = lookup_name(name)
        except UnknownCommandError as e:
            logger.warning(f"Rejected unknown command name {name!r}")
            return CommandOutcome(code=name, success=False, error=e)
        return self.send_command(command.code)

    def write_raw(self, data: bytes) -> int:
        """Write unframed bytes. Returns bytes written.

        Raises:
            TransferError: On open or write failure.
        """
        return self._raw_transfer("write", lambda port: write_all(port, data))

    def read_line(self) -> str:
        """Read one delimited line.

        Raises:
            TransferError: On open or read failure, or if the read times out.
        """

        def _read(port: SerialPort) -> str:
            text = self.framing.read_reply(port)
            if text is None:
                raise TransferError(
                    f"Timed out after {self.session.config.read_timeout_s}s waiting for a line"
                )
            return text

        return self._raw_transfer("read_line", _read)

    def read_bytes(self, size: int) -> bytes:
        """Read up to size bytes (fewer if the read timeout expires).

        Raises:
            TransferError: On open or read failure.
        """
        return self._raw_transfer("read_bytes", lambda port: port.read(size))

    def _exchange(self, port: SerialPort, code: str, frame: bytes) -> str:
        drain_input(port)
        try:
            write_all(port, frame)
            logger.log(TRACE, f"Wrote frame {frame!r}")
            reply = self.framing.read_reply(port)
        except (serial.SerialException, OSError) as e:
            raise CommandFailedError(code, str(e)) from e
        if reply is None:
            raise ReplyTimeoutError(
                code,
                f"no reply within {self.session.config.read_timeout_s}s",
            )
        return reply

    def _raw_transfer(self, label: str, operation: Callable[[SerialPort], T]) -> T:
        try:
            return self.session.transfer(operation)
        except TransferError:
            raise
        except (StxError, serial.SerialException, OSError) as e:
            raise TransferError(f"{label} on {self.session.endpoint} failed: {e}") from e
