"""Command outcome type for stx-usb.

Contains:
- CommandOutcome: Result of one command transfer
"""

from dataclasses import dataclass

from common.errors import ReplyTimeoutError, StxError, UnknownCommandError


@dataclass
class CommandOutcome:
    """Result of one command.

    Attributes:
        code: Command code as given by the caller.
        success: True if a delimited reply was received.
        reply: Reply text with the delimiter stripped ("" on failure).
        error: UnknownCommandError, CommandFailedError or ReplyTimeoutError
            when success is False.
        elapsed_s: Time spent waiting for and performing the transfer.
    """

    code: str
    success: bool
    reply: str = ""
    error: StxError | None = None
    elapsed_s: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.success and self.error is None:
            raise ValueError("error is required when success=False")
        if self.success and self.error is not None:
            raise ValueError("error must be None when success=True")

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, ReplyTimeoutError)

    @property
    def rejected(self) -> bool:
        """True if the command was refused before any I/O."""
        return isinstance(self.error, UnknownCommandError)
