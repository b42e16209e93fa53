"""Error types for stx-usb.

Contains:
- StxError: Base error
- DeviceNotFoundError: Discovery found no port with the device signature
- ConnectFailedError: The matched port could not be opened
- UnknownCommandError: Command code outside the catalog
- TransferError: Raw transfer failed
- CommandFailedError: A command transfer failed (I/O error)
- ReplyTimeoutError: No delimited reply arrived before the read timeout
"""


class StxError(Exception):
    """Base error for stx-usb."""

    pass


class DeviceNotFoundError(StxError):
    """Raised when no serial port matches the device signature."""

    def __init__(self, signature: object, message: str | None = None) -> None:
        self.signature = signature
        super().__init__(message or f"No serial port found for device {signature}")


class ConnectFailedError(StxError):
    """Raised when the serial port cannot be opened."""

    def __init__(self, endpoint: str, cause: str) -> None:
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"Could not open {endpoint}: {cause}")


class UnknownCommandError(StxError):
    """Raised when a command code or name is not in the catalog."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Unknown command {code!r}")


class TransferError(StxError):
    """Raised when a transfer on the serial port fails."""

    pass


class CommandFailedError(TransferError):
    """A command transfer failed; carries the command code and the cause."""

    def __init__(self, code: str, cause: str) -> None:
        self.code = code
        self.cause = cause
        super().__init__(f"Command {code} failed: {cause}")


class ReplyTimeoutError(CommandFailedError):
    """No delimited reply was received within the read timeout."""

    pass
