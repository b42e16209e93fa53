"""Command package for stx-usb.

Contains the STx command layer:
- catalog: closed set of two-digit command codes
- framing: wire frame layout and reply delimiting
- transport: CommandTransport (send_command and raw transfers)
"""

from commands.catalog import CATALOG, COMMANDS, Command, is_known, lookup, lookup_name
from commands.framing import CR, CRLF, TERMINATORS, Framing
from commands.transport import CommandTransport

__all__ = [
    "CATALOG",
    "COMMANDS",
    "CR",
    "CRLF",
    "Command",
    "CommandTransport",
    "Framing",
    "TERMINATORS",
    "is_known",
    "lookup",
    "lookup_name",
]
