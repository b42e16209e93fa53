"""Command catalog for the STx radiation counter.

The firmware defines a closed set of two-digit command codes (see the STX
Design and Programming Manual). Codes 09-11 are not assigned. Anything outside
this table is rejected before the port is touched.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from common.errors import UnknownCommandError


@dataclass(frozen=True)
class Command:
    """A recognized command code with its canonical name."""

    code: str
    name: str
    description: str
    aliases: tuple[str, ...] = ()  # Short CLI flag names


COMMANDS: tuple[Command, ...] = (
    Command("00", "reset_device", "Reset device", ("reset",)),
    Command("01", "start_counter", "Start counter", ("start",)),
    Command("02", "stop_counter", "Stop counter", ("stop",)),
    Command("03", "request_status", "Request status", ("status",)),
    Command("04", "request_counts", "Request counts", ("counts",)),
    Command("05", "request_parameters", "Request parameters", ("param",)),
    Command("06", "request_system_parameters", "Request system parameters", ("system",)),
    Command("07", "store_current_parameters", "Store current parameters to EEPROM", ("store",)),
    Command("08", "start_demo_counter", "Start demo counter", ("demo",)),
    Command("12", "high_voltage_on", "High voltage on", ("hvon",)),
    Command("13", "high_voltage_off", "High voltage off", ("hvoff",)),
    Command("14", "high_voltage_onewire_on", "High voltage one-wire on"),
    Command("15", "high_voltage_onewire_off", "High voltage one-wire off"),
    Command("16", "request_high_voltage_status", "Request high voltage status", ("hvstatus",)),
    Command("17", "read_high_voltage_data", "Read high voltage data", ("hvdata",)),
)

CATALOG: Mapping[str, Command] = MappingProxyType({c.code: c for c in COMMANDS})
_BY_NAME: Mapping[str, Command] = MappingProxyType({c.name: c for c in COMMANDS})


def is_known(code: str) -> bool:
    """Return True if code is a recognized command code."""
    return code in CATALOG


def lookup(code: str) -> Command:
    """Return the command for a code.

    Raises:
        UnknownCommandError: If the code is not in the catalog.
    """
    try:
        return CATALOG[code]
    except (KeyError, TypeError):
        raise UnknownCommandError(code) from None


def lookup_name(name: str) -> Command:
    """Return the command with the given canonical name (e.g. "start_counter").

    Raises:
        UnknownCommandError: If no command has that name.
    """
    try:
        return _BY_NAME[name]
    except (KeyError, TypeError):
        raise UnknownCommandError(name) from None
