#!/usr/bin/env python3
"""STx radiation counter command line tool.

Finds the counter on its USB serial port and runs the given commands in the
order given, printing "NN: reply" for each.
"""

import argparse
import logging
import sys
from enum import IntEnum

from commands.catalog import COMMANDS
from commands.framing import TERMINATORS, Framing
from commands.transport import CommandTransport
from common.device import log_device_info, open_serial
from common.errors import ConnectFailedError, DeviceNotFoundError
from common.protocol import DEFAULT_READ_TIMEOUT_S, LineConfig
from common.report import DiscoveryReport
from locator.base import STX_SIGNATURE, find_endpoint
from session.port import PortSession
from session.report import OutcomeReport

logger = logging.getLogger(__name__)

# Pseudo command: stop before any command that follows it
EXIT = "exit"

# Every help spelling; "help" and the "/" forms are not argparse options
HELP_FLAGS = ("-h", "-help", "--help", "-?", "-info", "help", "/help", "/h", "/?")


class ExitCode(IntEnum):
    """Exit codes for the command line tool.

    A startup failure exits non-zero so scripts can tell that no command was
    sent. The device itself has no status codes to report beyond that.
    """

    SUCCESS = 0  # Commands ran (individual commands may have failed)
    STARTUP_FAILED = 1  # Device not found or port could not be opened


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stxusb",
        description="Send commands to a Spectrum Techniques STx radiation counter over USB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
        epilog="""
Commands run in the order given, then the program exits.
Reply values are described in the STX Design and Programming Manual.

Examples:
  %(prog)s -01                     Start counter
  %(prog)s -04 -v                  Request counts with verbose output
  %(prog)s -02 -04 -e -00          Stop and read counts, the reset is skipped
  %(prog)s -p /dev/ttyUSB0 -03     Request status without USB discovery
""",
    )
    parser.add_argument(
        "-h",
        "-help",
        "--help",
        "-?",
        "-info",
        action="help",
        help="Show this help message and exit (also: help, /help, /h, /?)",
    )
    parser.add_argument(
        "-v",
        "-verbose",
        "--verbose",
        action="store_true",
        help="Show debug logging, timings and unrecognized arguments",
    )

    device_commands = parser.add_argument_group("device commands")
    for command in COMMANDS:
        flags = [f"-{command.code}"]
        flags += [f"-{alias}" for alias in command.aliases]
        flags.append("--" + command.name.replace("_", "-"))
        device_commands.add_argument(
            *flags,
            dest="commands",
            action="append_const",
            const=command.code,
            help=command.description,
        )
    device_commands.add_argument(
        "-e",
        "-exit",
        "--exit",
        dest="commands",
        action="append_const",
        const=EXIT,
        help="Exit; commands given after this are not run",
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument(
        "-p", "--port", type=str, help="Serial port to use instead of USB discovery (e.g. COM3)"
    )
    connection.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_READ_TIMEOUT_S,
        help=f"Reply timeout in seconds (default: {DEFAULT_READ_TIMEOUT_S})",
    )
    connection.add_argument(
        "--terminator",
        choices=sorted(TERMINATORS),
        default="cr",
        help="Command terminator (default: cr)",
    )
    connection.add_argument(
        "--no-marker", action="store_true", help="Send codes without the leading '>'"
    )
    return parser


def commands_to_run(requested: list[str]) -> list[str]:
    """Return the requested codes up to the first exit."""
    if EXIT in requested:
        return requested[: requested.index(EXIT)]
    return list(requested)


def connect(port: str | None, config: LineConfig) -> PortSession:
    """Locate the device (unless a port is given) and check it can be opened.

    Raises:
        DeviceNotFoundError: If discovery finds no matching port.
        ConnectFailedError: If the port cannot be opened.
    """
    endpoint = port or find_endpoint(STX_SIGNATURE)
    log_device_info(endpoint)
    session = PortSession(endpoint, config, port_factory=open_serial)
    session.probe()
    return session


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    if not argv or any(argument in HELP_FLAGS for argument in argv):
        parser.print_help()
        return ExitCode.SUCCESS

    args, unknown = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if unknown and args.verbose:
        print("Unknown arguments given:", file=sys.stderr)
        for argument in unknown:
            print(f"  {argument}", file=sys.stderr)

    codes = commands_to_run(args.commands or [])
    config = LineConfig(read_timeout_s=args.timeout)
    framing = Framing.from_names(args.terminator, marker=not args.no_marker)

    logger.debug("Locating device and opening port")
    try:
        session = connect(args.port, config)
    except (DeviceNotFoundError, ConnectFailedError) as e:
        logger.debug(f"Startup failed: {e!r}")
        DiscoveryReport(connected=False, error=e).print()
        return ExitCode.STARTUP_FAILED

    with session:
        if args.verbose:
            DiscoveryReport(connected=True, endpoint=session.endpoint).print()
        transport = CommandTransport(session, framing)
        print()
        for outcome in transport.send_commands(codes):
            OutcomeReport(outcome, verbose=args.verbose).print()

    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
