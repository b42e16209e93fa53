"""Port session package for stx-usb.

This package owns the serial port and the per-command results:
- PortSession: exclusive open-transfer-close units on one endpoint
- CommandOutcome: reply or error classification for one command
- OutcomeReport: console rendering of an outcome
"""

from session.port import PortFactory, PortSession
from session.report import OutcomeReport
from session.result import CommandOutcome

__all__ = [
    "CommandOutcome",
    "OutcomeReport",
    "PortFactory",
    "PortSession",
]
