"""Command reporting for stx-usb.

Contains:
- OutcomeReport: Console line for one command outcome
"""

from dataclasses import dataclass

from common.report import Report
from session.result import CommandOutcome


@dataclass
class OutcomeReport(Report):
    """Report for one command: "NN: reply" or "NN: ERROR cause"."""

    outcome: CommandOutcome
    verbose: bool = False

    def line(self) -> str:
        o = self.outcome
        if o.success:
            text = f"{o.code}: {o.reply}"
        else:
            text = f"{o.code}: ERROR {o.error}"
        if self.verbose:
            text += f" ({o.elapsed_s * 1000:.1f}ms)"
        return text

    def print(self) -> None:
        """Print the outcome followed by a blank line."""
        print(self.line())
        print()

    def success(self) -> bool:
        return self.outcome.success
