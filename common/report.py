"""Reporting abstractions for stx-usb.

Contains:
- Report ABC: Base class for all reports
- DiscoveryReport: Report after device discovery and connect check
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass


class Report(ABC):
    """Abstract base class for console reports."""

    @abstractmethod
    def print(self) -> None:
        """Print the report."""
        pass

    @abstractmethod
    def success(self) -> bool:
        """Return True if the report indicates success."""
        pass


@dataclass
class DiscoveryReport(Report):
    """Report after locating and probing the device.

    When connected=True, endpoint is required.
    When connected=False, error should be set.
    """

    connected: bool
    endpoint: str | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.connected and self.endpoint is None:
            raise ValueError("endpoint is required when connected=True")

    def print(self) -> None:
        """Print the discovery report (failures go to stderr)."""
        if self.connected:
            print(f"Device: connected on {self.endpoint}")
        else:
            print(f"Device: FAILED ({self.error})", file=sys.stderr)

    def success(self) -> bool:
        """Return True if the device was found and could be opened."""
        return self.connected
