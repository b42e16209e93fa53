"""Device discovery for stx-usb.

Contains:
- DeviceSignature: USB vendor/product id pair
- STX_SIGNATURE: Signature of the STx radiation counter
- EndpointLocator: Base class implementing first-match search over candidates
- find_endpoint: Resolve a signature to a serial endpoint
"""

import abc
import logging
import re
import sys
from collections.abc import Iterable
from dataclasses import dataclass

from common.errors import DeviceNotFoundError

logger = logging.getLogger(__name__)

# Windows device instance ids: USB\VID_12AB&PID_0001, FTDIBUS\VID_0403+PID_6001+...
_DESCRIPTOR_RE = re.compile(r"VID_([0-9A-F]{4})[&+]PID_([0-9A-F]{4})", re.IGNORECASE)

_USB_ID_MAX = 0xFFFF


@dataclass(frozen=True)
class DeviceSignature:
    """USB vendor id and product id of the target device."""

    vid: int
    pid: int

    def __post_init__(self) -> None:
        """Validate both ids fit in 16 bits."""
        for label, value in (("vid", self.vid), ("pid", self.pid)):
            if not 0 <= value <= _USB_ID_MAX:
                raise ValueError(f"{label} must be a 16-bit unsigned value, got {value!r}")

    @property
    def vid_hex(self) -> str:
        return f"{self.vid:04X}"

    @property
    def pid_hex(self) -> str:
        return f"{self.pid:04X}"

    def matches(self, vid_text: str, pid_text: str) -> bool:
        """Compare against host-reported 4-hex-digit vendor and product codes."""
        return (
            vid_text.strip().upper() == self.vid_hex
            and pid_text.strip().upper() == self.pid_hex
        )

    def matches_descriptor(self, descriptor: str) -> bool:
        """Return True if a device descriptor string names this signature."""
        return any(
            self.matches(m.group(1), m.group(2))
            for m in _DESCRIPTOR_RE.finditer(descriptor)
        )

    def __str__(self) -> str:
        return f"{self.vid_hex}:{self.pid_hex}"


STX_SIGNATURE = DeviceSignature(vid=0x12AB, pid=0x0001)


class EndpointLocator(abc.ABC):
    """Resolve a device signature to the first matching serial endpoint."""

    @abc.abstractmethod
    def candidates(self) -> Iterable[str]:
        """Yield candidate endpoints in host enumeration order."""
        pass

    @abc.abstractmethod
    def inspect(self, endpoint: str, signature: DeviceSignature) -> bool:
        """Return True if the endpoint belongs to a device with the signature.

        May raise OSError or ValueError when the host metadata cannot be read.
        """
        pass

    def find(self, signature: DeviceSignature) -> str:
        """Return the first candidate matching the signature.

        Raises:
            DeviceNotFoundError: If no candidate matches.
        """
        for endpoint in self.candidates():
            try:
                matched = self.inspect(endpoint, signature)
            except (OSError, ValueError) as e:
                logger.debug(f"Skipping {endpoint}: {e}")
                continue
            if matched:
                logger.info(f"Found device {signature} on {endpoint}")
                return endpoint
            logger.debug(f"No match on {endpoint}")
        raise DeviceNotFoundError(signature)

    @classmethod
    def for_platform(cls, platform: str = sys.platform) -> "EndpointLocator":
        """Create the locator appropriate for the host operating system."""
        # Imported here: the implementations subclass EndpointLocator
        if platform.startswith("linux"):
            from locator.sysfs import SysfsLocator

            return SysfsLocator()
        if platform == "win32":
            from locator.registry import RegistryLocator

            return RegistryLocator()
        from locator.listports import ListPortsLocator

        return ListPortsLocator()


def find_endpoint(
    signature: DeviceSignature = STX_SIGNATURE,
    locator: EndpointLocator | None = None,
) -> str:
    """Resolve a device signature to a serial endpoint.

    Raises:
        DeviceNotFoundError: If no serial port matches the signature.
    """
    if locator is None:
        locator = EndpointLocator.for_platform()
    logger.debug(f"Searching for device {signature} using {type(locator).__name__}")
    return locator.find(signature)
