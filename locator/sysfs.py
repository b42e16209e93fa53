"""Linux sysfs discovery for stx-usb."""

import glob
import logging
import os
from collections.abc import Iterable

from locator.base import DeviceSignature, EndpointLocator

logger = logging.getLogger(__name__)

DEFAULT_DEV_ROOT = "/dev"
DEFAULT_TTY_CLASS_ROOT = "/sys/class/tty"
DEFAULT_PATTERNS = ("ttyUSB*", "ttyACM*")

# ttyUSB0/device is the usb-serial port, its USB device sits a few levels up
MAX_SYSFS_DEPTH = 4


class SysfsLocator(EndpointLocator):
    """Match tty devices by the idVendor/idProduct files of their USB parent."""

    def __init__(
        self,
        dev_root: str = DEFAULT_DEV_ROOT,
        tty_class_root: str = DEFAULT_TTY_CLASS_ROOT,
        patterns: tuple[str, ...] = DEFAULT_PATTERNS,
    ) -> None:
        self.dev_root = dev_root
        self.tty_class_root = tty_class_root
        self.patterns = patterns

    def candidates(self) -> Iterable[str]:
        for pattern in self.patterns:
            yield from sorted(glob.glob(os.path.join(self.dev_root, pattern)))

    def inspect(self, endpoint: str, signature: DeviceSignature) -> bool:
        usb_dir = self._usb_device_dir(os.path.basename(endpoint))
        if usb_dir is None:
            return False
        vid = _read_id(os.path.join(usb_dir, "idVendor"))
        pid = _read_id(os.path.join(usb_dir, "idProduct"))
        logger.debug(f"{endpoint}: idVendor={vid} idProduct={pid}")
        return signature.matches(vid, pid)

    def _usb_device_dir(self, tty_name: str) -> str | None:
        """Walk up from the tty's device node to the directory holding the USB ids."""
        device_link = os.path.join(self.tty_class_root, tty_name, "device")
        if not os.path.exists(device_link):
            raise FileNotFoundError(f"{device_link} not found")

        path = os.path.realpath(device_link)
        for _ in range(MAX_SYSFS_DEPTH + 1):
            if os.path.isfile(os.path.join(path, "idVendor")) and os.path.isfile(
                os.path.join(path, "idProduct")
            ):
                return path
            parent = os.path.dirname(path)
            if parent == path:
                break
            path = parent
        return None


def _read_id(path: str) -> str:
    with open(path, "r", encoding="ascii") as f:
        return f.read().strip()
