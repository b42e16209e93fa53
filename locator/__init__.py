"""Device discovery package for stx-usb.

Resolves the USB vendor/product signature of the STx counter to a serial
endpoint. One implementation per host family, selected at runtime:
- sysfs: Linux, idVendor/idProduct files of the tty's USB parent
- registry: Windows, device instance keys that own each COM port
- listports: other hosts, pyserial's port enumeration
"""

from locator.base import STX_SIGNATURE, DeviceSignature, EndpointLocator, find_endpoint
from locator.listports import ListPortsLocator
from locator.registry import RegistryLocator
from locator.sysfs import SysfsLocator

__all__ = [
    "DeviceSignature",
    "EndpointLocator",
    "ListPortsLocator",
    "RegistryLocator",
    "STX_SIGNATURE",
    "SysfsLocator",
    "find_endpoint",
]
