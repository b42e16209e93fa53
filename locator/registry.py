"""Windows registry discovery for stx-usb.

Serial port names are listed under HKLM\\HARDWARE\\DEVICEMAP\\SERIALCOMM.
Each USB device instance under HKLM\\SYSTEM\\CurrentControlSet\\Enum records
the port it created in its "Device Parameters\\PortName" value; the instance
key path (e.g. USB\\VID_12AB&PID_0001\\5&1a2b3c&0&1) is the descriptor that
is matched against the signature.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from locator.base import DeviceSignature, EndpointLocator

logger = logging.getLogger(__name__)

SERIALCOMM_KEY = r"HARDWARE\DEVICEMAP\SERIALCOMM"
ENUM_ROOTS = (
    r"SYSTEM\CurrentControlSet\Enum\USB",
    r"SYSTEM\CurrentControlSet\Enum\FTDIBUS",
)
DEVICE_PARAMETERS = "Device Parameters"


class RegistryLocator(EndpointLocator):
    """Match COM ports by the USB device instance that owns them."""

    def __init__(self, registry: Any = None) -> None:
        if registry is None:
            import winreg as registry
        self._registry = registry
        self._descriptors: dict[str, list[str]] = {}

    def candidates(self) -> Iterable[str]:
        self._descriptors = self._collect_descriptors()
        return list(self._port_names())

    def inspect(self, endpoint: str, signature: DeviceSignature) -> bool:
        descriptors = self._descriptors.get(endpoint.upper(), [])
        logger.debug(f"{endpoint}: descriptors={descriptors}")
        return any(signature.matches_descriptor(d) for d in descriptors)

    def _port_names(self) -> Iterator[str]:
        reg = self._registry
        try:
            key = reg.OpenKey(reg.HKEY_LOCAL_MACHINE, SERIALCOMM_KEY)
        except OSError as e:
            logger.debug(f"Cannot open {SERIALCOMM_KEY}: {e}")
            return
        with key:
            for _name, value, _type in _iter_values(reg, key):
                if isinstance(value, str):
                    yield value

    def _collect_descriptors(self) -> dict[str, list[str]]:
        """Map upper-cased port name -> device instance paths."""
        reg = self._registry
        descriptors: dict[str, list[str]] = {}
        for root in ENUM_ROOTS:
            try:
                root_key = reg.OpenKey(reg.HKEY_LOCAL_MACHINE, root)
            except OSError:
                continue
            with root_key:
                for device_name in list(_iter_subkeys(reg, root_key)):
                    for instance, port_name in self._instance_ports(root_key, device_name):
                        bus = root.rsplit("\\", 1)[-1]
                        descriptor = f"{bus}\\{device_name}\\{instance}"
                        descriptors.setdefault(port_name.upper(), []).append(descriptor)
        return descriptors

    def _instance_ports(self, root_key: Any, device_name: str) -> Iterator[tuple[str, str]]:
        reg = self._registry
        try:
            device_key = reg.OpenKey(root_key, device_name)
        except OSError:
            return
        with device_key:
            for instance in list(_iter_subkeys(reg, device_key)):
                try:
                    with reg.OpenKey(device_key, f"{instance}\\{DEVICE_PARAMETERS}") as params:
                        port_name, _type = reg.QueryValueEx(params, "PortName")
                except OSError:
                    # Not every instance creates a port (composite parents, hubs)
                    continue
                if isinstance(port_name, str) and port_name:
                    yield instance, port_name


def _iter_subkeys(reg: Any, key: Any) -> Iterator[str]:
    index = 0
    while True:
        try:
            yield reg.EnumKey(key, index)
        except OSError:
            return
        index += 1


def _iter_values(reg: Any, key: Any) -> Iterator[tuple[str, Any, int]]:
    index = 0
    while True:
        try:
            yield reg.EnumValue(key, index)
        except OSError:
            return
        index += 1
