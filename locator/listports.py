"""Portable discovery through pyserial's port enumeration."""

import logging
from collections.abc import Iterable

import serial.tools.list_ports
from serial.tools.list_ports_common import ListPortInfo

from locator.base import DeviceSignature, EndpointLocator

logger = logging.getLogger(__name__)


class ListPortsLocator(EndpointLocator):
    """Match ports by the USB vid/pid pyserial reports for them."""

    def __init__(self) -> None:
        self._ports: dict[str, ListPortInfo] = {}

    def candidates(self) -> Iterable[str]:
        self._ports = {p.device: p for p in serial.tools.list_ports.comports()}
        return list(self._ports)

    def inspect(self, endpoint: str, signature: DeviceSignature) -> bool:
        info = self._ports[endpoint]
        if info.vid is None or info.pid is None:
            return False
        logger.debug(f"{endpoint}: hwid={info.hwid}")
        return signature.matches(f"{info.vid:04X}", f"{info.pid:04X}")
