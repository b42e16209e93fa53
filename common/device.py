"""Serial device setup for stx-usb.

Contains:
- log_device_info: Log information about a serial device
- open_serial: Open and configure a serial port
"""

import logging
import os

import serial
import serial.tools.list_ports

from common.protocol import TRACE, LineConfig

logger = logging.getLogger(__name__)


def log_device_info(device: str) -> None:
    """Log information about a serial device."""
    real_path = os.path.realpath(device)
    if real_path.startswith("/dev/pts/"):
        logger.info(f"Device: {device} -> {real_path} (pty)")
        return

    ports = [p for p in serial.tools.list_ports.comports() if p.device == device]
    if len(ports) == 0:
        logger.info(f"Device: {device} (not in port list)")
        return
    if len(ports) > 1:
        logger.warning(f"Multiple ports found for device {device}, using first")

    info = ports[0]
    logger.info(f"Device: {info.device}")
    logger.info(f"Description: {info.description}")
    logger.info(f"Hardware ID: {info.hwid}")
    if info.vid is not None:
        logger.info(f"VID:PID: {info.vid:04X}:{info.pid:04X}")
    if info.manufacturer:
        logger.info(f"Manufacturer: {info.manufacturer}")
    if info.serial_number:
        logger.info(f"Serial Number: {info.serial_number}")


def open_serial(device: str, config: LineConfig) -> serial.Serial:
    """Open and configure a serial port."""
    ser = serial.Serial(
        port=device,
        baudrate=config.baudrate,
        bytesize=config.bytesize,
        parity=config.parity,
        stopbits=config.stopbits,
        xonxoff=False,
        rtscts=False,
        timeout=config.read_timeout_s,
        write_timeout=config.write_timeout_s,
        exclusive=config.exclusive,
    )
    logger.log(
        TRACE,
        "Serial port settings: baudrate=%s, bytesize=%s, parity=%s, stopbits=%s, timeout=%s",
        ser.baudrate,
        ser.bytesize,
        ser.parity,
        ser.stopbits,
        ser.timeout,
    )
    return ser
