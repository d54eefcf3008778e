"""USB serial port enumeration."""

from __future__ import annotations

import re

import serial.tools.list_ports

from raymote.exceptions import EnumerationError
from raymote.models.session import PortDescriptor
from raymote.utils.logging import get_logger

logger = get_logger(__name__)

# USB-serial adapters and USB-ACM boards only; onboard ttyS* ports are excluded.
_USB_SERIAL_PATTERN = re.compile(r"tty(USB|ACM)")


def is_usb_serial_path(path: str) -> bool:
    """Check whether a device path follows the USB serial naming convention."""
    return bool(path) and _USB_SERIAL_PATTERN.search(path) is not None


def list_ports() -> list[PortDescriptor]:
    """List USB serial devices visible to the OS, in enumeration order.

    Returns:
        Descriptors for ttyUSB*/ttyACM* devices. May be empty.

    Raises:
        EnumerationError: If the OS enumeration itself fails.
    """
    try:
        found = serial.tools.list_ports.comports()
    except OSError as exc:
        logger.error("port_enumeration_failed", error=str(exc))
        raise EnumerationError(f"Failed to list serial ports: {exc}", reason=str(exc)) from exc

    ports = [
        PortDescriptor(path=p.device, manufacturer=p.manufacturer or "Unknown")
        for p in found
        if is_usb_serial_path(p.device)
    ]
    logger.debug("ports_listed", total=len(found), usb=len(ports))
    return ports
