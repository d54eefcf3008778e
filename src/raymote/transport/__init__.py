"""Serial transport layer."""

from raymote.transport.base import DEFAULT_BAUD_RATE, LinkFactory, SerialConfig, SerialLink
from raymote.transport.serial_link import PySerialLink, open_pyserial_link

__all__ = [
    "DEFAULT_BAUD_RATE",
    "LinkFactory",
    "PySerialLink",
    "SerialConfig",
    "SerialLink",
    "open_pyserial_link",
]
