"""pyserial implementation of SerialLink."""

from __future__ import annotations

import serial

from raymote.transport.base import SerialConfig, SerialLink
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


class PySerialLink(SerialLink):
    """Serial link backed by pyserial.

    The port string is passed to serial.serial_for_url, so plain device
    paths and pyserial URLs (loop://, socket://, rfc2217://) both work.
    serial.SerialException subclasses OSError, which is what callers catch.
    """

    def __init__(self, config: SerialConfig) -> None:
        super().__init__(config)
        self._serial: serial.SerialBase | None = None

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        if self.is_open:
            return
        logger.debug("serial_opening", port=self.port, baud=self._config.baud_rate)
        self._serial = serial.serial_for_url(
            self.port,
            baudrate=self._config.baud_rate,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            timeout=self._config.read_timeout,
            write_timeout=self._config.write_timeout,
        )
        logger.debug("serial_opened", port=self.port)

    def read_chunk(self) -> bytes:
        ser = self._require_open()
        # Block for the first byte (up to read_timeout), then drain the rest.
        data = ser.read(1)
        if data and ser.in_waiting:
            data += ser.read(ser.in_waiting)
        return data

    def write_all(self, data: bytes) -> None:
        ser = self._require_open()
        ser.write(data)
        ser.flush()

    def close(self) -> None:
        ser, self._serial = self._serial, None
        if ser is None:
            return
        try:
            if hasattr(ser, "cancel_read"):
                ser.cancel_read()
            ser.close()
        except (serial.SerialException, OSError):
            logger.warning("serial_close_error", port=self.port, exc_info=True)
        logger.debug("serial_closed", port=self.port)

    def _require_open(self) -> serial.SerialBase:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise OSError(f"Serial port {self.port} is not open")
        return ser


def open_pyserial_link(config: SerialConfig) -> SerialLink:
    """Default LinkFactory: build an unopened PySerialLink."""
    return PySerialLink(config)
