"""Abstract serial link used by the receiver and transmitter sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

# Fixed by the IR firmware; not configurable.
DEFAULT_BAUD_RATE = 9600


@dataclass(frozen=True)
class SerialConfig:
    """Serial link configuration. Framing is always 8N1."""
    port: str
    baud_rate: int = DEFAULT_BAUD_RATE
    read_timeout: float = 0.5
    write_timeout: float = 5.0


class SerialLink(ABC):
    """Blocking byte-stream link to one USB serial device.

    Sessions call these methods from worker threads via asyncio.to_thread,
    so implementations may block up to their configured timeouts.
    """

    def __init__(self, config: SerialConfig) -> None:
        self._config = config

    @property
    def config(self) -> SerialConfig:
        return self._config

    @property
    def port(self) -> str:
        return self._config.port

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the underlying device handle is open."""

    @abstractmethod
    def open(self) -> None:
        """Open the device. Raises OSError (or a subclass) on failure."""

    @abstractmethod
    def read_chunk(self) -> bytes:
        """Read whatever bytes are available.

        Returns b"" when the read timeout elapses with no data.
        """

    @abstractmethod
    def write_all(self, data: bytes) -> None:
        """Write data in one call and block until it has been flushed."""

    @abstractmethod
    def close(self) -> None:
        """Close the device. Safe to call more than once."""


LinkFactory = Callable[[SerialConfig], SerialLink]
