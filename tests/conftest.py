"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import queue
import threading
from pathlib import Path

import pytest

from raymote.transport.base import SerialConfig, SerialLink


class FakeDevice:
    """Scripted stand-in for one USB serial device."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.incoming: queue.Queue[bytes] = queue.Queue()
        self.written: list[bytes] = []
        self.open_error: OSError | None = None
        self.read_error: OSError | None = None
        self.write_error: OSError | None = None
        self.write_delay = 0.0
        # When set, open() blocks until the event is released.
        self.open_gate: threading.Event | None = None

    def emit(self, *lines: str) -> None:
        """Queue firmware output lines, each terminated with CR+LF."""
        for line in lines:
            self.incoming.put(f"{line}\r\n".encode())


class FakeBus:
    """Registry of fake devices that also acts as a LinkFactory."""

    def __init__(self) -> None:
        self.devices: dict[str, FakeDevice] = {}
        self.links: list[FakeLink] = []
        self._lock = threading.Lock()
        self.open_count = 0
        self.max_open = 0

    def add(self, path: str) -> FakeDevice:
        device = FakeDevice(path)
        self.devices[path] = device
        return device

    def __call__(self, config: SerialConfig) -> FakeLink:
        link = FakeLink(config, self)
        self.links.append(link)
        return link

    def _opened(self) -> None:
        with self._lock:
            self.open_count += 1
            self.max_open = max(self.max_open, self.open_count)

    def _closed(self) -> None:
        with self._lock:
            self.open_count -= 1


class FakeLink(SerialLink):
    def __init__(self, config: SerialConfig, bus: FakeBus) -> None:
        super().__init__(config)
        self._bus = bus
        self._open = False
        self.reads = 0

    @property
    def device(self) -> FakeDevice | None:
        return self._bus.devices.get(self.port)

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        device = self.device
        if device is None:
            raise FileNotFoundError(2, "No such file or directory", self.port)
        if device.open_error is not None:
            raise device.open_error
        if device.open_gate is not None:
            device.open_gate.wait(timeout=2.0)
        self._open = True
        self._bus._opened()

    def read_chunk(self) -> bytes:
        device = self.device
        if not self._open or device is None:
            raise OSError("link closed")
        if device.read_error is not None:
            raise device.read_error
        try:
            data = device.incoming.get(timeout=0.02)
        except queue.Empty:
            return b""
        self.reads += 1
        return data

    def write_all(self, data: bytes) -> None:
        device = self.device
        if not self._open or device is None:
            raise OSError("link closed")
        if device.write_error is not None:
            raise device.write_error
        if device.write_delay:
            threading.Event().wait(device.write_delay)
        device.written.append(data)

    def close(self) -> None:
        if self._open:
            self._open = False
            self._bus._closed()


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll predicate on the running loop until it is true or time runs out."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)
