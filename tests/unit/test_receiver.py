"""Unit tests for ReceiverSession against fake serial devices."""

from __future__ import annotations

import asyncio
import threading

import pytest

from conftest import FakeBus, wait_until
from raymote.core.receiver import ReceiverSession
from raymote.exceptions import ConnectError
from raymote.models.session import SessionRole, SessionState
from raymote.transport.base import DEFAULT_BAUD_RATE


def _drain(queue: asyncio.Queue) -> list:
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


class TestReceiverConnect:
    def test_connect_opens_at_fixed_baud(self, bus: FakeBus):
        bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            result = await session.connect("/dev/ttyUSB0")
            assert result.connected is True
            assert result.role is SessionRole.RECEIVER
            assert session.state is SessionState.CONNECTED
            assert session.port == "/dev/ttyUSB0"
            await session.disconnect()

        asyncio.run(run())
        assert bus.links[0].config.baud_rate == DEFAULT_BAUD_RATE == 9600

    @pytest.mark.parametrize("port", ["", None])
    def test_empty_port_disconnects(self, bus: FakeBus, port):
        bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            result = await session.connect(port)
            assert result.connected is False
            assert session.state is SessionState.DISCONNECTED
            assert session.port is None

        asyncio.run(run())
        assert bus.open_count == 0

    def test_empty_port_when_never_connected(self, bus: FakeBus):
        async def run():
            session = ReceiverSession(bus)
            result = await session.connect("")
            assert result.connected is False
            assert session.state is SessionState.DISCONNECTED

        asyncio.run(run())
        assert bus.links == []

    def test_reconnect_never_holds_two_links(self, bus: FakeBus):
        bus.add("/dev/ttyUSB0")
        bus.add("/dev/ttyUSB1")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            await session.connect("/dev/ttyUSB1")
            await session.connect("/dev/ttyUSB0")
            assert session.port == "/dev/ttyUSB0"
            await session.disconnect()

        asyncio.run(run())
        assert bus.max_open == 1
        assert bus.open_count == 0

    def test_open_failure_raises_and_marks_failed(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")
        device.open_error = PermissionError(13, "Permission denied")

        async def run():
            session = ReceiverSession(bus)
            with pytest.raises(ConnectError) as exc_info:
                await session.connect("/dev/ttyUSB0")
            assert "Permission denied" in exc_info.value.reason
            assert exc_info.value.port == "/dev/ttyUSB0"
            assert session.state is SessionState.FAILED
            assert session.status.reason is not None
            assert not session.is_connected

        asyncio.run(run())

    def test_missing_device_raises_connect_error(self, bus: FakeBus):
        async def run():
            session = ReceiverSession(bus)
            with pytest.raises(ConnectError):
                await session.connect("/dev/ttyUSB9")
            assert session.state is SessionState.FAILED

        asyncio.run(run())

    def test_failed_reconnect_closes_previous_link(self, bus: FakeBus):
        bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            with pytest.raises(ConnectError):
                await session.connect("/dev/ttyUSB9")

        asyncio.run(run())
        assert bus.open_count == 0

    def test_disconnect_during_open_ends_disconnected(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")
        device.open_gate = threading.Event()

        async def run():
            session = ReceiverSession(bus)
            connecting = asyncio.create_task(session.connect("/dev/ttyUSB0"))
            await wait_until(lambda: session.state is SessionState.CONNECTING)
            disconnecting = asyncio.create_task(session.connect(None))
            await asyncio.sleep(0.02)
            assert not disconnecting.done()

            device.open_gate.set()
            opened = await connecting
            closed = await disconnecting
            assert opened.connected is True
            assert closed.connected is False
            assert session.state is SessionState.DISCONNECTED
            assert session.port is None

        asyncio.run(run())
        assert bus.max_open == 1
        assert bus.open_count == 0

    def test_cancelled_connect_closes_the_opened_link(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")
        device.open_gate = threading.Event()

        async def run():
            session = ReceiverSession(bus)
            connecting = asyncio.create_task(session.connect("/dev/ttyUSB0"))
            await wait_until(lambda: session.state is SessionState.CONNECTING)
            connecting.cancel()
            await asyncio.sleep(0.02)
            # The open is still allowed to finish before the cancel lands.
            assert not connecting.done()

            device.open_gate.set()
            with pytest.raises(asyncio.CancelledError):
                await connecting
            assert session.state is SessionState.DISCONNECTED
            assert not session.is_connected

            # The session is still usable afterwards.
            await session.connect("/dev/ttyUSB0")
            await session.disconnect()

        asyncio.run(run())
        assert bus.links[0].is_open is False
        assert bus.max_open == 1
        assert bus.open_count == 0


class TestReceiverEvents:
    def test_only_marker_lines_are_forwarded_in_order(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            device.emit("Decoded NEC 32 0x1", "noise", "Ready to receive")
            await wait_until(lambda: session.events.qsize() >= 2)
            await asyncio.sleep(0.05)
            events = _drain(session.events)
            await session.disconnect()
            return events

        events = asyncio.run(run())
        assert [e.raw_line for e in events] == ["Decoded NEC 32 0x1", "Ready to receive"]
        assert [e.to_wire()["data"] for e in events] == ["Decoded NEC 32 0x1", "Ready to receive"]

    def test_forwarded_count_never_exceeds_lines_read(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")
        lines = ["boot", "Decoded A", "x", "Decoded B", "", "Ready to receive", "y"]

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            device.emit(*lines)
            await wait_until(lambda: device.incoming.empty())
            await asyncio.sleep(0.05)
            events = _drain(session.events)
            await session.disconnect()
            return events

        events = asyncio.run(run())
        assert [e.raw_line for e in events] == ["Decoded A", "Decoded B", "Ready to receive"]
        assert len(events) < len(lines)

    def test_line_split_across_reads(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            device.incoming.put(b"Decoded SO")
            device.incoming.put(b"NY 12 0xA90\r")
            device.incoming.put(b"\n")
            event = await asyncio.wait_for(session.events.get(), timeout=2.0)
            await session.disconnect()
            return event

        event = asyncio.run(run())
        assert event.raw_line == "Decoded SONY 12 0xA90"

    def test_no_events_after_disconnect(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            await session.disconnect()
            device.emit("Decoded NEC 32 0x1")
            await asyncio.sleep(0.1)
            return session.events.qsize()

        assert asyncio.run(run()) == 0

    def test_io_error_marks_session_failed(self, bus: FakeBus):
        device = bus.add("/dev/ttyUSB0")

        async def run():
            session = ReceiverSession(bus)
            await session.connect("/dev/ttyUSB0")
            device.read_error = OSError(5, "Input/output error")
            await wait_until(lambda: session.state is SessionState.FAILED)
            assert session.status.port == "/dev/ttyUSB0"
            assert "Input/output error" in session.status.reason
            assert not session.is_connected

            # The role recovers on the next connect.
            device.read_error = None
            result = await session.connect("/dev/ttyUSB0")
            assert result.connected is True
            await session.disconnect()

        asyncio.run(run())
        assert bus.open_count == 0
