"""Session supervisor: owns both serial sessions and the event broadcaster.

One instance is created at process start and torn down at shutdown. It is
the only entry point the HTTP layer uses to reach the hardware.

Usage:
    supervisor = SessionSupervisor(JsonConfigStore(path))
    await supervisor.start()
    await supervisor.bootstrap()
    ...
    await supervisor.shutdown()
"""

from __future__ import annotations

import asyncio

from raymote.core.broadcaster import KEEPALIVE_INTERVAL, EventBroadcaster, Subscriber
from raymote.core.ports import list_ports
from raymote.core.receiver import ReceiverSession
from raymote.core.session import SerialSession
from raymote.core.transmitter import TransmitterSession
from raymote.exceptions import ConnectError, PersistError
from raymote.models.session import (
    ConnectResult,
    PortDescriptor,
    SessionRole,
    SessionStatus,
    TransmitCommand,
)
from raymote.store.config_store import ConfigStore
from raymote.transport.base import LinkFactory
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


class SessionSupervisor:
    """Top-level owner of the receiver, transmitter and broadcaster."""

    def __init__(
        self,
        config_store: ConfigStore,
        link_factory: LinkFactory | None = None,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
    ) -> None:
        self._config_store = config_store
        self._receiver = ReceiverSession(link_factory)
        self._transmitter = TransmitterSession(link_factory)
        self._broadcaster = EventBroadcaster(keepalive_interval=keepalive_interval)
        self._pump: asyncio.Task[None] | None = None

    @property
    def receiver(self) -> ReceiverSession:
        return self._receiver

    @property
    def transmitter(self) -> TransmitterSession:
        return self._transmitter

    @property
    def broadcaster(self) -> EventBroadcaster:
        return self._broadcaster

    def session(self, role: SessionRole) -> SerialSession:
        if role is SessionRole.RECEIVER:
            return self._receiver
        return self._transmitter

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start forwarding receiver events to subscribers."""
        if self._pump is not None:
            return
        self._pump = asyncio.create_task(self._pump_events(), name="event-pump")
        logger.info("supervisor_started")

    async def bootstrap(self) -> None:
        """Reconnect each role to its persisted port.

        Failures are logged per role and never abort startup.
        """
        config = await asyncio.to_thread(self._config_store.load)
        for role in SessionRole:
            port = config.port_for(role)
            if not port:
                continue
            logger.info("bootstrap_reconnecting", role=role, port=port)
            try:
                await self.session(role).connect(port)
            except ConnectError as exc:
                logger.error("bootstrap_reconnect_failed", role=role, port=port, error=exc.reason)

    async def shutdown(self) -> None:
        """Close both sessions, stop the event pump and drop all subscribers."""
        pump, self._pump = self._pump, None
        if pump is not None:
            pump.cancel()
            await asyncio.wait({pump})
        for role in SessionRole:
            await self.session(role).disconnect()
        self._broadcaster.close_all()
        logger.info("supervisor_stopped")

    # --- Dispatcher operations ---

    def list_ports(self) -> list[PortDescriptor]:
        return list_ports()

    async def connect(self, role: SessionRole, port: str | None) -> ConnectResult:
        """Connect (or, with an empty port, disconnect) a role and persist it.

        Raises:
            ConnectError: If the port cannot be opened. Nothing is persisted.
        """
        result = await self.session(role).connect(port)
        await self._persist(role, result.port)
        return result

    async def send(self, command: TransmitCommand) -> None:
        await self._transmitter.send(command)

    def subscribe(self) -> Subscriber:
        return self._broadcaster.subscribe()

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        return self._broadcaster.unsubscribe(subscriber)

    def status(self) -> list[SessionStatus]:
        return [self.session(role).status for role in SessionRole]

    # --- Internals ---

    async def _persist(self, role: SessionRole, port: str | None) -> None:
        try:
            config = await asyncio.to_thread(self._config_store.load)
            await asyncio.to_thread(self._config_store.save, config.with_port(role, port))
        except PersistError as exc:
            logger.error("config_persist_failed", role=role, error=str(exc))

    async def _pump_events(self) -> None:
        channel = self._receiver.events
        while True:
            event = await channel.get()
            self._broadcaster.publish(event)
