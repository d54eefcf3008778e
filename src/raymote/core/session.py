"""Shared lifecycle for a single-role serial session."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

from raymote.exceptions import ConnectError
from raymote.models.session import ConnectResult, SessionRole, SessionState, SessionStatus
from raymote.transport.base import DEFAULT_BAUD_RATE, LinkFactory, SerialConfig, SerialLink
from raymote.transport.serial_link import open_pyserial_link
from raymote.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def run_to_completion(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking call in a worker thread.

    If the caller is cancelled the call is still allowed to finish before
    CancelledError propagates, so a link is never left half-opened or
    half-written behind our back.
    """
    task = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        await asyncio.wait({task})
        if not task.cancelled():
            task.exception()
        raise


class SerialSession:
    """Owns at most one open SerialLink for a role.

    Connect and disconnect requests are serialized by a lock, and any
    existing link is closed before a new one is opened.
    """

    role: SessionRole

    def __init__(
        self,
        link_factory: LinkFactory | None = None,
        baud_rate: int = DEFAULT_BAUD_RATE,
    ) -> None:
        self._link_factory = link_factory or open_pyserial_link
        self._baud_rate = baud_rate
        self._link: SerialLink | None = None
        self._lock = asyncio.Lock()
        self._state = SessionState.DISCONNECTED
        self._port: str | None = None
        self._reason: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def port(self) -> str | None:
        return self._port

    @property
    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED and self._link is not None

    @property
    def status(self) -> SessionStatus:
        return SessionStatus(
            role=self.role,
            state=self._state,
            port=self._port,
            reason=self._reason,
        )

    def _set_state(
        self,
        state: SessionState,
        port: str | None = None,
        reason: str | None = None,
    ) -> None:
        self._state = state
        self._port = port
        self._reason = reason

    async def connect(self, port: str | None) -> ConnectResult:
        """Open port for this role, or close the current link if port is empty.

        Raises:
            ConnectError: If the device cannot be opened.
        """
        async with self._lock:
            await self._close_link()

            if not port:
                self._set_state(SessionState.DISCONNECTED)
                logger.info("session_disconnected", role=self.role)
                return ConnectResult(role=self.role, port=None, connected=False)

            self._set_state(SessionState.CONNECTING, port)
            logger.info("session_connecting", role=self.role, port=port)
            link = self._link_factory(SerialConfig(port=port, baud_rate=self._baud_rate))

            try:
                await run_to_completion(link.open)
            except asyncio.CancelledError:
                await asyncio.to_thread(link.close)
                self._set_state(SessionState.DISCONNECTED)
                logger.info("session_connect_cancelled", role=self.role, port=port)
                raise
            except (OSError, ValueError) as exc:
                link.close()
                self._set_state(SessionState.FAILED, port, str(exc))
                logger.error("session_connect_failed", role=self.role, port=port, error=str(exc))
                raise ConnectError(port, str(exc)) from exc

            self._link = link
            self._set_state(SessionState.CONNECTED, port)
            self._on_opened(link)
            logger.info("session_connected", role=self.role, port=port)
            return ConnectResult(role=self.role, port=port, connected=True)

    async def disconnect(self) -> None:
        await self.connect(None)

    def _on_opened(self, link: SerialLink) -> None:
        """Hook for subclasses; called once a new link is live."""

    async def _close_link(self) -> None:
        link, self._link = self._link, None
        if link is None:
            return
        logger.debug("session_closing", role=self.role, port=link.port)
        await self._on_closing(link)
        await asyncio.to_thread(link.close)

    async def _on_closing(self, link: SerialLink) -> None:
        """Hook for subclasses; called before a link is closed."""

    async def _fail(self, link: SerialLink, reason: str) -> None:
        """Drop a link after an unsolicited I/O error."""
        if self._link is not link:
            return
        self._link = None
        self._set_state(SessionState.FAILED, link.port, reason)
        logger.error("session_io_error", role=self.role, port=link.port, error=reason)
        await asyncio.to_thread(link.close)
