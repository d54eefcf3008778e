"""IR transmitter session: writes one command line per send."""

from __future__ import annotations

import asyncio

from raymote.core.session import SerialSession, run_to_completion
from raymote.exceptions import NotConnectedError, WriteFailedError
from raymote.models.session import SessionRole, TransmitCommand
from raymote.transport.base import DEFAULT_BAUD_RATE, LinkFactory
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


class TransmitterSession(SerialSession):
    """Transmitter role session. No read loop; sends are serialized."""

    role = SessionRole.TRANSMITTER

    def __init__(
        self,
        link_factory: LinkFactory | None = None,
        baud_rate: int = DEFAULT_BAUD_RATE,
    ) -> None:
        super().__init__(link_factory, baud_rate)
        self._write_lock = asyncio.Lock()

    async def send(self, command: TransmitCommand) -> None:
        """Write command as "protocol,bits,code\\n" and wait for the flush.

        Raises:
            NotConnectedError: No transmitter link is open. Nothing is written.
            WriteFailedError: The write or flush failed. Not retried.
        """
        if self._link is None or not self._link.is_open:
            logger.warning("transmit_not_connected", protocol=command.protocol)
            raise NotConnectedError()

        line = command.to_line()
        async with self._write_lock:
            link = self._link
            if link is None or not link.is_open:
                raise NotConnectedError()
            logger.info("transmit_sending", port=link.port, command=line.strip())
            try:
                await run_to_completion(link.write_all, line.encode("utf-8"))
            except OSError as exc:
                logger.error("transmit_write_failed", port=link.port, error=str(exc))
                # A failed write is how an unplugged transmitter shows up.
                await self._fail(link, str(exc))
                raise WriteFailedError(
                    f"Failed to write to {link.port}: {exc}", reason=str(exc)
                ) from exc

    async def _close_link(self) -> None:
        # Never close underneath an in-flight write.
        async with self._write_lock:
            await super()._close_link()
