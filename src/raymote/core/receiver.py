"""IR receiver session: reads decoded lines and emits events."""

from __future__ import annotations

import asyncio

from raymote.core.framing import LineFramer, is_reportable
from raymote.core.session import SerialSession
from raymote.models.session import DecodedEvent, SessionRole
from raymote.transport.base import DEFAULT_BAUD_RATE, LinkFactory, SerialLink
from raymote.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHANNEL_SIZE = 256


class ReceiverSession(SerialSession):
    """Receiver role session.

    While connected a background task reads the link, frames CR+LF lines and
    puts every marker-bearing line on the events channel as a DecodedEvent.
    Lines are queued in read order. The channel is bounded; when nobody
    drains it new events are dropped with a warning.
    """

    role = SessionRole.RECEIVER

    def __init__(
        self,
        link_factory: LinkFactory | None = None,
        baud_rate: int = DEFAULT_BAUD_RATE,
        channel: asyncio.Queue[DecodedEvent] | None = None,
    ) -> None:
        super().__init__(link_factory, baud_rate)
        self._channel: asyncio.Queue[DecodedEvent] = channel or asyncio.Queue(
            maxsize=DEFAULT_CHANNEL_SIZE
        )
        self._reader: asyncio.Task[None] | None = None

    @property
    def events(self) -> asyncio.Queue[DecodedEvent]:
        """Channel of decoded events, consumed by the broadcaster pump."""
        return self._channel

    def _on_opened(self, link: SerialLink) -> None:
        self._reader = asyncio.create_task(
            self._read_loop(link), name=f"receiver-reader:{link.port}"
        )

    async def _on_closing(self, link: SerialLink) -> None:
        reader, self._reader = self._reader, None
        if reader is None or reader.done():
            return
        reader.cancel()
        await asyncio.wait({reader})

    async def _read_loop(self, link: SerialLink) -> None:
        framer = LineFramer()
        try:
            while True:
                chunk = await asyncio.to_thread(link.read_chunk)
                # Data from a link that was replaced or closed meanwhile is stale.
                if self._link is not link:
                    return
                for line in framer.feed(chunk):
                    self._handle_line(line)
        except OSError as exc:
            await self._fail(link, str(exc))

    def _handle_line(self, line: str) -> None:
        if not is_reportable(line):
            logger.debug("receiver_line_ignored", line=line)
            return
        event = DecodedEvent(raw_line=line)
        logger.info("receiver_line_decoded", line=line, timestamp=event.to_wire()["timestamp"])
        try:
            self._channel.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("receiver_channel_full", dropped=line)
