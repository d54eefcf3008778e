"""Fan-out of decoded events to event stream subscribers."""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import AsyncIterator

from raymote.exceptions import SubscriberClosedError
from raymote.models.session import DecodedEvent
from raymote.utils.logging import get_logger

logger = get_logger(__name__)

KEEPALIVE_INTERVAL = 30.0
KEEPALIVE_FRAME = ": keepalive\n\n"
DEFAULT_SUBSCRIBER_BUFFER = 100


def format_event_frame(event: DecodedEvent) -> str:
    """Render an event as a server-sent events data frame."""
    payload = json.dumps(event.to_wire(), separators=(",", ":"))
    return f"data: {payload}\n\n"


class Subscriber:
    """One live event stream client.

    Frames are buffered in a bounded queue and consumed through frames().
    A full buffer means the client is not keeping up, and delivery fails.
    """

    def __init__(self, subscriber_id: str, buffer_size: int = DEFAULT_SUBSCRIBER_BUFFER) -> None:
        self.id = subscriber_id
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=buffer_size)
        self._keepalive: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def deliver(self, frame: str) -> None:
        """Queue a frame for this subscriber.

        Raises:
            SubscriberClosedError: The subscriber is closed or its buffer is full.
        """
        if self._closed:
            raise SubscriberClosedError(f"Subscriber {self.id} is closed")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull as exc:
            raise SubscriberClosedError(f"Subscriber {self.id} buffer is full") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        task, self._keepalive = self._keepalive, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        # Wake the consumer; pending frames are dropped if there is no room.
        while self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        """Yield queued frames in delivery order until the subscriber closes."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


class EventBroadcaster:
    """Tracks live subscribers and pushes every published event to each one."""

    def __init__(
        self,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
        buffer_size: int = DEFAULT_SUBSCRIBER_BUFFER,
    ) -> None:
        self._keepalive_interval = keepalive_interval
        self._buffer_size = buffer_size
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        """Register a new subscriber and start its keepalive timer.

        Must be called from within the running event loop.
        """
        subscriber = Subscriber(uuid.uuid4().hex, self._buffer_size)
        subscriber._keepalive = asyncio.create_task(
            self._keepalive_loop(subscriber), name=f"keepalive:{subscriber.id}"
        )
        self._subscribers[subscriber.id] = subscriber
        logger.info("subscriber_added", subscriber=subscriber.id, total=self.subscriber_count)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        """Remove a subscriber and stop its keepalive. No-op if already removed.

        Returns:
            True if the subscriber was registered.
        """
        removed = self._subscribers.pop(subscriber.id, None)
        subscriber.close()
        if removed is None:
            return False
        logger.info("subscriber_removed", subscriber=subscriber.id, total=self.subscriber_count)
        return True

    def publish(self, event: DecodedEvent) -> int:
        """Deliver an event to every current subscriber.

        Subscribers that fail delivery are removed; the rest are unaffected.

        Returns:
            Number of subscribers the event was delivered to.
        """
        frame = format_event_frame(event)
        delivered = 0
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber.deliver(frame)
            except SubscriberClosedError as exc:
                logger.warning("subscriber_delivery_failed", subscriber=subscriber.id, error=str(exc))
                self.unsubscribe(subscriber)
                continue
            delivered += 1
        return delivered

    async def events(self) -> AsyncIterator[str]:
        """Subscribe on first iteration and yield frames until the consumer stops.

        Nothing is registered for a consumer that never starts iterating.
        """
        subscriber = self.subscribe()
        try:
            async for frame in subscriber.frames():
                yield frame
        finally:
            self.unsubscribe(subscriber)

    async def stream(self, subscriber: Subscriber) -> AsyncIterator[str]:
        """Yield a subscriber's frames, unsubscribing when the consumer stops."""
        try:
            async for frame in subscriber.frames():
                yield frame
        finally:
            self.unsubscribe(subscriber)

    def close_all(self) -> None:
        for subscriber in list(self._subscribers.values()):
            self.unsubscribe(subscriber)

    async def _keepalive_loop(self, subscriber: Subscriber) -> None:
        while True:
            await asyncio.sleep(self._keepalive_interval)
            try:
                subscriber.deliver(KEEPALIVE_FRAME)
            except SubscriberClosedError:
                self.unsubscribe(subscriber)
                return
