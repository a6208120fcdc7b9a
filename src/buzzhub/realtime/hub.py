"""Broadcast hub — in-memory registry of open event streams.

Learn: The hub is the only shared mutable state in the server. One
instance is built by the app factory and handed to request handlers via
a FastAPI dependency; nothing imports it as a global.

Fan-out model:
1. broadcast() encodes the event once
2. It snapshots the registry, then writes the frame to every subscriber
   concurrently, each write bounded by the subscriber's send timeout
3. Every write produces a Delivery result; failed ones are evicted

Nothing checks liveness in the background. A subscriber whose stream died
is discovered by the next broadcast that fails to write to it (lazy
eviction).

Concurrency: everything runs on one asyncio event loop, so set mutations
never interleave. An unsubscribe landing while a broadcast is awaiting
writes only touches the live set, not the snapshot being delivered to.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from buzzhub.realtime.wire import Event, encode_frame

logger = structlog.get_logger()

# Queued by close() so a waiting reader wakes up and stops.
_CLOSED = object()


class HubError(Exception):
    """Base error for hub and subscriber operations."""


class SubscriberClosed(HubError):
    """Write attempted on a subscriber whose stream has ended."""


class Subscriber:
    """Handle for one open outbound stream.

    Owned by the connection adapter that created it. The hub only keeps
    a reference for fan-out. It closes a handle only when evicting it,
    which ends that stream so the browser reconnects with a fresh one.

    Frames go into a bounded queue that the streaming response drains.
    A client that stops reading fills the queue, and the next send()
    times out instead of blocking the publisher.
    """

    def __init__(self, max_pending: int = 64, send_timeout: float = 1.0):
        self.id = uuid.uuid4().hex
        self.send_timeout = send_timeout
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Frames written but not yet consumed by the stream."""
        return self._queue.qsize()

    async def send(self, frame: str) -> None:
        """Queue a frame for this client.

        Raises SubscriberClosed if the stream has ended, and
        asyncio.TimeoutError if the buffer stays full past send_timeout.
        """
        if self._closed:
            raise SubscriberClosed(f"Subscriber {self.id} is closed")
        await asyncio.wait_for(self._queue.put(frame), timeout=self.send_timeout)

    async def receive(self) -> Optional[str]:
        """Next queued frame, or None once the subscriber is closed."""
        if self._closed and self._queue.empty():
            return None
        frame = await self._queue.get()
        if frame is _CLOSED:
            return None
        return frame

    def close(self) -> None:
        """End the stream. Pending frames are dropped. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Subscriber {self.id[:8]} {state}>"


@dataclass(frozen=True)
class Delivery:
    """Outcome of writing one frame to one subscriber."""

    subscriber: Subscriber
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BroadcastResult:
    """Diagnostic summary of one broadcast. Never an error signal."""

    delivered: int = 0
    evicted: int = 0


class BroadcastHub:
    """Registry of subscribers plus the broadcast algorithm."""

    def __init__(self):
        self._subscribers: set[Subscriber] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        return subscriber in self._subscribers

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register a subscriber. Re-adding one is a no-op.

        Once the hub is closed for shutdown, new subscribers are closed
        instead of registered, so a stream opened during shutdown ends
        right away.
        """
        if self._closed:
            logger.debug("hub.subscribe_refused", subscriber=subscriber.id)
            subscriber.close()
            return
        if subscriber in self._subscribers:
            return
        self._subscribers.add(subscriber)
        logger.info(
            "hub.subscribed",
            subscriber=subscriber.id,
            subscribers=len(self._subscribers),
        )

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Drop a subscriber. Unknown or already-removed handles are ignored.

        Both the eviction path and the stream's release path call this,
        often for the same handle.
        """
        if subscriber not in self._subscribers:
            return
        self._subscribers.discard(subscriber)
        logger.info(
            "hub.unsubscribed",
            subscriber=subscriber.id,
            subscribers=len(self._subscribers),
        )

    async def broadcast(self, event: Event) -> BroadcastResult:
        """Send an event to every registered subscriber.

        Learn: Never raises for delivery problems. A subscriber that fails
        (closed stream, full buffer past its timeout, anything else) is
        evicted and the rest still get the frame. With no subscribers this
        returns before encoding anything, which is the normal idle state.
        """
        if not self._subscribers:
            logger.debug("hub.broadcast_skipped", kind=event.kind)
            return BroadcastResult()

        frame = encode_frame(event)
        targets = tuple(self._subscribers)
        logger.info("hub.broadcast", kind=event.kind, subscribers=len(targets))

        deliveries = await asyncio.gather(
            *(self._deliver(subscriber, frame) for subscriber in targets)
        )

        evicted = 0
        for delivery in deliveries:
            if delivery.ok:
                continue
            logger.warning(
                "hub.evicted",
                subscriber=delivery.subscriber.id,
                error=repr(delivery.error),
            )
            self.unsubscribe(delivery.subscriber)
            delivery.subscriber.close()
            evicted += 1

        return BroadcastResult(delivered=len(deliveries) - evicted, evicted=evicted)

    def close(self) -> None:
        """Close every subscriber and empty the registry (server shutdown).

        Plain function so a signal handler can schedule it with
        loop.call_soon_threadsafe. Safe to call twice.
        """
        self._closed = True
        subscribers = tuple(self._subscribers)
        self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.close()
        if subscribers:
            logger.info("hub.closed", subscribers=len(subscribers))

    @staticmethod
    async def _deliver(subscriber: Subscriber, frame: str) -> Delivery:
        try:
            await subscriber.send(frame)
        except Exception as e:
            return Delivery(subscriber=subscriber, error=e)
        return Delivery(subscriber=subscriber)
