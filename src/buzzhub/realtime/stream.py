"""Connection adapter — ties one SSE response to the hub.

Learn: A subscription is a scoped resource. open_subscription() registers
a fresh Subscriber on entry and, in its finally block, always unregisters
and closes it. The block runs on every way out of a stream:

- the client disconnects (Starlette cancels the response generator)
- the server closes the subscriber (shutdown)
- an error is raised while writing

Unregistering twice is harmless, so it doesn't matter whether a failed
broadcast already evicted the handle.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from buzzhub.realtime.hub import BroadcastHub, Subscriber
from buzzhub.realtime.wire import KEEPALIVE_FRAME

logger = structlog.get_logger()


@asynccontextmanager
async def open_subscription(
    hub: BroadcastHub,
    max_pending: int = 64,
    send_timeout: float = 1.0,
) -> AsyncIterator[Subscriber]:
    """Register a new subscriber for the duration of the block."""
    subscriber = Subscriber(max_pending=max_pending, send_timeout=send_timeout)
    hub.subscribe(subscriber)
    try:
        yield subscriber
    finally:
        hub.unsubscribe(subscriber)
        subscriber.close()


async def event_stream(
    hub: BroadcastHub,
    keepalive: float = 15.0,
    max_pending: int = 64,
    send_timeout: float = 1.0,
) -> AsyncIterator[str]:
    """Yield SSE frames for one client until its subscription ends.

    Sends a keepalive comment after `keepalive` seconds without events
    (0 disables them).
    """
    async with open_subscription(
        hub, max_pending=max_pending, send_timeout=send_timeout
    ) as subscriber:
        logger.debug("stream.opened", subscriber=subscriber.id)
        while True:
            if keepalive > 0:
                try:
                    frame = await asyncio.wait_for(subscriber.receive(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield KEEPALIVE_FRAME
                    continue
            else:
                frame = await subscriber.receive()

            if frame is None:
                logger.debug("stream.ended", subscriber=subscriber.id)
                return
            yield frame
