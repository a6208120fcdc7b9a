"""Connection adapter tests — subscription lifetime and SSE responses.

Learn: The streaming generator is driven by hand here instead of
through an HTTP client: ASGITransport buffers whole responses, which
never finishes for an endless stream. Closing the generator is exactly
what Starlette does when the browser disconnects.
"""

import asyncio

import pytest

from buzzhub.api.stream import stream_response
from buzzhub.events.types import SIGNAL
from buzzhub.realtime.stream import event_stream, open_subscription
from buzzhub.realtime.wire import KEEPALIVE_FRAME, Event, decode_frame


async def next_frame(stream) -> str:
    return await stream.__anext__()


async def wait_for_subscribers(hub, count: int) -> None:
    for _ in range(100):
        if hub.subscriber_count == count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} subscribers, have {hub.subscriber_count}")


# ═══════════════════════════════════════════════════════════
# open_subscription
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_subscription_registers_and_releases(hub):
    async with open_subscription(hub) as sub:
        assert sub in hub
    assert sub not in hub
    assert sub.closed


@pytest.mark.asyncio
async def test_subscription_releases_on_error(hub):
    with pytest.raises(RuntimeError):
        async with open_subscription(hub) as sub:
            raise RuntimeError("transport blew up")
    assert len(hub) == 0
    assert sub.closed


@pytest.mark.asyncio
async def test_release_after_eviction_is_safe(hub):
    """Eviction by a broadcast, then the stream's own cleanup."""
    async with open_subscription(hub) as sub:
        sub.close()
        await hub.broadcast(Event(kind=SIGNAL, payload="A"))
        assert sub not in hub
    assert len(hub) == 0


@pytest.mark.asyncio
async def test_subscription_uses_given_limits(hub):
    async with open_subscription(hub, max_pending=2, send_timeout=0.25) as sub:
        assert sub.send_timeout == 0.25
        await sub.send("one")
        await sub.send("two")
        with pytest.raises(asyncio.TimeoutError):
            await sub.send("three")


# ═══════════════════════════════════════════════════════════
# event_stream
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_stream_yields_broadcast_frames(hub):
    stream = event_stream(hub, keepalive=0)
    pending = asyncio.create_task(next_frame(stream))
    await wait_for_subscribers(hub, 1)

    await hub.broadcast(Event(kind=SIGNAL, payload="A"))

    frame = await asyncio.wait_for(pending, timeout=1.0)
    assert decode_frame(frame) == Event(kind=SIGNAL, payload="A")
    await stream.aclose()


@pytest.mark.asyncio
async def test_client_disconnect_unsubscribes(hub):
    stream = event_stream(hub, keepalive=0)
    pending = asyncio.create_task(next_frame(stream))
    await wait_for_subscribers(hub, 1)

    await hub.broadcast(Event(kind=SIGNAL, payload="A"))
    await asyncio.wait_for(pending, timeout=1.0)
    await stream.aclose()

    assert len(hub) == 0


@pytest.mark.asyncio
async def test_cancelled_stream_unsubscribes_without_events(hub):
    """Release fires even if nothing was ever broadcast."""
    stream = event_stream(hub, keepalive=0)
    pending = asyncio.create_task(next_frame(stream))
    await wait_for_subscribers(hub, 1)

    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert len(hub) == 0


@pytest.mark.asyncio
async def test_stream_sends_keepalive_when_idle(hub):
    stream = event_stream(hub, keepalive=0.01)
    frame = await asyncio.wait_for(next_frame(stream), timeout=1.0)
    assert frame == KEEPALIVE_FRAME
    await stream.aclose()
    assert len(hub) == 0


@pytest.mark.asyncio
async def test_stream_ends_when_hub_closes(hub):
    stream = event_stream(hub, keepalive=0)
    pending = asyncio.create_task(next_frame(stream))
    await wait_for_subscribers(hub, 1)

    hub.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(pending, timeout=1.0)


# ═══════════════════════════════════════════════════════════
# SSE response
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_stream_response_headers(hub, test_settings):
    response = stream_response(hub, test_settings)

    assert response.media_type == "text/event-stream"
    assert response.headers["content-type"] == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["connection"] == "keep-alive"

    # Nothing registers until the body starts streaming
    assert len(hub) == 0
    await response.body_iterator.aclose()


@pytest.mark.asyncio
async def test_stream_response_delivers_frames(hub, test_settings):
    response = stream_response(hub, test_settings)
    pending = asyncio.create_task(next_frame(response.body_iterator))
    await wait_for_subscribers(hub, 1)

    await hub.broadcast(Event(kind="teams", payload=[]))

    frame = await asyncio.wait_for(pending, timeout=1.0)
    assert frame == 'data: {"type": "teams", "payload": []}\n\n'
    await response.body_iterator.aclose()
    assert len(hub) == 0
