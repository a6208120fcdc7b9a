"""SSE stream endpoint — where game displays connect.

Learn: The response body is an async generator from
realtime.stream.event_stream(). When the browser tab closes, Starlette
cancels the generator and its subscription block unregisters the
client. Nothing here reads the events; it only forwards frames.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from buzzhub.api.deps import get_hub, get_settings
from buzzhub.config import Settings
from buzzhub.realtime.hub import BroadcastHub
from buzzhub.realtime.stream import event_stream

router = APIRouter()

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def stream_response(hub: BroadcastHub, settings: Settings) -> StreamingResponse:
    """Build the long-lived text/event-stream response for one client."""
    frames = event_stream(
        hub,
        keepalive=settings.keepalive_seconds,
        max_pending=settings.max_pending_frames,
        send_timeout=settings.send_timeout_seconds,
    )
    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/stream")
async def stream(
    hub: BroadcastHub = Depends(get_hub),
    settings: Settings = Depends(get_settings),
):
    """Open a live event stream."""
    return stream_response(hub, settings)


@router.get("/game/events", include_in_schema=False)
async def game_events(
    hub: BroadcastHub = Depends(get_hub),
    settings: Settings = Depends(get_settings),
):
    """Path used by older game pages."""
    return stream_response(hub, settings)
