"""Server-Sent Events wire format.

Learn: Every event travels as one frame:

    data: {"type": "signal", "payload": "A"}\\n\\n

The JSON body is always the typed envelope {type, payload}, never a bare
payload, so clients can dispatch on "type" without guessing. The blank
line terminates the frame; EventSource parsers split on it.

Encoding lives on the server. Decoding is the client's job, but the
CLI's `listen` command and the tests need it too, so it lives here.
"""

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator

# SSE comment line. Parsers ignore it; proxies see traffic.
KEEPALIVE_FRAME = ": keepalive\n\n"


class FrameError(ValueError):
    """A frame could not be decoded into an event."""


@dataclass(frozen=True)
class Event:
    """One published event. Encoded once per broadcast, never mutated."""

    kind: str
    payload: Any = None


def encode_frame(event: Event) -> str:
    """Serialize an event into a single SSE frame."""
    body = json.dumps(
        {"type": event.kind, "payload": event.payload},
        ensure_ascii=False,
    )
    return f"data: {body}\n\n"


def decode_frame(frame: str) -> Event:
    """Parse one SSE frame back into an event.

    Multiple data lines are joined with newlines, as EventSource
    does. Comment lines and other fields (event:, id:, retry:) are skipped.
    """
    data_lines = []
    for line in frame.splitlines():
        if line.startswith("data:"):
            value = line[len("data:"):]
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

    if not data_lines:
        raise FrameError("Frame carries no data")

    try:
        envelope = json.loads("\n".join(data_lines))
    except json.JSONDecodeError as e:
        raise FrameError(f"Frame data is not JSON: {e}") from e

    if not isinstance(envelope, dict) or "type" not in envelope:
        raise FrameError("Frame data is not a {type, payload} envelope")

    return Event(kind=envelope["type"], payload=envelope.get("payload"))


async def iter_events(lines: AsyncIterator[str]) -> AsyncIterator[Event]:
    """Group streamed text lines into frames and yield decoded events.

    Comment-only frames (keepalives) produce nothing. A trailing frame
    without its blank-line terminator is incomplete and dropped.
    """
    buffer: list[str] = []
    async for line in lines:
        line = line.rstrip("\r\n")
        if line:
            buffer.append(line)
            continue
        if any(part.startswith("data:") for part in buffer):
            yield decode_frame("\n".join(buffer))
        buffer = []
