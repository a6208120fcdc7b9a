"""uvicorn server wiring for `buzzhub serve`.

Learn: On SIGINT/SIGTERM uvicorn stops accepting connections, then waits
for the open ones to finish, and only after that runs the lifespan
shutdown. An SSE response never finishes on its own, so with a display
connected the lifespan's hub.close() would never be reached.

RelayServer closes the hub from the exit handler itself, before the
wait starts. Every event_stream sees its subscriber close and returns,
the responses complete, and shutdown proceeds. timeout_graceful_shutdown
bounds the wait in case something else holds a connection open.
"""

import asyncio
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI

from buzzhub.config import Settings
from buzzhub.realtime.hub import BroadcastHub

logger = structlog.get_logger()


class RelayServer(uvicorn.Server):
    """uvicorn.Server that ends open event streams as soon as exit starts."""

    def __init__(self, config: uvicorn.Config, hub: BroadcastHub):
        super().__init__(config)
        self.hub = hub

    def handle_exit(self, sig, frame) -> None:
        super().handle_exit(sig, frame)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Exit requested before the server loop started: no streams yet.
            self.hub.close()
            return
        logger.info("server.exit_requested", signal=sig, subscribers=self.hub.subscriber_count)
        # Signal handlers can interrupt the loop mid-callback.
        loop.call_soon_threadsafe(self.hub.close)


def build_server(
    app: FastAPI,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> RelayServer:
    """Build a RelayServer for an app made by create_app()."""
    config: Settings = app.state.settings
    uv_config = uvicorn.Config(
        app,
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
        timeout_graceful_shutdown=config.shutdown_grace_seconds,
    )
    return RelayServer(uv_config, hub=app.state.hub)
