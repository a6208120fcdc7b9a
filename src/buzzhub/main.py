"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance owning one BroadcastHub. The hub lives as long as the app:
built here, closed in the lifespan shutdown so open streams end cleanly.
Tests call create_app() with their own hub to stay isolated.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from buzzhub import __version__
from buzzhub.api import api_router
from buzzhub.config import Settings, settings as default_settings
from buzzhub.log import configure_logging
from buzzhub.middleware.cors import PublishCorsMiddleware
from buzzhub.middleware.request_id import RequestIdMiddleware
from buzzhub.realtime.hub import BroadcastHub

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Closing the hub ends every SSE response still open.
    """
    config: Settings = app.state.settings
    configure_logging(config.log_level, json=config.log_json)
    logger.info(
        "buzzhub.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
    )

    yield

    logger.info("buzzhub.shutdown", subscribers=app.state.hub.subscriber_count)
    app.state.hub.close()


def create_app(
    settings: Optional[Settings] = None,
    hub: Optional[BroadcastHub] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Buzzhub",
        description="Real-time signal relay for quiz buzzer games",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.hub = hub if hub is not None else BroadcastHub()

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → PublishCors → handler
    app.add_middleware(PublishCorsMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by `buzzhub serve` and uvicorn: buzzhub.main:app)
app = create_app()
