"""Request dependencies — hand the app's hub and settings to handlers.

Learn: The hub is built once by create_app() and parked on app.state.
Handlers ask for it with Depends(get_hub) instead of importing a global,
so each test app gets its own isolated hub.
"""

from fastapi import Request

from buzzhub.config import Settings
from buzzhub.realtime.hub import BroadcastHub


def get_hub(request: Request) -> BroadcastHub:
    return request.app.state.hub


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
