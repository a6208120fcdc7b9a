"""API route aggregation.

All routers registered here get mounted in main.py. Paths live at the
root (no /api/v1 prefix) because buzzer firmware and existing game pages
call them by fixed URLs.
"""

from fastapi import APIRouter

from buzzhub.api.health import router as health_router
from buzzhub.api.publish import router as publish_router
from buzzhub.api.stream import router as stream_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(stream_router, tags=["stream"])
api_router.include_router(publish_router, tags=["publish"])
