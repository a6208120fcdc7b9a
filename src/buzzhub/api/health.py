"""Health check endpoint.

Learn: Also the one place the registry size is visible from outside,
which is handy when checking that every display in the hall connected.
"""

from fastapi import APIRouter, Depends

from buzzhub import __version__
from buzzhub.api.deps import get_hub
from buzzhub.realtime.hub import BroadcastHub

router = APIRouter()


@router.get("/health")
async def health_check(hub: BroadcastHub = Depends(get_hub)):
    """Report server status and the number of connected displays."""
    return {
        "status": "ok",
        "version": __version__,
        "subscribers": hub.subscriber_count,
    }
