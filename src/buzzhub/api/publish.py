"""Publish API — turn buzzer hits and admin actions into hub events.

Learn: These handlers are thin shims. Each one validates its input,
builds an Event, and awaits hub.broadcast(). A malformed request gets a
400 and never reaches the hub. Broadcasting to nobody is not an error:
with zero displays connected the publisher still gets a 200.

Endpoints:
- GET  /publish-signal?sig=A         buzzer press (also /api/signal, /?sig=A)
- GET  /publish-score?sig=A&score=10 score pushed from a URL
- POST /publish-update               team list and/or score change
"""

import json
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from buzzhub import __version__
from buzzhub.api.deps import get_hub
from buzzhub.events.types import SCORE, SCORE_UPDATE, SIGNAL, TEAMS
from buzzhub.realtime.hub import BroadcastHub
from buzzhub.realtime.wire import Event
from buzzhub.schemas.publish import PublishResult, PublishUpdate

logger = structlog.get_logger()
router = APIRouter()


def _result(success: bool, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    body = PublishResult(success=success, message=message)
    return JSONResponse(body.model_dump(exclude_none=True), status_code=status_code)


async def _publish_signal(hub: BroadcastHub, sig: Optional[str]) -> PlainTextResponse:
    if not sig:
        return PlainTextResponse('Missing "sig" query parameter', status_code=400)

    await hub.broadcast(Event(kind=SIGNAL, payload=sig))
    logger.info("publish.signal", sig=sig)
    return PlainTextResponse(f"Signal '{sig}' received.")


# ─── Signals ─────────────────────────────────────────────


@router.get("/publish-signal", response_class=PlainTextResponse)
async def publish_signal(
    sig: Optional[str] = None,
    hub: BroadcastHub = Depends(get_hub),
):
    """Broadcast which team buzzed in."""
    return await _publish_signal(hub, sig)


@router.get("/api/signal", response_class=PlainTextResponse, include_in_schema=False)
async def publish_signal_legacy(
    sig: Optional[str] = None,
    hub: BroadcastHub = Depends(get_hub),
):
    """Older buzzer firmware path."""
    return await _publish_signal(hub, sig)


@router.get("/")
async def root(
    sig: Optional[str] = None,
    hub: BroadcastHub = Depends(get_hub),
):
    """Buzzer hardware hits the bare root URL with ?sig=.

    Without a signal this just describes the service.
    """
    if sig is not None:
        return await _publish_signal(hub, sig)
    return {"service": "buzzhub", "version": __version__, "stream": "/stream"}


# ─── Scores ──────────────────────────────────────────────


@router.get("/publish-score")
async def publish_score(
    sig: Optional[str] = None,
    score: Optional[str] = None,
    hub: BroadcastHub = Depends(get_hub),
):
    """Broadcast an absolute score for the team with this signal."""
    if not sig or not score:
        return _result(False, "Missing sig or score", status_code=400)

    try:
        value = int(score)
    except ValueError:
        return _result(False, "score must be an integer", status_code=400)

    await hub.broadcast(Event(kind=SCORE, payload={"sig": sig, "score": value}))
    logger.info("publish.score", sig=sig, score=value)
    return _result(True)


@router.post("/publish-update")
async def publish_update(
    request: Request,
    hub: BroadcastHub = Depends(get_hub),
):
    """Broadcast a new team list and/or a relative score change.

    Learn: The body is parsed by hand instead of declared as a model
    parameter, so malformed input answers 400 like every other publish
    endpoint rather than FastAPI's 422.
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _result(False, "Body must be JSON", status_code=400)

    try:
        update = PublishUpdate.model_validate(data)
    except ValidationError as e:
        return _result(False, f"Invalid update: {e.error_count()} error(s)", status_code=400)

    published = False

    teams = update.teams_payload()
    if teams is not None:
        await hub.broadcast(Event(kind=TEAMS, payload=teams))
        logger.info("publish.teams", teams=len(teams))
        published = True

    score_update = update.score_update_payload()
    if score_update is not None:
        await hub.broadcast(Event(kind=SCORE_UPDATE, payload=score_update))
        logger.info(
            "publish.score_update",
            team_name=update.team_name,
            score_change=update.score_change,
        )
        published = True

    if not published:
        return _result(False, "Nothing to publish: send teams or teamName with scoreChange", status_code=400)
    return _result(True)
