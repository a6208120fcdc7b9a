"""Buzzhub CLI — run the relay, fire test signals, watch the stream.

Usage:
    buzzhub serve                       # Start the relay server
    buzzhub signal A                    # Team A buzzed in
    buzzhub score A 10                  # Push team A's score
    buzzhub update --teams-file t.json  # Replace the team list
    buzzhub update -n "Team 1" -c 5     # Relative score change
    buzzhub listen                      # Print events as displays see them
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from buzzhub import __version__
from buzzhub.realtime.wire import FrameError, iter_events

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_URL = "http://localhost:9090"


def _server_url() -> str:
    return os.environ.get("BUZZHUB_URL", DEFAULT_URL).rstrip("/")


def _client(timeout: Optional[float] = 10.0) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the relay."""
    return httpx.AsyncClient(base_url=_server_url(), timeout=timeout)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when an event loop is already running
    (CliRunner inside async tests).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _report(r: httpx.Response) -> None:
    """Echo a publish response; exit non-zero on a 4xx/5xx."""
    text = r.text.strip()
    if r.is_success:
        click.secho(text or "ok", fg="green")
        return
    _fail(f"{r.status_code} {text}")


def _kind_color(kind: str) -> str:
    colors = {
        "signal": "yellow",
        "score": "cyan",
        "score_update": "cyan",
        "teams": "magenta",
    }
    return colors.get(kind, "white")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="buzzhub")
def main():
    """Buzzhub — real-time signal relay for quiz buzzer games."""


# ---------------------------------------------------------------------------
# buzzhub serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", help="Bind address (default: BUZZHUB_HOST or 0.0.0.0)")
@click.option("--port", "-p", type=int, help="Port (default: BUZZHUB_PORT or 9090)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the relay server.

    Ctrl-C closes every open stream first, so connected displays never
    hold the shutdown. With --reload uvicorn runs the app in a worker
    process, and open streams are cut after BUZZHUB_SHUTDOWN_GRACE_SECONDS.
    """
    import uvicorn

    from buzzhub.config import settings

    if reload:
        uvicorn.run(
            "buzzhub.main:app",
            host=host or settings.host,
            port=port or settings.port,
            reload=True,
            log_level=settings.log_level.lower(),
            timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        )
        return

    from buzzhub.main import app
    from buzzhub.server import build_server

    build_server(app, host=host, port=port).run()


# ---------------------------------------------------------------------------
# buzzhub signal / score / update
# ---------------------------------------------------------------------------


@main.command()
@click.argument("sig")
def signal(sig: str):
    """Publish a buzzer press for the team with signal SIG."""
    _run(_get("/publish-signal", {"sig": sig}))


@main.command()
@click.argument("sig")
@click.argument("value", type=int)
def score(sig: str, value: int):
    """Publish an absolute score VALUE for the team with signal SIG."""
    _run(_get("/publish-score", {"sig": sig, "score": value}))


async def _get(path: str, params: dict):
    async with _client() as c:
        try:
            r = await c.get(path, params=params)
        except httpx.HTTPError as e:
            _fail(f"Could not reach {_server_url()}: {e}")
        _report(r)


@main.command()
@click.option("--teams-file", "-f", type=click.File("r"), help="JSON file holding the team list")
@click.option("--team-name", "-n", help="Team whose score changes")
@click.option("--score-change", "-c", type=float, help="Points to add (negative to subtract)")
def update(teams_file, team_name: Optional[str], score_change: Optional[float]):
    """Publish a team list and/or a score change."""
    body: dict = {}
    if teams_file is not None:
        try:
            body["teams"] = json.load(teams_file)
        except json.JSONDecodeError as e:
            _fail(f"{teams_file.name} is not valid JSON: {e}")
    if team_name is not None:
        body["teamName"] = team_name
    if score_change is not None:
        body["scoreChange"] = int(score_change) if score_change.is_integer() else score_change

    if not body:
        _fail("Nothing to publish. Pass --teams-file or --team-name with --score-change")

    _run(_post("/publish-update", body))


async def _post(path: str, body: dict):
    async with _client() as c:
        try:
            r = await c.post(path, json=body)
        except httpx.HTTPError as e:
            _fail(f"Could not reach {_server_url()}: {e}")
        _report(r)


# ---------------------------------------------------------------------------
# buzzhub listen
# ---------------------------------------------------------------------------


@main.command()
@click.option("--count", "-n", type=int, help="Exit after N events")
@click.option("--raw", is_flag=True, help="Print the JSON envelope instead of a summary")
def listen(count: Optional[int], raw: bool):
    """Subscribe to the event stream and print every event."""
    try:
        _run(_listen_impl(count, raw))
    except KeyboardInterrupt:
        click.echo()


async def _listen_impl(count: Optional[int], raw: bool):
    seen = 0
    async with _client(timeout=None) as c:
        try:
            async with c.stream("GET", "/stream") as r:
                if not r.is_success:
                    _fail(f"{r.status_code} opening stream")
                click.secho(f"Listening on {_server_url()}/stream", bold=True, err=True)

                async for event in iter_events(r.aiter_lines()):
                    if raw:
                        click.echo(json.dumps({"type": event.kind, "payload": event.payload}, ensure_ascii=False))
                    else:
                        kind = click.style(event.kind.ljust(12), fg=_kind_color(event.kind))
                        click.echo(f"{kind} {json.dumps(event.payload, ensure_ascii=False)}")
                    seen += 1
                    if count is not None and seen >= count:
                        return
        except httpx.HTTPError as e:
            _fail(f"Stream from {_server_url()} failed: {e}")
        except FrameError as e:
            _fail(f"Unreadable frame: {e}")
