"""CORS for publish endpoints.

Learn: Buzzer boxes and score pages on other origins call the publish
URLs straight from a browser. Those paths get a wide-open policy:
- OPTIONS preflight is answered here, never reaching a handler
- real responses get Access-Control-Allow-Origin: *

The stream endpoint and everything else are left alone. The root URL
only counts as a publish path when it carries ?sig=, because that is how
the buzzer hardware reports a press.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

PUBLISH_PATHS = frozenset({
    "/publish-signal",
    "/publish-score",
    "/publish-update",
    "/api/signal",
})

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


def is_publish_request(request: Request) -> bool:
    path = request.url.path
    if path in PUBLISH_PATHS:
        return True
    return path == "/" and "sig" in request.query_params


class PublishCorsMiddleware(BaseHTTPMiddleware):
    """Open CORS policy on publish endpoints only."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if not is_publish_request(request):
            return await call_next(request)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PREFLIGHT_HEADERS)

        response: Response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response
