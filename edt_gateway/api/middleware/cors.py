"""Permissive CORS handling so browser front-ends can call the gateway."""

from collections.abc import Awaitable, Callable, MutableMapping

from aiohttp import web

ALLOWED_METHODS = "GET, POST, OPTIONS"


def _apply_cors_headers(headers: MutableMapping[str, str]) -> None:
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Expose-Headers"] = "X-Request-ID"


@web.middleware
async def cors_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Answer preflight requests and add CORS headers to every response."""
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        response = web.Response(status=204)
        response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
        requested_headers = request.headers.get("Access-Control-Request-Headers")
        if requested_headers:
            response.headers["Access-Control-Allow-Headers"] = requested_headers
        response.headers["Access-Control-Max-Age"] = "86400"
        _apply_cors_headers(response.headers)
        return response

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _apply_cors_headers(exc.headers)
        raise

    _apply_cors_headers(response.headers)
    return response
