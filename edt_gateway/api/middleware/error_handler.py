"""Maps pipeline failures to JSON error responses."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from ...errors import GENERIC_INTERNAL_MESSAGE, ErrorKind, TimetableError

logger = logging.getLogger(__name__)


def error_response(error: TimetableError) -> web.Response:
    """JSON body ``{"error": ...}`` with the status code of the error kind."""
    return web.json_response({"error": error.public_message}, status=error.status_code)


@web.middleware
async def error_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Centralized error handling for all routes."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except TimetableError as error:
        logger.log(
            logging.WARNING if error.is_client_fault else logging.ERROR,
            "[%s %s] %s %d: %s",
            request.method,
            request.path,
            error.kind.value,
            error.status_code,
            error.message,
            exc_info=error.kind is ErrorKind.INTERNAL,
        )
        return error_response(error)
    except Exception:
        logger.exception("[%s %s] Unhandled error", request.method, request.path)
        return web.json_response({"error": GENERIC_INTERNAL_MESSAGE}, status=500)
