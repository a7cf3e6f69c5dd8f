"""Timetable API routes for edt_gateway."""

from __future__ import annotations

import datetime
import logging
from typing import Optional

from aiohttp import web
from dateutil import parser as date_parser

from ...domain.timetable_service import TimetableService
from ...errors import TimetableError

logger = logging.getLogger(__name__)

MISSING_START_MESSAGE = "Missing 'start' query parameter."
INVALID_START_MESSAGE = "Invalid 'start' date format."
INVALID_END_MESSAGE = "Invalid 'end' date format."


def parse_query_date(value: str) -> Optional[datetime.datetime]:
    """Parse an ISO-8601 date or date-time; None if unparseable."""
    try:
        return date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None


def parse_date_range(
    start: Optional[str], end: Optional[str]
) -> tuple[datetime.datetime, Optional[datetime.datetime]]:
    """Validate the ``start``/``end`` query values.

    Raises:
        TimetableError: ``invalid_input`` with the caller-facing message
    """
    if not start:
        raise TimetableError.invalid_input(MISSING_START_MESSAGE)

    start_date = parse_query_date(start)
    if start_date is None:
        raise TimetableError.invalid_input(INVALID_START_MESSAGE)

    end_date = None
    if end:
        end_date = parse_query_date(end)
        if end_date is None:
            raise TimetableError.invalid_input(INVALID_END_MESSAGE)

    return start_date, end_date


def register_timetable_routes(app: web.Application, service: TimetableService) -> None:
    """Register timetable and liveness routes.

    Args:
        app: aiohttp web application
        service: Timetable query pipeline
    """

    async def get_timetable(request: web.Request) -> web.Response:
        """Events of a group within a day range."""
        group_id = request.match_info["group_id"]
        start, end = parse_date_range(request.query.get("start"), request.query.get("end"))

        events = await service.get_timetable(group_id, start, end)
        logger.debug("GET /edt/%s returned %d events", group_id, len(events))
        return web.json_response([event.model_dump(mode="json") for event in events], status=200)

    async def ping(_request: web.Request) -> web.Response:
        """Liveness check."""
        return web.Response(text="pong", status=200)

    app.router.add_get("/edt/{group_id}", get_timetable)
    app.router.add_post("/ping", ping)
