"""Timetable query pipeline: fetch, parse, filter."""

from __future__ import annotations

import logging
from typing import Optional

from ..calendar.date_filter import DateFilter, DateLike
from ..calendar.ical_fetcher import IcalFetcher
from ..calendar.ical_parser import IcalParser
from ..calendar.models import CalendarEvent

logger = logging.getLogger(__name__)


class TimetableService:
    """Composes fetcher, parser and filter into one query.

    Holds no state of its own; errors raised by the fetcher propagate unchanged.
    """

    def __init__(self, fetcher: IcalFetcher, parser: IcalParser, date_filter: DateFilter) -> None:
        self.fetcher = fetcher
        self.parser = parser
        self.date_filter = date_filter

    async def get_timetable(
        self,
        group_id: str,
        start: DateLike,
        end: Optional[DateLike] = None,
    ) -> list[CalendarEvent]:
        raw = await self.fetcher.fetch(group_id)
        events = self.parser.parse(raw)
        selected = self.date_filter.filter(events, start, end)
        logger.debug(
            "Timetable for %s: %d of %d events selected", group_id, len(selected), len(events)
        )
        return selected
