"""Day-range filtering of timetable events."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from typing import Optional, Union

from .models import CalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 5

DateLike = Union[datetime.date, datetime.datetime]


class DateFilter:
    """Selects events whose start day falls in an inclusive day range.

    Comparisons use day keys (``YYYYMMDD`` integers) so an event starting at
    any time on a boundary day is included. Aware timestamps are reduced to a
    day in the timetable timezone; naive timestamps and plain dates are taken
    as they are.
    """

    def __init__(
        self,
        timezone: datetime.tzinfo,
        default_range_days: int = DEFAULT_RANGE_DAYS,
    ) -> None:
        self.timezone = timezone
        self.default_range_days = default_range_days

    def calendar_day(self, value: DateLike) -> datetime.date:
        """Calendar date of ``value`` in the timetable timezone."""
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                try:
                    value = value.astimezone(self.timezone)
                except OverflowError:
                    # Conversion would leave the datetime range; keep its own date.
                    return value.date()
            return value.date()
        return value

    def day_key(self, value: DateLike) -> int:
        """Integer day key, e.g. ``20240721``."""
        day = self.calendar_day(value)
        return day.year * 10000 + day.month * 100 + day.day

    def date_range(self, start: DateLike, end: Optional[DateLike] = None) -> tuple[int, int]:
        """Inclusive ``(lower, upper)`` day keys for a query.

        Without ``end`` the upper bound is ``default_range_days`` calendar days
        after ``start``, clamped to the last representable date.
        """
        start_day = self.calendar_day(start)
        if end is None:
            try:
                end_day = start_day + datetime.timedelta(days=self.default_range_days)
            except OverflowError:
                end_day = datetime.date.max
        else:
            end_day = self.calendar_day(end)
        return self.day_key(start_day), self.day_key(end_day)

    def filter(
        self,
        events: Iterable[CalendarEvent],
        start: DateLike,
        end: Optional[DateLike] = None,
    ) -> list[CalendarEvent]:
        """Events whose start day key lies in the range, in input order."""
        lower, upper = self.date_range(start, end)
        if upper < lower:
            logger.debug("Empty day range %d..%d", lower, upper)
            return []

        return [event for event in events if lower <= self.day_key(event.start) <= upper]
