"""iCalendar parser producing normalized timetable events."""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Optional

from icalendar import Calendar, Event as ICalEvent

from ..errors import TimetableError
from .models import CalendarEvent

logger = logging.getLogger(__name__)


def truncate_to_minute(dt: datetime) -> datetime:
    """Drop seconds and sub-second components."""
    return dt.replace(second=0, microsecond=0)


class IcalParser:
    """Converts raw iCalendar text into a start-sorted list of ``CalendarEvent``.

    Only VEVENT components are kept. Components without a UID or DTSTART are
    dropped rather than failing the whole feed. Date-only values and floating
    (naive) times are placed in the timetable timezone so every event start is
    comparable.
    """

    def __init__(self, timezone: tzinfo) -> None:
        """Initialize the parser.

        Args:
            timezone: Zone for date-only and floating times
        """
        self.timezone = timezone

    def parse(self, raw_text: str) -> list[CalendarEvent]:
        """Parse a feed into events sorted by start.

        Raises:
            TimetableError: ``internal`` if the document cannot be decoded at all
        """
        if not raw_text or not raw_text.strip():
            logger.warning("Empty iCal content provided")
            return []

        try:
            calendar = Calendar.from_ical(raw_text)
        except ValueError as e:
            logger.exception("Failed to decode iCal content")
            raise TimetableError.internal(f"Unreadable iCal feed: {e}") from e

        events = []
        skipped = 0
        for component in calendar.walk("VEVENT"):
            event = self._parse_event_component(component)
            if event is None:
                skipped += 1
            else:
                events.append(event)

        events.sort(key=lambda event: event.start)

        logger.debug("Parsed %d events (%d components skipped)", len(events), skipped)
        return events

    def _parse_event_component(self, component: ICalEvent) -> Optional[CalendarEvent]:
        uid = self._text(component.get("UID"))
        dtstart = component.get("DTSTART")
        if uid is None or dtstart is None:
            logger.debug("Skipping VEVENT without UID or DTSTART (uid=%s)", uid)
            return None

        try:
            start = self._to_datetime(dtstart.dt)
            end = self._resolve_end(component, dtstart.dt, start)
        except (AttributeError, TypeError, ValueError, OverflowError):
            logger.debug("Skipping VEVENT %s with unusable times", uid, exc_info=True)
            return None

        return CalendarEvent(
            uid=uid,
            summary=self._text(component.get("SUMMARY")),
            start=truncate_to_minute(start),
            end=truncate_to_minute(end),
            location=self._text(component.get("LOCATION")),
            description=self._text(component.get("DESCRIPTION")),
        )

    def _resolve_end(self, component: ICalEvent, raw_start: Any, start: datetime) -> datetime:
        dtend = component.get("DTEND")
        if dtend is not None:
            return self._to_datetime(dtend.dt)

        duration = component.get("DURATION")
        if duration is not None:
            return start + duration.dt

        # RFC 5545: a date-only event without DTEND lasts one day.
        if not isinstance(raw_start, datetime):
            return start + timedelta(days=1)
        return start

    def _to_datetime(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=self.timezone)
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min, tzinfo=self.timezone)
        raise TypeError(f"Unsupported date value: {value!r}")

    @staticmethod
    def _text(prop: Any) -> Optional[str]:
        if prop is None:
            return None
        text = str(prop)
        return text if text else None
