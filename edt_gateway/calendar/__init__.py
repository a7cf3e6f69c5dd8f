"""Timetable feed handling: fetching, parsing and day-range filtering."""

from .date_filter import DateFilter
from .ical_fetcher import IcalFetcher
from .ical_parser import IcalParser
from .models import CalendarEvent

__all__ = ["CalendarEvent", "DateFilter", "IcalFetcher", "IcalParser"]
