"""Domain services for edt_gateway."""

from .timetable_service import TimetableService

__all__ = ["TimetableService"]
