"""HTTP route registration for edt_gateway."""

from .timetable_routes import register_timetable_routes

__all__ = ["register_timetable_routes"]
