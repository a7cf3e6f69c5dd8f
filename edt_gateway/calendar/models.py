"""Data models for parsed timetable events."""

from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


def serialize_utc(dt: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with a ``Z`` suffix.

    Naive datetimes are rendered unchanged (no offset).
    """
    if dt.tzinfo is None:
        return dt.isoformat()
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


class CalendarEvent(BaseModel):
    """One scheduled occurrence from a group's timetable feed."""

    uid: str = Field(..., description="Stable event identifier")
    summary: Optional[str] = Field(default=None, description="Short title")
    start: datetime = Field(..., description="Start time, whole-minute precision")
    end: datetime = Field(..., description="End time, whole-minute precision")
    location: Optional[str] = Field(default=None, description="Room or place")
    description: Optional[str] = Field(default=None, description="Free-form details")

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize start/end to ISO format in UTC."""
        return serialize_utc(dt)
