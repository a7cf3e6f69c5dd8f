"""Error taxonomy for the timetable gateway.

Every failure the pipeline signals is a ``TimetableError`` tagged with an
``ErrorKind``. The HTTP boundary dispatches on the kind, never on the
exception type, to pick the status code and log level.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of failure variants."""

    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INTERNAL: 500,
}

# Client-fault kinds are expected conditions the caller can fix.
CLIENT_KINDS = frozenset({ErrorKind.NOT_FOUND, ErrorKind.INVALID_INPUT})

GENERIC_INTERNAL_MESSAGE = "An unexpected internal server error occurred."


class TimetableError(Exception):
    """A classified pipeline failure carrying its HTTP status and message."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.upstream_status = upstream_status

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def is_client_fault(self) -> bool:
        return self.kind in CLIENT_KINDS

    @property
    def public_message(self) -> str:
        """Message safe to send to the caller."""
        if self.kind is ErrorKind.INTERNAL:
            return GENERIC_INTERNAL_MESSAGE
        return self.message

    @classmethod
    def not_found(cls, group_id: str) -> TimetableError:
        return cls(ErrorKind.NOT_FOUND, f"No schedule found for group ID: {group_id}")

    @classmethod
    def invalid_input(cls, message: str) -> TimetableError:
        return cls(ErrorKind.INVALID_INPUT, message)

    @classmethod
    def upstream(cls, status: Optional[int] = None, reason: Optional[str] = None) -> TimetableError:
        """Upstream fault; ``status`` is the upstream HTTP code when one was received."""
        if status is not None:
            message = f"Failed to fetch iCal data from Celcat. Status: {status}"
        else:
            message = f"Failed to fetch iCal data from Celcat. Error: {reason or 'unknown'}"
        return cls(ErrorKind.UPSTREAM, message, upstream_status=status)

    @classmethod
    def internal(cls, message: str) -> TimetableError:
        return cls(ErrorKind.INTERNAL, message)

    def __repr__(self) -> str:
        return f"TimetableError(kind={self.kind.value!r}, message={self.message!r})"
