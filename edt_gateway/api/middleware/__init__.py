"""Middleware components for request processing.

Correlation ids for log tracing, centralized error mapping and CORS.
"""

from .correlation_id import CORRELATION_ID_KEY, correlation_id_middleware, get_request_id
from .cors import cors_middleware
from .error_handler import error_middleware

__all__ = [
    "CORRELATION_ID_KEY",
    "correlation_id_middleware",
    "cors_middleware",
    "error_middleware",
    "get_request_id",
]
