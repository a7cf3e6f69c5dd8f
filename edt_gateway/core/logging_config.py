"""
Central logging configuration for edt_gateway.

Installs one colorized console handler on the root logger, quiets verbose
third-party loggers while keeping the gateway's own modules at INFO (or DEBUG
when requested), and tags every record with the current request's
correlation id.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter, default_log_colors

from edt_gateway.api.middleware.correlation_id import get_request_id
from edt_gateway.core.config_manager import LEVEL_NAMES

CONSOLE_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s [%(request_id)s] %(name)s: %(message)s"
)
CONSOLE_DATEFMT = "%H:%M:%S"

_TRUTHY = ("1", "true", "yes", "on")

THIRD_PARTY_LEVELS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
    "icalendar": logging.INFO,
}

GATEWAY_LOGGERS = (
    "edt_gateway",
    "edt_gateway.api",
    "edt_gateway.calendar",
    "edt_gateway.core",
    "edt_gateway.domain",
)


class RequestIdFilter(logging.Filter):
    """Add the request correlation id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def _env_debug() -> bool:
    return os.getenv("EDT_GATEWAY_DEBUG", "").strip().lower() in _TRUTHY


def install_console_handler(level_name: Optional[str] = None) -> logging.Handler:
    """Attach the colorized stderr handler to the root logger once.

    ``EDT_GATEWAY_DEBUG`` forces DEBUG regardless of ``level_name``.

    Returns:
        The installed (or previously installed) console handler
    """
    root = logging.getLogger()
    handler = next((h for h in root.handlers if getattr(h, "_edt_console", False)), None)
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(
            ColoredFormatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT, log_colors=default_log_colors)
        )
        handler.addFilter(RequestIdFilter())
        handler._edt_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    if _env_debug():
        level_name = "DEBUG"
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    root.setLevel(level)
    return handler


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for edt_gateway.

    Args:
        debug_mode: Whether to enable debug logging for edt_gateway modules
        force_debug: Override debug mode setting (None to use env var detection)
        log_level: Root log level name; EDT_GATEWAY_LOG_LEVEL is used when None

    Environment Variables:
        EDT_GATEWAY_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        EDT_GATEWAY_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    level_name = (log_level or os.getenv("EDT_GATEWAY_LOG_LEVEL", "")).upper()

    if force_debug is not None:
        final_debug = force_debug
    else:
        final_debug = debug_mode or _env_debug()

    root_level = logging.DEBUG if final_debug else logging.INFO
    if level_name in LEVEL_NAMES:
        root_level = getattr(logging, level_name)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        install_console_handler()
    root_logger.setLevel(root_level)

    # Records formatted by any handler need a request_id attribute.
    for handler in root_logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())

    gateway_level = logging.DEBUG if final_debug else logging.INFO
    for logger_name, level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(logger_name).setLevel(level)
    for logger_name in GATEWAY_LOGGERS:
        logging.getLogger(logger_name).setLevel(gateway_level)

    if final_debug:
        root_logger.info("Debug logging enabled for edt_gateway modules")
    else:
        root_logger.debug("Production logging configuration applied")

