"""edt_gateway - HTTP gateway serving date-filtered university timetables.

Fetches a group's iCalendar feed from the Celcat timetable server, caches it
briefly, and answers ``GET /edt/{group_id}?start=...&end=...`` with the
matching events as JSON.
"""

__version__ = "0.1.0"

from typing import Any, Optional


def run_server(args: Optional[Any] = None) -> None:
    """Start the edt_gateway server.

    Args:
        args: Optional command line namespace with ``port`` and ``host``

    Command line values win over the environment; console logging uses the
    resolved ``log_level``.
    """
    import logging

    from edt_gateway.api.server import start_server
    from edt_gateway.core.config_manager import load_settings
    from edt_gateway.core.logging_config import install_console_handler

    logger = logging.getLogger(__name__)

    overrides: dict[str, Any] = {}
    if args is not None:
        overrides["server_port"] = getattr(args, "port", None)
        overrides["server_bind"] = getattr(args, "host", None)

    settings = load_settings(overrides)
    install_console_handler(settings.log_level)
    logger.debug(
        "Resolved settings: bind=%s port=%d upstream=%s ttl=%ss timeout=%ss tz=%s",
        settings.server_bind,
        settings.server_port,
        settings.upstream_url_template,
        settings.cache_ttl_seconds,
        settings.request_timeout,
        settings.timezone,
    )

    start_server(settings)
