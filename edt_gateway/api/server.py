"""aiohttp server exposing the timetable API.

This module wires the timetable pipeline into an aiohttp application:
- a process-wide feed cache created once per application
- a shared pooled HTTP client for upstream requests, closed on cleanup
- routes GET /edt/{group_id} and POST /ping behind CORS, correlation id and
  error-mapping middlewares
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Any, Optional

import httpx
from aiohttp import web

from edt_gateway.api.middleware import (
    correlation_id_middleware,
    cors_middleware,
    error_middleware,
)
from edt_gateway.api.routes import register_timetable_routes
from edt_gateway.calendar.date_filter import DateFilter
from edt_gateway.calendar.ical_fetcher import IcalFetcher
from edt_gateway.calendar.ical_parser import IcalParser
from edt_gateway.core.config_manager import GatewaySettings
from edt_gateway.core.http_client import close_all_clients
from edt_gateway.core.ical_cache import IcalCache
from edt_gateway.domain.timetable_service import TimetableService

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("timetable_service", TimetableService)
SETTINGS_KEY = web.AppKey("settings", GatewaySettings)


def build_service(
    settings: GatewaySettings,
    client: Optional[httpx.AsyncClient] = None,
    cache: Optional[IcalCache] = None,
) -> TimetableService:
    """Assemble fetcher, parser and filter from settings.

    Args:
        settings: Gateway settings
        client: Optional HTTP client (the shared pooled client otherwise)
        cache: Optional pre-built cache
    """
    tz = settings.tzinfo
    if cache is None:
        cache = IcalCache(settings.cache_ttl_seconds, maxsize=settings.cache_max_entries)
    fetcher = IcalFetcher(settings, cache, client=client)
    return TimetableService(
        fetcher=fetcher,
        parser=IcalParser(tz),
        date_filter=DateFilter(tz, default_range_days=settings.default_range_days),
    )


def make_app(
    settings: GatewaySettings,
    service: Optional[TimetableService] = None,
) -> web.Application:
    """Create the aiohttp application with routes and middlewares."""
    app = web.Application(
        middlewares=[cors_middleware, correlation_id_middleware, error_middleware]
    )
    service = service or build_service(settings)
    app[SETTINGS_KEY] = settings
    app[SERVICE_KEY] = service

    register_timetable_routes(app, service)

    async def _cleanup(_app: web.Application) -> None:
        logger.info(
            "Feed cache at shutdown: %(entries)d entries, %(hits)d hits, %(misses)d misses",
            service.fetcher.cache.stats(),
        )
        await close_all_clients()
        logger.debug("Shared HTTP clients cleaned up")

    app.on_cleanup.append(_cleanup)
    return app


async def _serve(settings: GatewaySettings, external_stop_event: asyncio.Event | None = None) -> None:
    """Run the server until signalled to stop.

    Args:
        settings: Gateway settings
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()

    app = make_app(settings)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=settings.server_bind, port=settings.server_port)

    try:
        await site.start()
    except OSError:
        logger.exception(
            "Failed to bind %s:%d", settings.server_bind, settings.server_port
        )
        await runner.cleanup()
        raise

    logger.info("Listening on http://%s:%d", settings.server_bind, settings.server_port)

    if external_stop_event is None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # Not available on every platform (e.g. Windows event loops).
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop_event.set)

    await stop_event.wait()
    logger.info("Shutdown requested")

    await runner.cleanup()
    logger.info("Server shutdown complete")


def start_server(config: Any) -> None:
    """Start the asyncio event loop and HTTP server.

    Args:
        config: ``GatewaySettings`` or a mapping accepted by it

    Blocks until SIGINT/SIGTERM is received.
    """
    settings = config if isinstance(config, GatewaySettings) else GatewaySettings.model_validate(config)

    from edt_gateway.core.logging_config import configure_logging

    configure_logging(debug_mode=settings.debug_logging, log_level=settings.log_level)
    logger.info(
        "Logging configuration applied: debug_mode=%s level=%s",
        settings.debug_logging,
        settings.log_level or "INFO",
    )

    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
