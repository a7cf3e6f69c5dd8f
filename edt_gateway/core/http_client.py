"""Pooled HTTP clients for upstream feed requests.

One ``httpx.AsyncClient`` is kept per name so every feed download reuses
keep-alive connections to the timetable server. Clients are created lazily
and closed together when the application shuts down.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

_clients: dict[str, httpx.AsyncClient] = {}
_registry_lock = asyncio.Lock()

_POOL_LIMITS = httpx.Limits(max_connections=20, max_keepalive_connections=10)

DEFAULT_REQUEST_TIMEOUT = 10.0

DEFAULT_HEADERS = {
    "User-Agent": "edt-gateway/0.1",
    "Accept": "text/calendar, text/plain;q=0.9, */*;q=0.8",
}


def build_timeout(request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> httpx.Timeout:
    """Timeout applying ``request_timeout`` to connect, read, write and pool waits."""
    return httpx.Timeout(request_timeout)


async def get_shared_client(
    name: str = "default",
    timeout: Optional[httpx.Timeout] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return the pooled client registered under ``name``, creating it if needed.

    A client that was closed elsewhere is replaced transparently.

    Args:
        name: Registry key
        timeout: Timeout for a newly created client
        transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
    """
    async with _registry_lock:
        client = _clients.get(name)
        if client is not None and not client.is_closed:
            return client

        client = httpx.AsyncClient(
            limits=_POOL_LIMITS,
            timeout=timeout or build_timeout(),
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            transport=transport,
        )
        _clients[name] = client
        logger.info("Opened pooled HTTP client %r", name)
        return client


async def close_all_clients() -> None:
    """Close every pooled client; called from the application cleanup hook."""
    async with _registry_lock:
        names = list(_clients)
        while _clients:
            name, client = _clients.popitem()
            try:
                await client.aclose()
            except httpx.HTTPError as e:
                logger.warning("Closing HTTP client %r failed: %s", name, e)
        if names:
            logger.info("Closed pooled HTTP clients: %s", ", ".join(sorted(names)))
