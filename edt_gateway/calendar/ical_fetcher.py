"""Upstream iCalendar fetcher with TTL caching."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from ..core.config_manager import GatewaySettings
from ..core.http_client import build_timeout, get_shared_client
from ..core.ical_cache import IcalCache
from ..errors import TimetableError

logger = logging.getLogger(__name__)


class IcalFetcher:
    """Retrieves a group's raw timetable feed, consulting the cache first.

    Upstream failures are classified into ``TimetableError`` variants:
    404 becomes ``not_found``; any other non-success status, a timeout or a
    transport failure becomes ``upstream``. The cache is only written after a
    successful download.
    """

    def __init__(
        self,
        settings: GatewaySettings,
        cache: IcalCache,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            settings: Gateway settings (URL template, timeout, coalescing)
            cache: Shared feed cache
            client: Optional HTTP client; the shared pooled client is used otherwise
        """
        self.settings = settings
        self.cache = cache
        self._client = client
        self._client_id = "ical_fetcher"
        self._inflight: dict[str, asyncio.Task[str]] = {}

    def build_url(self, group_id: str) -> str:
        """Upstream feed URL for ``group_id``."""
        return self.settings.upstream_url_template.format(group_id=quote(group_id, safe=""))

    async def fetch(self, group_id: str) -> str:
        """Return raw calendar text for ``group_id``.

        Raises:
            TimetableError: ``not_found`` on upstream 404, ``upstream`` otherwise
        """
        cached = await self.cache.get(group_id)
        if cached is not None:
            logger.debug("Cache hit for group %s", group_id)
            return cached

        logger.debug("Cache miss for group %s", group_id)
        if not self.settings.coalesce_requests:
            return await self._download(group_id)

        task = self._inflight.get(group_id)
        if task is None:
            task = asyncio.ensure_future(self._download(group_id))
            self._inflight[group_id] = task
            task.add_done_callback(lambda done: self._forget(group_id, done))
        else:
            logger.debug("Joining in-flight fetch for group %s", group_id)

        # Shield so one cancelled request does not abort the download for the others.
        return await asyncio.shield(task)

    def _forget(self, group_id: str, task: asyncio.Task[str]) -> None:
        if self._inflight.get(group_id) is task:
            del self._inflight[group_id]
        if not task.cancelled() and task.exception() is not None:
            # Mark retrieved; waiters (if any) re-raise it themselves.
            logger.debug("In-flight fetch for group %s failed: %s", group_id, task.exception())

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = await get_shared_client(
                self._client_id, timeout=build_timeout(self.settings.request_timeout)
            )
        return self._client

    async def _download(self, group_id: str) -> str:
        url = self.build_url(group_id)
        client = await self._get_client()

        try:
            logger.debug("Fetching iCal feed from %s", url)
            response = await client.get(url, timeout=self.settings.request_timeout)
        except httpx.TimeoutException as e:
            logger.warning("Timeout fetching iCal feed for group %s from %s", group_id, url)
            raise TimetableError.upstream(
                reason=f"request timed out after {self.settings.request_timeout}s"
            ) from e
        except httpx.TransportError as e:
            logger.warning("Network error fetching iCal feed for group %s: %s", group_id, e)
            raise TimetableError.upstream(reason=f"network error ({type(e).__name__})") from e

        if response.status_code == 404:
            raise TimetableError.not_found(group_id)
        if not response.is_success:
            logger.warning(
                "Upstream returned HTTP %d for group %s", response.status_code, group_id
            )
            raise TimetableError.upstream(status=response.status_code)

        data = response.text
        await self.cache.set(group_id, data)
        logger.info("Fetched iCal feed for group %s (%d bytes)", group_id, len(response.content))
        return data
