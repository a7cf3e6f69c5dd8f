"""Shared fixtures for edt_gateway tests."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any
from zoneinfo import ZoneInfo

import httpx
import pytest

from edt_gateway.core.config_manager import GatewaySettings
from edt_gateway.core.http_client import close_all_clients
from edt_gateway.core.ical_cache import IcalCache

UPSTREAM_TEMPLATE = "https://celcat.test/cal/ical/{group_id}/schedule.ics"


def pytest_configure(config: Any) -> None:
    """Register markers used across the suite."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: HTTP surface tests")


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UpstreamStub:
    """Callable for ``httpx.MockTransport`` that records requests.

    Responds with ``status`` and ``body`` unless ``error`` is set, in which
    case that exception is raised for every request.
    """

    def __init__(self, body: str = "", status: int = 200, error: Exception | None = None) -> None:
        self.body = body
        self.status = status
        self.error = error
        self.delay = 0.0
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status, text=self.body, headers={"content-type": "text/calendar"}
        )

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def paris() -> ZoneInfo:
    return ZoneInfo("Europe/Paris")


@pytest.fixture
def settings() -> GatewaySettings:
    """Deterministic gateway settings pointing at a fake upstream."""
    return GatewaySettings(
        upstream_url_template=UPSTREAM_TEMPLATE,
        cache_ttl_seconds=600,
        request_timeout=2.0,
        timezone="Europe/Paris",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(settings: GatewaySettings, clock: FakeClock) -> IcalCache:
    return IcalCache(settings.cache_ttl_seconds, maxsize=16, timer=clock)


@pytest.fixture
def upstream() -> UpstreamStub:
    """Fake upstream answering 200 with an empty body until configured."""
    return UpstreamStub()


@pytest.fixture
async def http_client(upstream: UpstreamStub) -> AsyncIterator[httpx.AsyncClient]:
    """AsyncClient routed to the ``upstream`` stub."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    yield client
    await client.aclose()


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared HTTP clients after every test."""
    yield
    await close_all_clients()


# ==================== ICS Test Data Fixtures ====================


@pytest.fixture
def single_event_ics() -> str:
    """One lecture on 2024-07-21 starting at 10:00:30 UTC."""
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//EDT Gateway Test//EN
CALSCALE:GREGORIAN
BEGIN:VEVENT
UID:evt-single@celcat.test
DTSTAMP:20240701T000000Z
DTSTART:20240721T100030Z
DTEND:20240721T120045Z
SUMMARY:Algorithmique
LOCATION:Salle 101
DESCRIPTION:Groupe X1
END:VEVENT
END:VCALENDAR
"""


@pytest.fixture
def week_ics() -> str:
    """Several components in unsorted order.

    - evt-late: 2024-07-24 14:00 UTC
    - evt-early: 2024-07-22 08:15:59 UTC (seconds to truncate)
    - evt-floating: 2024-07-23 09:00 floating (placed in Europe/Paris)
    - evt-allday: 2024-07-25 date-only, no DTEND
    - evt-outside: 2024-07-29 10:00 UTC (beyond a five-day default range from the 22nd)
    - a VTODO (not an event)
    - a VEVENT without DTSTART (dropped)
    """
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//EDT Gateway Test//EN
BEGIN:VEVENT
UID:evt-late@celcat.test
DTSTAMP:20240701T000000Z
DTSTART:20240724T140000Z
DTEND:20240724T160000Z
SUMMARY:Réseaux
END:VEVENT
BEGIN:VEVENT
UID:evt-early@celcat.test
DTSTAMP:20240701T000000Z
DTSTART:20240722T081559Z
DTEND:20240722T101530Z
SUMMARY:Mathématiques
LOCATION:Amphi A
END:VEVENT
BEGIN:VEVENT
UID:evt-floating@celcat.test
DTSTAMP:20240701T000000Z
DTSTART:20240723T090000
DTEND:20240723T110000
SUMMARY:Anglais
END:VEVENT
BEGIN:VEVENT
UID:evt-allday@celcat.test
DTSTAMP:20240701T000000Z
DTSTART;VALUE=DATE:20240725
SUMMARY:Journée projet
END:VEVENT
BEGIN:VEVENT
UID:evt-outside@celcat.test
DTSTAMP:20240701T000000Z
DTSTART:20240729T100000Z
DTEND:20240729T120000Z
SUMMARY:Examen
END:VEVENT
BEGIN:VTODO
UID:todo-1@celcat.test
DTSTAMP:20240701T000000Z
SUMMARY:Rendre le rapport
END:VTODO
BEGIN:VEVENT
UID:evt-nostart@celcat.test
DTSTAMP:20240701T000000Z
SUMMARY:Sans horaire
END:VEVENT
END:VCALENDAR
"""
