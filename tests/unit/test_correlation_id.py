"""Tests for the correlation id middleware."""

import uuid
import warnings

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from edt_gateway.api.middleware.correlation_id import (
    CORRELATION_ID_KEY,
    correlation_id_middleware,
    get_request_id,
)

pytestmark = pytest.mark.unit


def _make_app() -> web.Application:
    app = web.Application(middlewares=[correlation_id_middleware])

    async def echo(request: web.Request) -> web.Response:
        return web.json_response(
            {"context": get_request_id(), "request": request[CORRELATION_ID_KEY]}
        )

    async def missing(_request: web.Request) -> web.Response:
        raise web.HTTPNotFound()

    app.router.add_get("/echo", echo)
    app.router.add_get("/missing", missing)
    return app


async def test_uses_x_request_id_header() -> None:
    async with TestClient(TestServer(_make_app())) as client:
        resp = await client.get("/echo", headers={"X-Request-ID": "req-1"})
        body = await resp.json()

    assert resp.headers["X-Request-ID"] == "req-1"
    assert body == {"context": "req-1", "request": "req-1"}


async def test_falls_back_to_x_correlation_id() -> None:
    async with TestClient(TestServer(_make_app())) as client:
        resp = await client.get("/echo", headers={"X-Correlation-ID": "corr-7"})

    assert resp.headers["X-Request-ID"] == "corr-7"


async def test_generates_uuid_when_absent() -> None:
    async with TestClient(TestServer(_make_app())) as client:
        resp = await client.get("/echo")

    uuid.UUID(resp.headers["X-Request-ID"])


async def test_header_added_to_http_exceptions() -> None:
    async with TestClient(TestServer(_make_app())) as client:
        resp = await client.get("/missing", headers={"X-Request-ID": "req-404"})

    assert resp.status == 404
    assert resp.headers["X-Request-ID"] == "req-404"


def test_get_request_id_outside_request() -> None:
    assert get_request_id() == "no-request-id"


async def test_storing_correlation_id_emits_no_key_warning() -> None:
    async with TestClient(TestServer(_make_app())) as client:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            resp = await client.get("/echo", headers={"X-Request-ID": "req-2"})
            body = await resp.json()

    assert body["request"] == "req-2"
    assert not [w for w in caught if issubclass(w.category, web.NotAppKeyWarning)]
