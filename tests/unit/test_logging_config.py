"""Unit tests for edt_gateway.core.logging_config."""

import logging

import pytest

from edt_gateway.api.middleware.correlation_id import request_id_var
from edt_gateway.core.logging_config import (
    THIRD_PARTY_LEVELS,
    RequestIdFilter,
    configure_logging,
    install_console_handler,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    monkeypatch.delenv("EDT_GATEWAY_DEBUG", raising=False)
    monkeypatch.delenv("EDT_GATEWAY_LOG_LEVEL", raising=False)
    names = ["", "edt_gateway", *THIRD_PARTY_LEVELS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def _record() -> logging.LogRecord:
    return logging.LogRecord("edt_gateway", logging.INFO, __file__, 1, "msg", None, None)


def test_request_id_filter_outside_request() -> None:
    record = _record()

    assert RequestIdFilter().filter(record) is True
    assert record.request_id == "no-request-id"


def test_request_id_filter_inside_request() -> None:
    token = request_id_var.set("req-123")
    try:
        record = _record()
        RequestIdFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-123"


def test_configure_logging_production_levels() -> None:
    configure_logging(debug_mode=False)

    assert logging.getLogger("edt_gateway").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("aiohttp.access").level == logging.WARNING


def test_configure_logging_debug_mode() -> None:
    configure_logging(debug_mode=True)

    assert logging.getLogger("edt_gateway").level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_debug_env_var_enables_debug(monkeypatch) -> None:
    monkeypatch.setenv("EDT_GATEWAY_DEBUG", "true")

    configure_logging()

    assert logging.getLogger("edt_gateway.calendar").level == logging.DEBUG


def test_force_debug_overrides_env(monkeypatch) -> None:
    monkeypatch.setenv("EDT_GATEWAY_DEBUG", "1")

    configure_logging(force_debug=False)

    assert logging.getLogger("edt_gateway").level == logging.INFO


def test_log_level_env_sets_root_level(monkeypatch) -> None:
    monkeypatch.setenv("EDT_GATEWAY_LOG_LEVEL", "warning")

    configure_logging()

    assert logging.getLogger().level == logging.WARNING


def test_handlers_get_request_id_filter() -> None:
    configure_logging()

    for handler in logging.getLogger().handlers:
        assert any(isinstance(f, RequestIdFilter) for f in handler.filters)


def test_install_console_handler_is_idempotent() -> None:
    root = logging.getLogger()
    handler = install_console_handler("warning")
    try:
        again = install_console_handler("info")

        assert again is handler
        assert sum(1 for h in root.handlers if h is handler) == 1
        assert root.level == logging.INFO
        assert any(isinstance(f, RequestIdFilter) for f in handler.filters)
    finally:
        root.removeHandler(handler)


def test_console_handler_formats_request_id() -> None:
    handler = install_console_handler()
    try:
        record = _record()
        handler.filter(record)

        assert "[no-request-id] edt_gateway: msg" in handler.format(record)
    finally:
        logging.getLogger().removeHandler(handler)


def test_explicit_log_level_wins_over_env(monkeypatch) -> None:
    monkeypatch.setenv("EDT_GATEWAY_LOG_LEVEL", "DEBUG")

    configure_logging(log_level="error")

    assert logging.getLogger().level == logging.ERROR


def test_unknown_log_level_keeps_default() -> None:
    configure_logging(log_level="chatty")

    assert logging.getLogger().level == logging.INFO
