from __future__ import annotations

import logging
from uuid import UUID

import pytest

from app.core.logging import LOG_FORMAT, RequestIdFilter, build_logging_config
from app.core.request_context import resolve_request_id


def test_well_formed_client_id_is_reused() -> None:
    assert resolve_request_id("  web-client.42:retry-1 ") == "web-client.42:retry-1"


@pytest.mark.parametrize("header", [None, "", "has spaces", "x" * 129, "line\nbreak"])
def test_bad_client_id_is_replaced_with_uuid(header) -> None:
    UUID(resolve_request_id(header))


def test_filter_uses_dash_outside_requests() -> None:
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "hello", None, None)

    assert RequestIdFilter().filter(record) is True
    assert record.request_id == "-"


def test_logging_config_quiets_sdk_loggers() -> None:
    config = build_logging_config("debug")

    assert config["root"]["level"] == "DEBUG"
    assert config["formatters"]["default"]["format"] == LOG_FORMAT
    assert config["loggers"]["openai"] == {"level": "WARNING"}
    assert config["loggers"]["httpx"] == {"level": "WARNING"}
