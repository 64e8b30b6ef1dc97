"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from wallet_api.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_installs_single_handler() -> None:
    configure_logging("INFO")
    configure_logging("INFO")
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, JSONFormatter)


def test_json_formatter_includes_extras() -> None:
    record = logging.LogRecord(
        name="wallet_api.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="auth.signin",
        args=(),
        exc_info=None,
    )
    record.subject_id = "user-1"
    record.request_id = "req-1"

    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "auth.signin"
    assert payload["level"] == "INFO"
    assert payload["subject_id"] == "user-1"
    assert payload["request_id"] == "req-1"
    assert "elapsed_ms" not in payload


def test_request_id_is_echoed(client) -> None:
    resp = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated(client) -> None:
    resp = client.get("/api/health")
    assert resp.headers.get("X-Request-ID")


def test_error_envelope_carries_request_id(client) -> None:
    resp = client.get("/api/nope", headers={"X-Correlation-ID": "corr-9"})
    assert resp.status_code == 404
    assert resp.get_json()["request_id"] == "corr-9"


def test_unsafe_request_id_is_replaced(client) -> None:
    resp = client.get("/api/health", headers={"X-Request-ID": "not a valid id"})
    request_id = resp.headers["X-Request-ID"]
    assert request_id != "not a valid id"
    assert len(request_id) == 36


def test_json_formatter_uses_record_time() -> None:
    record = logging.makeLogRecord({"msg": "x", "levelname": "INFO", "created": 0.0})
    payload = json.loads(JSONFormatter().format(record))
    assert payload["time"].startswith("1970-01-01T00:00:00")
