"""JSON logging to stdout, correlated by request id.

Every record leaves the process as a single JSON line. Inside a request the
line carries the caller-supplied (or generated) request id, which is also
echoed back in the ``X-Request-ID`` response header.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Incoming ids end up in log lines; anything else is replaced by a uuid4.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

DEFAULT_EXTRA_KEYS = ("endpoint", "elapsed_ms", "subject_id", "status", "path", "method")

access_log = logging.getLogger("wallet_api.access")


class JSONFormatter(logging.Formatter):
    """
    Render a log record as one JSON object.

    :param extra_keys: Record attributes (set through ``extra={...}``) copied
        into the payload when present.
    """

    def __init__(self, extra_keys: Iterable[str] = DEFAULT_EXTRA_KEYS) -> None:
        super().__init__()
        self.extra_keys = tuple(extra_keys)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            {key: getattr(record, key) for key in self.extra_keys if hasattr(record, key)}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _incoming_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value and _REQUEST_ID_RE.fullmatch(value):
            return value
    return None


def ensure_request_id() -> str:
    """
    Return the id of the current request, assigning one on first use.

    Outside a request context a fresh uuid4 is returned each time.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        request_id = _incoming_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """
    Route the root logger to a single JSON stdout handler.

    Calling it again replaces the handler instead of stacking a second one.

    :param level: Level name (case-insensitive) or number.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Assign request ids, echo them back and emit one access line per request."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.get("request_started")
        auth = g.get("auth")
        access_log.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2)
                if started is not None
                else None,
                "subject_id": getattr(auth, "subject_id", None),
            },
        )
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
