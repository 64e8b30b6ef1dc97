"""Health check endpoint."""

from __future__ import annotations

import logging
import time
from typing import Any

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from wallet_api.api.deps import json_response, timing, utc_timestamp
from wallet_api.core.extensions import db, get_redis

log = logging.getLogger(__name__)

bp = Blueprint("health", __name__)

_STARTED_AT = time.monotonic()


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _check_database() -> dict[str, Any]:
    start = time.perf_counter()
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("healthcheck.db_error")
        db.session.rollback()
        return {"status": "disconnected"}
    return {"status": "connected", "responseTime": _elapsed_ms(start)}


def _check_redis() -> dict[str, Any]:
    start = time.perf_counter()
    try:
        get_redis(current_app).ping()
    except (RedisError, RuntimeError):
        log.exception("healthcheck.redis_error")
        return {"status": "disconnected"}
    return {"status": "connected", "responseTime": _elapsed_ms(start)}


@bp.get("/health")
@timing
def healthcheck():
    """Report database and Redis connectivity; 503 if either is down."""

    services = {"database": _check_database(), "redis": _check_redis()}
    healthy = all(entry["status"] == "connected" for entry in services.values())
    payload = {
        "success": healthy,
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utc_timestamp(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": current_app.config.get("APP_ENV", "development"),
        "version": current_app.config.get("APP_VERSION", "dev"),
        "services": services,
    }
    return json_response(payload, status=200 if healthy else 503)
