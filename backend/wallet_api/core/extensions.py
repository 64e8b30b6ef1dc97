"""Global Flask extension instances and the Redis client lifecycle."""

from __future__ import annotations

import logging

import redis
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

REDIS_EXTENSION_KEY = "redis_client"

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations and rate limiting.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`wallet_api.models` package to ensure SQLAlchemy metadata is ready
        for migrations and ``create_all``.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from wallet_api import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)


def build_redis_client(app: Flask) -> redis.Redis:
    """Create the Redis client from configuration and check connectivity.

    Socket timeouts bound every store call so that a stalled Redis surfaces as
    an error instead of hanging a request.

    :param app: Application whose ``REDIS_*`` settings are read.
    :type app: flask.Flask
    :returns: Connected client with ``decode_responses=True``.
    :rtype: redis.Redis
    :raises RuntimeError: If Redis does not answer ``PING`` at startup.
    """
    timeout = float(app.config.get("REDIS_SOCKET_TIMEOUT", 3))
    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        target = redis_url
    else:
        client = redis.Redis(
            host=app.config.get("REDIS_HOST", "localhost"),
            port=int(app.config.get("REDIS_PORT", 6379)),
            password=app.config.get("REDIS_PASSWORD"),
            db=int(app.config.get("REDIS_DB", 0)),
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        target = f"{app.config.get('REDIS_HOST')}:{app.config.get('REDIS_PORT')}"

    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {target!r}") from exc
    log.info("redis.connected")
    return client


def init_redis(app: Flask, client: redis.Redis | None = None) -> redis.Redis:
    """Attach the process-wide Redis client to ``app.extensions``.

    :param app: Application being assembled.
    :param client: Pre-built client (tests inject ``fakeredis``); built from
        configuration when omitted.
    :returns: The client now owned by the application.
    """
    if client is None:
        client = build_redis_client(app)
    app.extensions[REDIS_EXTENSION_KEY] = client
    return client


def get_redis(app: Flask) -> redis.Redis:
    """Return the Redis client registered on ``app``."""
    client = app.extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("Redis client is not initialized. Call init_redis() first.")
    return client


def close_redis(app: Flask) -> None:
    """Disconnect and forget the Redis client (idempotent)."""
    client = app.extensions.pop(REDIS_EXTENSION_KEY, None)
    if client is None:
        return
    try:
        client.close()
    except RedisError:
        log.warning("redis.close_failed", exc_info=True)
    else:
        log.info("redis.closed")
