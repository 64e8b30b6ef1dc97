"""Application factory wiring Flask extensions, Redis and blueprints."""

from __future__ import annotations

import redis
from flask import Flask

from wallet_api.core.config import BaseConfig, get_config, validate_config
from wallet_api.core.logger import configure_logging
from wallet_api.core.logger import init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    redis_client: redis.Redis | None = None,
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object or import path; defaults to the class
        selected by ``APP_ENV``.
    :param redis_client: Pre-built Redis client (tests pass ``fakeredis``).
        When omitted a client is built from ``REDIS_*`` settings and pinged.
    :raises ConfigurationError: If token, hashing or session settings are invalid.
    :raises RuntimeError: If Redis is unreachable at startup.
    """

    app = Flask(__name__)

    app.config.from_object(get_config() if config is None else config)
    validate_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers, CORS and security headers
    from wallet_api.core import http

    http.init_app(app)

    from wallet_api.core import extensions

    extensions.init_app(app)

    init_logging(app)

    client = extensions.init_redis(app, redis_client)

    from wallet_api.core.auth import init_auth

    init_auth(app, client)

    from wallet_api.api import init_app as init_api

    init_api(app)

    from wallet_api.core import errors

    errors.init_app(app)

    from wallet_api import cli as app_cli

    app_cli.init_app(app)

    return app
