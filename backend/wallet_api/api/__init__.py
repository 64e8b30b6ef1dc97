"""HTTP endpoints, grouped in one blueprint per resource."""

from __future__ import annotations

from flask import Blueprint, Flask


def join_prefix(base: str, relative: str) -> str:
    """Join URL prefixes: ``join_prefix("/api/", "/auth")`` -> ``"/api/auth"``."""
    segments = [part.strip("/") for part in (base, relative) if part.strip("/")]
    return "/" + "/".join(segments)


def registry() -> list[tuple[Blueprint, str]]:
    """Return ``(blueprint, relative_prefix)`` for every resource."""

    # Imported here so that importing the package does not pull in the services.
    from .auth import bp as auth_bp
    from .health import bp as health_bp
    from .wallets import bp as wallets_bp

    return [
        (health_bp, ""),  # /api/health
        (auth_bp, "auth"),  # /api/auth/...
        (wallets_bp, "wallets"),  # /api/wallets[/<id>]
    ]


def init_app(app: Flask) -> None:
    """Mount every blueprint under ``API_BASE_PREFIX`` (``/api`` by default)."""

    base = app.config.get("API_BASE_PREFIX", "/api")
    for bp, relative in registry():
        app.register_blueprint(bp, url_prefix=join_prefix(base, relative))


__all__ = ["init_app", "join_prefix", "registry"]
