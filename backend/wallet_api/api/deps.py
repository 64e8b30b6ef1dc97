"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from wallet_api.core.auth import get_auth_components
from wallet_api.core.errors import APIError
from wallet_api.services.auth import AuthContext, AuthService

F = TypeVar("F", bound=Callable[..., Any])


def utc_timestamp() -> str:
    """Current UTC time in ISO-8601 with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def success_response(
    data: Any = None, *, message: str = "Success", status: int = 200, **extra: Any
) -> Response:
    """
    Render the success envelope ``{success, message, data, timestamp}``.

    ``data`` is omitted when ``None``; ``extra`` keys (e.g. ``pagination``)
    are merged at the top level.
    """
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    body["timestamp"] = utc_timestamp()
    return json_response(body, status=status)


def load_json_body() -> dict[str, Any]:
    """
    Return the request JSON object (``{}`` when the body is empty).

    :raises APIError: If the body is JSON but not an object.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise APIError("Request body must be a JSON object", status_code=400, code="BAD_REQUEST")
    return payload


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


def get_auth_service() -> AuthService:
    return get_auth_components().service


def require_auth(func: F) -> F:
    """
    Authenticate the bearer token and expose the identity as ``g.auth``.

    Errors raised by the guard propagate to the JSON error handlers
    (401 with ``UNAUTHORIZED``/``TOKEN_REVOKED``/``INVALID_TOKEN``, or 503
    when the denylist cannot be consulted).
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        guard = get_auth_components().guard
        g.auth = guard.authenticate(request.headers.get("Authorization"))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_auth() -> AuthContext:
    """Return the identity set by :func:`require_auth`."""
    auth = g.get("auth")
    if auth is None:
        raise RuntimeError("current_auth() called outside a require_auth endpoint")
    return cast(AuthContext, auth)
