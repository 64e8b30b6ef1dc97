"""Centralized JSON error handling for the API.

Every failure leaving the app is rendered as::

    {"success": false,
     "error": {"code": "...", "message": "...", "details": {...}},
     "request_id": "..."}

``details`` appears only when there is something to report, and ``stack``
only when ``DEBUG`` is enabled.
"""

from __future__ import annotations

import logging
import traceback
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, current_app, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from wallet_api.core.logger import ensure_request_id
from wallet_api.services._shared.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

log = logging.getLogger(__name__)

# Most specific classes first; the first isinstance match wins.
SERVICE_ERROR_STATUS: tuple[tuple[type[ServiceError], int], ...] = (
    (ServiceUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE),
    (InternalError, HTTPStatus.INTERNAL_SERVER_ERROR),
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (ConflictError, HTTPStatus.CONFLICT),
    (ValidationError, HTTPStatus.BAD_REQUEST),
    (NotFoundError, HTTPStatus.NOT_FOUND),
)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        413: "PAYLOAD_TOO_LARGE",
        415: "UNSUPPORTED_MEDIA_TYPE",
        422: "UNPROCESSABLE_ENTITY",
        429: "RATE_LIMIT_EXCEEDED",
        500: "INTERNAL_SERVER_ERROR",
        503: "SERVICE_UNAVAILABLE",
    }
    return mapping.get(status_code, "ERROR")


def status_for(exc: ServiceError) -> int:
    """Return the HTTP status associated with a service error.

    :param exc: Service-layer error instance.
    :type exc: ServiceError
    :returns: HTTP status code, ``400`` for unclassified service errors.
    :rtype: int
    """
    for error_type, status in SERVICE_ERROR_STATUS:
        if isinstance(exc, error_type):
            return int(status)
    return int(HTTPStatus.BAD_REQUEST)


def _as_envelope(
    *,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> dict[str, Any]:
    """
    Build the error envelope.

    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :param exc: Exception whose traceback is exposed in debug mode.
    :returns: JSON-serializable dictionary.
    :rtype: dict
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    if exc is not None and current_app.debug:
        error["stack"] = "".join(traceback.format_exception(exc))
    return {"success": False, "error": error, "request_id": ensure_request_id()}


def _error_response(envelope: dict[str, Any], status: int) -> tuple[Response, int]:
    return jsonify(envelope), status


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised directly by the HTTP layer.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"BAD_REQUEST"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "BAD_REQUEST",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Service errors keep their own ``code``; the status comes from
      :data:`SERVICE_ERROR_STATUS`.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status = status_for(err)
        envelope = _as_envelope(
            code=err.code,
            message=err.message,
            details=err.details or None,
            exc=err if status >= 500 else None,
        )
        if status >= 500:
            log.error(
                "ServiceError: code=%s status=%s msg=%s",
                err.code,
                status,
                err.message,
                exc_info=err,
            )
        else:
            log.warning("ServiceError: code=%s status=%s msg=%s", err.code, status, err.message)
        return _error_response(envelope, status)

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = log.error if err.status_code >= 500 else log.warning
        level("APIError: code=%s status=%s msg=%s", err.code, err.status_code, err.message)
        envelope = _as_envelope(code=err.code, message=err.message, details=err.details or None)
        return _error_response(envelope, err.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route {request.method} {request.path} not found"
        elif status == HTTPStatus.TOO_MANY_REQUESTS:
            message = "Too many requests, please try again later"
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _error_response(_as_envelope(code=error_code, message=message), status)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.warning("ValidationError: fields=%s", sorted(_field_names(err.messages)))
        envelope = _as_envelope(
            code=ValidationError.code,
            message="Validation failed",
            details={"errors": err.messages},
        )
        return _error_response(envelope, HTTPStatus.BAD_REQUEST)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError", exc_info=err)
        envelope = _as_envelope(code=ConflictError.code, message="Resource conflict")
        return _error_response(envelope, HTTPStatus.CONFLICT)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # E.g., transient DB connectivity, locks, etc.
        log.error("OperationalError", exc_info=err)
        envelope = _as_envelope(
            code=ServiceUnavailableError.code,
            message="Service temporarily unavailable",
        )
        return _error_response(envelope, HTTPStatus.SERVICE_UNAVAILABLE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        log.error("Unhandled exception", exc_info=err)
        envelope = _as_envelope(
            code=InternalError.code,
            message=InternalError.default_message,
            exc=err,
        )
        return _error_response(envelope, HTTPStatus.INTERNAL_SERVER_ERROR)


def _field_names(messages: Any) -> list[str]:
    """Return the top-level field names of a marshmallow error mapping."""
    if isinstance(messages, dict):
        return [str(key) for key in messages]
    return []
