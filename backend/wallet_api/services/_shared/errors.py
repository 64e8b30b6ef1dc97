"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
infrastructure adapters and application services. Every error carries a
machine-readable ``code``; the translation to HTTP status codes and response
envelopes is handled by ``wallet_api/core/errors.py``.

Hierarchy
---------
::

    ServiceError
    ├── UnauthorizedError          UNAUTHORIZED
    │   ├── TokenRevokedError      TOKEN_REVOKED
    │   └── InvalidTokenError      INVALID_TOKEN
    ├── ConflictError              CONFLICT
    ├── ValidationError            VALIDATION_ERROR
    ├── NotFoundError              NOT_FOUND
    └── InternalError              INTERNAL_SERVER_ERROR
        └── ServiceUnavailableError    SERVICE_UNAVAILABLE
            └── StoreUnavailableError
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the message while SQLite only
    reports the offending ``table.column``; pass both to stay portable.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    markers : str
        Constraint names or ``table.column`` fragments to look for.

    Returns
    -------
    bool
        True if any marker appears in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(marker.lower() in message for marker in markers)


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Client-safe description. Falls back to ``default_message``.
    :type message: str | None
    :param details: Optional structured context (e.g. field errors).
    :type details: Mapping[str, Any] | None

    Notes
    -----
    - These are *not* HTTP errors.
    - ``message`` must never contain secrets, hashes or raw tokens.
    """

    code: ClassVar[str] = "BAD_REQUEST"
    default_message: ClassVar[str] = "Request could not be processed"

    def __init__(
        self, message: str | None = None, *, details: Mapping[str, Any] | None = None
    ) -> None:
        self.message = message or self.default_message
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class UnauthorizedError(ServiceError):
    """Bad credentials, missing bearer token, or an unusable refresh token."""

    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class TokenRevokedError(UnauthorizedError):
    """The access token was explicitly revoked (signed out)."""

    code = "TOKEN_REVOKED"
    default_message = "Token has been revoked"


class InvalidTokenError(UnauthorizedError):
    """Signature, algorithm, structure, type or expiry check failed."""

    code = "INVALID_TOKEN"
    default_message = "Invalid or expired token"


# --------------------------------------------------------------------------- #
# Resource state
# --------------------------------------------------------------------------- #


class ConflictError(ServiceError):
    """Raised when a unique constraint or business rule conflict occurs."""

    code = "CONFLICT"
    default_message = "Resource already exists"


class ValidationError(ServiceError):
    """Input passed schema validation but violates a domain rule."""

    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found (or not visible to the caller).

    :param entity: Entity name (e.g., ``"Wallet"``).
    :type entity: str
    :param key: Identifier or search key, kept for logs only.
    :type key: str | int | None
    """

    code = "NOT_FOUND"
    default_message = "Resource not found"

    def __init__(self, entity: str, key: str | int | None = None) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found")


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class InternalError(ServiceError):
    """Unexpected failure in a store or codec."""

    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"


class ServiceUnavailableError(InternalError):
    """A dependency is temporarily unreachable; retrying later may succeed."""

    code = "SERVICE_UNAVAILABLE"
    default_message = "Service temporarily unavailable"


class StoreUnavailableError(ServiceUnavailableError):
    """The revocation store could not be reached or timed out."""

    default_message = "Token store temporarily unavailable"
