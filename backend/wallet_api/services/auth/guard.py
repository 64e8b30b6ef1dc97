from __future__ import annotations

import logging

from wallet_api.services._shared.errors import (
    StoreUnavailableError,
    TokenRevokedError,
    UnauthorizedError,
)
from wallet_api.services._shared.ports import TokenCodec
from wallet_api.services.auth.denylist import TokenDenylist
from wallet_api.services.auth.dto import AuthContext

log = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer(authorization: str | None) -> str | None:
    """
    Pull the token out of an ``Authorization`` header value.

    ``Bearer <token>`` is matched case-insensitively; a value without a
    scheme is taken as the raw token. Blank values give ``None``.
    """
    if not authorization or not authorization.strip():
        return None
    parts = authorization.strip().split(None, 1)
    if len(parts) == 2 and parts[0].lower() == BEARER_SCHEME:
        token = parts[1].strip()
    elif len(parts) == 1:
        token = "" if parts[0].lower() == BEARER_SCHEME else parts[0]
    else:
        return None
    return token or None


class AccessRevocationGuard:
    """
    Authenticate protected requests.

    Checks run in a fixed order: presence of the bearer token, then the
    denylist, then signature and expiry. An unreachable store rejects the
    request with 503 rather than letting it through.
    """

    def __init__(self, codec: TokenCodec, denylist: TokenDenylist) -> None:
        self.codec = codec
        self.denylist = denylist

    def authenticate(self, authorization: str | None) -> AuthContext:
        """
        :param authorization: Raw ``Authorization`` header value.
        :returns: The identity bound to the request.
        :raises UnauthorizedError: No token was supplied.
        :raises TokenRevokedError: The token was signed out.
        :raises InvalidTokenError: Signature, type or expiry check failed.
        :raises StoreUnavailableError: The denylist could not be consulted.
        """
        token = extract_bearer(authorization)
        if token is None:
            raise UnauthorizedError("No token provided")

        try:
            revoked = self.denylist.is_revoked(token)
        except StoreUnavailableError:
            log.error("auth.guard.denylist_unavailable")
            raise
        if revoked:
            raise TokenRevokedError()

        claims = self.codec.verify_access(token)
        return AuthContext(
            subject_id=claims.subject_id,
            email=claims.email,
            token=token,
            expires_at=claims.expires_at,
        )
