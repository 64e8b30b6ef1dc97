"""JWT adapter for the token codec port, built on PyJWT."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from wallet_api.services._shared.errors import InvalidTokenError
from wallet_api.services._shared.ports import TokenClaims, TokenCodec

ALGORITHM = "HS512"
ACCESS_TYPE = "access"
REFRESH_TYPE = "refresh"
REQUIRED_CLAIMS = ["sub", "email", "type", "iat", "exp", "jti"]


@dataclass(frozen=True, slots=True)
class PyJWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWTs with independent access and refresh secrets.

    Every token carries ``sub``, ``email``, ``type``, ``iat``, ``exp`` and a
    random ``jti`` so two tokens issued in the same second never collide.

    :param access_secret: Signing key for access tokens.
    :param refresh_secret: Signing key for refresh tokens.
    :param access_lifetime: Validity window of access tokens.
    :param refresh_lifetime: Validity window of refresh tokens.
    """

    access_secret: str
    refresh_secret: str
    access_lifetime: timedelta
    refresh_lifetime: timedelta

    # -------------------- issue --------------------

    def _issue(self, *, subject_id: str, email: str, token_type: str) -> str:
        secret, lifetime = self._material(token_type)
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": subject_id,
            "email": email,
            "type": token_type,
            "iat": now,
            "exp": now + lifetime,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def issue_access(self, *, subject_id: str, email: str) -> str:
        return self._issue(subject_id=subject_id, email=email, token_type=ACCESS_TYPE)

    def issue_refresh(self, *, subject_id: str, email: str) -> str:
        return self._issue(subject_id=subject_id, email=email, token_type=REFRESH_TYPE)

    # -------------------- verify -------------------

    def _verify(self, token: str, token_type: str) -> TokenClaims:
        """
        Decode ``token`` and map every failure to :class:`InvalidTokenError`.

        The algorithm list is pinned, so ``alg: none`` and algorithm
        substitution are rejected by PyJWT before the claims are read.
        """
        secret, _ = self._material(token_type)
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != token_type:
            raise InvalidTokenError()
        sub, email, jti = payload.get("sub"), payload.get("email"), payload.get("jti")
        if not all(isinstance(v, str) and v for v in (sub, email, jti)):
            raise InvalidTokenError()

        return TokenClaims(
            subject_id=sub,
            email=email,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            jti=jti,
        )

    def verify_access(self, token: str) -> TokenClaims:
        return self._verify(token, ACCESS_TYPE)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self._verify(token, REFRESH_TYPE)

    # -------------------- helpers ------------------

    def _material(self, token_type: str) -> tuple[str, timedelta]:
        if token_type == ACCESS_TYPE:
            return self.access_secret, self.access_lifetime
        return self.refresh_secret, self.refresh_lifetime
