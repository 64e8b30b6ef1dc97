from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified content of an access or refresh token.

    :ivar subject_id: Id of the user the token was issued to.
    :ivar email: Email of the user at issue time.
    :ivar issued_at: ``iat`` claim (UTC).
    :ivar expires_at: ``exp`` claim (UTC).
    :ivar jti: Random per-token identifier.
    """

    subject_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
    jti: str

    def remaining(self, now: datetime) -> timedelta:
        """Lifetime left at ``now`` (negative once expired)."""
        return self.expires_at - now


class TokenCodec(Protocol):
    """
    Port for signing and verifying self-contained tokens.

    Access and refresh tokens use independent secrets; a token of one class
    must never verify as the other. Every ``verify_*`` failure raises
    :class:`~wallet_api.services._shared.errors.InvalidTokenError`.
    """

    access_lifetime: timedelta
    refresh_lifetime: timedelta

    def issue_access(self, *, subject_id: str, email: str) -> str: ...

    def issue_refresh(self, *, subject_id: str, email: str) -> str: ...

    def verify_access(self, token: str) -> TokenClaims: ...

    def verify_refresh(self, token: str) -> TokenClaims: ...
