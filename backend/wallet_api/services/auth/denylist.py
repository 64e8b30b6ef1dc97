"""Access-token denylist kept in the revocation store."""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime

from wallet_api.services._shared.errors import InvalidTokenError, StoreUnavailableError
from wallet_api.services._shared.ports import RevocationStore, TokenCodec
from wallet_api.services.auth.sessions import token_fingerprint

log = logging.getLogger(__name__)

DENYLIST_KEY_PREFIX = "blacklist:token:"
REVOKED_MARKER = "revoked"


def denylist_key(token: str) -> str:
    return f"{DENYLIST_KEY_PREFIX}{token_fingerprint(token)}"


class TokenDenylist:
    """
    Record and query revoked access tokens.

    Entries expire together with the token they deny, so the store never
    outgrows the set of still-valid access tokens.
    """

    def __init__(self, store: RevocationStore, codec: TokenCodec) -> None:
        self.store = store
        self.codec = codec

    def revoke(self, token: str) -> bool:
        """
        Deny ``token`` for the rest of its natural lifetime.

        Best effort: an unverifiable or already-expired token is skipped, and
        a store outage is logged and swallowed.

        :returns: ``True`` if an entry was written.
        """
        try:
            claims = self.codec.verify_access(token)
        except InvalidTokenError:
            return False

        remaining = math.ceil(claims.remaining(datetime.now(UTC)).total_seconds())
        if remaining <= 0:
            return False

        try:
            self.store.put_with_ttl(denylist_key(token), REVOKED_MARKER, remaining)
        except StoreUnavailableError:
            log.warning(
                "auth.denylist.write_failed",
                extra={"subject_id": claims.subject_id},
            )
            return False
        return True

    def is_revoked(self, token: str) -> bool:
        """
        :raises StoreUnavailableError: If the store cannot be reached.
        """
        return self.store.exists(denylist_key(token))
