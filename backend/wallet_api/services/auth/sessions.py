"""
Refresh-token session lifecycle.

Every refresh token moves through ``ISSUED -> ROTATED | REVOKED | EXPIRED``;
the terminal states are indistinguishable to callers because each of them
simply removes the live record.

Store layout
------------
``refresh_token:<sha256>``
    Live mapping ``token hash -> subject id`` with the refresh lifetime as TTL.
``user_tokens:<subject id>``
    Ordered collection of the subject's live token hashes, oldest first.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import timedelta

from wallet_api.services._shared.ports import RevocationStore

log = logging.getLogger(__name__)

REFRESH_KEY_PREFIX = "refresh_token:"
USER_TOKENS_KEY_PREFIX = "user_tokens:"
DEFAULT_MAX_SESSIONS = 5


def token_fingerprint(token: str) -> str:
    """Return the hex SHA-256 of ``token``; raw tokens are never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_key(token_hash: str) -> str:
    return f"{REFRESH_KEY_PREFIX}{token_hash}"


def user_tokens_key(subject_id: str) -> str:
    return f"{USER_TOKENS_KEY_PREFIX}{subject_id}"


class RefreshSessionManager:
    """
    Issue, rotate and revoke refresh-token sessions.

    :param store: Revocation store shared by every worker.
    :param refresh_lifetime: TTL of each live mapping.
    :param max_sessions: Soft cap on concurrent sessions per subject. Two
        racing sign-ins may briefly leave one extra session alive.
    """

    def __init__(
        self,
        store: RevocationStore,
        *,
        refresh_lifetime: timedelta,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self.store = store
        self.ttl_seconds = max(1, int(refresh_lifetime.total_seconds()))
        self.max_sessions = max_sessions

    # ------------------------------------------------------------------ #
    # Issue / rotate
    # ------------------------------------------------------------------ #

    def store_refresh_token(
        self, subject_id: str, new_token: str, old_token: str | None = None
    ) -> bool:
        """
        Record ``new_token`` as live for ``subject_id``.

        When ``old_token`` is given the old record is replaced atomically with
        the new one: if the old token is no longer live (already rotated,
        revoked or expired) nothing is written and ``False`` is returned.

        :returns: ``True`` when ``new_token`` is now live.
        :raises StoreUnavailableError: If the store cannot be reached.
        """
        new_hash = token_fingerprint(new_token)
        set_key = user_tokens_key(subject_id)

        if old_token is None:
            self.store.put_with_ttl(refresh_key(new_hash), subject_id, self.ttl_seconds)
            self.store.add_to_set(set_key, new_hash, ttl_seconds=self.ttl_seconds)
        else:
            old_hash = token_fingerprint(old_token)
            rotated = self.store.swap(
                old_key=refresh_key(old_hash),
                new_key=refresh_key(new_hash),
                value=subject_id,
                ttl_seconds=self.ttl_seconds,
                set_key=set_key,
                old_member=old_hash,
                new_member=new_hash,
            )
            if not rotated:
                log.info("auth.refresh.rotation_rejected", extra={"subject_id": subject_id})
                return False

        self._evict_oldest(subject_id)
        return True

    def _evict_oldest(self, subject_id: str) -> None:
        set_key = user_tokens_key(subject_id)
        members = self.store.members_of(set_key)
        overflow = len(members) - self.max_sessions
        if overflow <= 0:
            return
        evicted = members[:overflow]
        self.store.delete(*(refresh_key(h) for h in evicted))
        self.store.remove_from_set(set_key, *evicted)
        log.info(
            "auth.refresh.sessions_evicted: count=%s",
            len(evicted),
            extra={"subject_id": subject_id},
        )

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def verify_refresh_token(self, token: str) -> str | None:
        """
        Return the subject id recorded for a live ``token``, else ``None``.

        Never-stored, rotated, revoked and expired tokens all yield ``None``.
        """
        return self.store.get(refresh_key(token_fingerprint(token)))

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_refresh_token(self, token: str) -> None:
        token_hash = token_fingerprint(token)
        subject_id = self.store.get(refresh_key(token_hash))
        self.store.delete(refresh_key(token_hash))
        if subject_id is not None:
            self.store.remove_from_set(user_tokens_key(subject_id), token_hash)

    def revoke_all_user_tokens(self, subject_id: str) -> int:
        """
        Delete every live refresh mapping of ``subject_id`` and its collection.

        :returns: Number of sessions that were revoked.
        """
        set_key = user_tokens_key(subject_id)
        members = self.store.members_of(set_key)
        if members:
            self.store.delete(*(refresh_key(h) for h in members))
        self.store.delete(set_key)
        return len(members)
