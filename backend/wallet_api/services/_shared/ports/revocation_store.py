from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol


class RevocationStore(Protocol):
    """
    Shared TTL-capable key-value store backing token revocation.

    Two kinds of records live here: plain keys with a TTL (refresh mappings
    and denylist markers) and per-subject ordered sets of token identifiers.

    Failure contract
    ----------------
    Every method raises
    :class:`~wallet_api.services._shared.errors.StoreUnavailableError` when the
    backend cannot be reached or times out. Deciding whether to fail open,
    fail closed, or swallow the error belongs to the caller.
    """

    def put_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Set ``key`` to ``value`` expiring after ``ttl_seconds`` (>= 1)."""
        ...

    def get(self, key: str) -> str | None:
        """Return the live value of ``key`` or ``None``."""
        ...

    def delete(self, *keys: str) -> int:
        """Delete keys; return how many existed."""
        ...

    def exists(self, key: str) -> bool: ...

    def add_to_set(
        self,
        set_key: str,
        member: str,
        *,
        score: float | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        """
        Add ``member`` to an ordered set.

        :param score: Ordering key; defaults to the current time so members
            come back in insertion order.
        :param ttl_seconds: When given, (re)sets the TTL of the whole set.
        """
        ...

    def members_of(self, set_key: str) -> list[str]:
        """Return the members ordered oldest first."""
        ...

    def remove_from_set(self, set_key: str, *members: str) -> int:
        """Remove members; return how many were present."""
        ...

    def swap(
        self,
        *,
        old_key: str,
        new_key: str,
        value: str,
        ttl_seconds: int,
        set_key: str,
        old_member: str,
        new_member: str,
    ) -> bool:
        """
        Atomically replace ``old_key`` by ``new_key``.

        Succeeds only while ``old_key`` still holds ``value``. On success the
        old key is deleted, ``new_key -> value`` is written with
        ``ttl_seconds``, and ``old_member`` is replaced by ``new_member`` in
        ``set_key``. On failure nothing is written and ``False`` is returned,
        so of two concurrent callers presenting the same old key at most one
        wins.
        """
        ...


class InMemoryRevocationStore(RevocationStore):
    """
    Process-local store with the same semantics as the Redis adapter.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests. Expiry is
       evaluated lazily against ``clock`` (``time.time`` by default, so
       freezegun can drive it).
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._values: dict[str, tuple[str, float | None]] = {}
        self._sets: dict[str, dict[str, float]] = {}
        self._set_expiry: dict[str, float] = {}
        self._seq = 0
        self._lock = threading.RLock()

    # ------------------------- helpers -------------------------

    def _live_value(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._values[key]
            return None
        return value

    def _live_set(self, set_key: str) -> dict[str, float]:
        expires_at = self._set_expiry.get(set_key)
        if expires_at is not None and expires_at <= self._clock():
            self._sets.pop(set_key, None)
            self._set_expiry.pop(set_key, None)
        return self._sets.setdefault(set_key, {})

    def _next_score(self) -> float:
        # Tie-break members added within the same clock tick.
        self._seq += 1
        return self._clock() + self._seq * 1e-6

    def ttl(self, key: str) -> int | None:
        """Remaining whole seconds for ``key`` (``None`` if absent or persistent)."""
        with self._lock:
            if self._live_value(key) is None:
                return None
            expires_at = self._values[key][1]
            return None if expires_at is None else max(0, int(expires_at - self._clock()))

    # -------------------------- API ----------------------------

    def put_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._values[key] = (value, self._clock() + max(1, int(ttl_seconds)))

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._live_value(key)

    def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                if self._live_value(key) is not None:
                    del self._values[key]
                    removed += 1
                if self._sets.pop(key, None) is not None:
                    self._set_expiry.pop(key, None)
                    removed += 1
            return removed

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_value(key) is not None

    def add_to_set(
        self,
        set_key: str,
        member: str,
        *,
        score: float | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        with self._lock:
            members = self._live_set(set_key)
            members[member] = self._next_score() if score is None else score
            if ttl_seconds is not None:
                self._set_expiry[set_key] = self._clock() + max(1, int(ttl_seconds))

    def members_of(self, set_key: str) -> list[str]:
        with self._lock:
            members = self._live_set(set_key)
            return [m for m, _ in sorted(members.items(), key=lambda item: item[1])]

    def remove_from_set(self, set_key: str, *members: str) -> int:
        with self._lock:
            current = self._live_set(set_key)
            return sum(1 for m in members if current.pop(m, None) is not None)

    def swap(
        self,
        *,
        old_key: str,
        new_key: str,
        value: str,
        ttl_seconds: int,
        set_key: str,
        old_member: str,
        new_member: str,
    ) -> bool:
        with self._lock:
            if self._live_value(old_key) != value:
                return False
            del self._values[old_key]
            self.put_with_ttl(new_key, value, ttl_seconds)
            members = self._live_set(set_key)
            members.pop(old_member, None)
            members[new_member] = self._next_score()
            self._set_expiry[set_key] = self._clock() + max(1, int(ttl_seconds))
            return True
