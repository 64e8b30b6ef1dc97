"""Redis adapter for the revocation store port."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, cast

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.exceptions import WatchError

from wallet_api.services._shared.errors import StoreUnavailableError
from wallet_api.services._shared.ports import RevocationStore

log = logging.getLogger(__name__)


def _s(value: Any) -> str | None:
    """Normalize a Redis reply to ``str`` whether or not responses are decoded."""
    if value is None:
        return None
    if isinstance(value, bytes | bytearray):
        return value.decode()
    return str(value)


def _now_score() -> int:
    # Microseconds stay exact in a float64 sorted-set score.
    return time.time_ns() // 1_000


@dataclass(slots=True)
class RedisRevocationStore(RevocationStore):
    """
    Redis-backed revocation store.

    Plain records are strings written with ``SET ... EX``; ordered sets are
    sorted sets scored by insertion time in microseconds.

    :param r: A Redis client (already connected, socket timeouts configured).
    :param max_swap_retries: Optimistic-lock attempts before ``swap`` gives up.
    """

    r: redis.Redis
    max_swap_retries: int = 5

    # -------------------- helpers --------------------

    @contextmanager
    def _unavailable_as_error(self, operation: str) -> Iterator[None]:
        """Translate connectivity failures into :class:`StoreUnavailableError`."""
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as exc:
            log.error("revocation_store.unavailable: op=%s error=%s", operation, exc)
            raise StoreUnavailableError() from exc

    # -------------------- key/value ------------------

    def put_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._unavailable_as_error("put_with_ttl"):
            self.r.set(key, value, ex=max(1, int(ttl_seconds)))

    def get(self, key: str) -> str | None:
        with self._unavailable_as_error("get"):
            return _s(self.r.get(key))

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with self._unavailable_as_error("delete"):
            return cast(int, self.r.delete(*keys))

    def exists(self, key: str) -> bool:
        with self._unavailable_as_error("exists"):
            return cast(int, self.r.exists(key)) == 1

    # -------------------- ordered sets ---------------

    def add_to_set(
        self,
        set_key: str,
        member: str,
        *,
        score: float | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        with self._unavailable_as_error("add_to_set"):
            pipe = self.r.pipeline(transaction=True)
            pipe.zadd(set_key, {member: _now_score() if score is None else score})
            if ttl_seconds is not None:
                pipe.expire(set_key, max(1, int(ttl_seconds)))
            pipe.execute()

    def members_of(self, set_key: str) -> list[str]:
        with self._unavailable_as_error("members_of"):
            raw = cast(list[Any], self.r.zrange(set_key, 0, -1))
        return [m for m in (_s(item) for item in raw) if m is not None]

    def remove_from_set(self, set_key: str, *members: str) -> int:
        if not members:
            return 0
        with self._unavailable_as_error("remove_from_set"):
            return cast(int, self.r.zrem(set_key, *members))

    # -------------------- atomic rotation ------------

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
        Replace ``old_key`` by ``new_key`` with WATCH/MULTI/EXEC.

        ``old_key`` is watched, so a concurrent delete or rotation between the
        read and ``EXEC`` aborts the transaction. The read is then retried and
        finds the key gone, which makes exactly one contender succeed.
        """
        ttl = max(1, int(ttl_seconds))
        with self._unavailable_as_error("swap"):
            for _ in range(self.max_swap_retries):
                try:
                    with self.r.pipeline() as p:
                        p.watch(old_key)
                        if _s(p.get(old_key)) != value:
                            p.unwatch()
                            return False
                        p.multi()
                        p.delete(old_key)
                        p.set(new_key, value, ex=ttl)
                        p.zrem(set_key, old_member)
                        p.zadd(set_key, {new_member: _now_score()})
                        p.expire(set_key, ttl)
                        p.execute()
                        return True
                except WatchError:
                    # Concurrent modification detected; re-read and retry
                    continue
        log.warning("revocation_store.swap_contention: retries=%s", self.max_swap_retries)
        return False
