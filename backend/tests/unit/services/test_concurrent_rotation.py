"""Concurrent rotation of one refresh token: exactly one caller may win."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import fakeredis
import pytest
from wallet_api.infra.redis.redis_revocation_store import RedisRevocationStore
from wallet_api.services._shared.ports import InMemoryRevocationStore
from wallet_api.services.auth.sessions import (
    RefreshSessionManager,
    token_fingerprint,
    user_tokens_key,
)

WORKERS = 8
ROUNDS = 5


def _redis_store():
    r = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    return RedisRevocationStore(r=r)


@pytest.fixture(params=[InMemoryRevocationStore, _redis_store], ids=["memory", "redis"])
def store(request):
    return request.param()


@pytest.fixture()
def sessions(store) -> RefreshSessionManager:
    return RefreshSessionManager(store, refresh_lifetime=timedelta(days=7), max_sessions=WORKERS)


def _race(sessions: RefreshSessionManager, old_token: str, prefix: str) -> list[bool]:
    barrier = threading.Barrier(WORKERS)

    def rotate(i: int) -> bool:
        barrier.wait()
        return sessions.store_refresh_token("user-1", f"{prefix}-{i}", old_token=old_token)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        return list(pool.map(rotate, range(WORKERS)))


@pytest.mark.parametrize("round_no", range(ROUNDS))
def test_only_one_concurrent_rotation_succeeds(sessions, store, round_no):
    sessions.store_refresh_token("user-1", "r0")

    results = _race(sessions, "r0", f"r{round_no}")

    assert results.count(True) == 1
    winner = f"r{round_no}-{results.index(True)}"
    assert sessions.verify_refresh_token("r0") is None
    assert sessions.verify_refresh_token(winner) == "user-1"
    assert store.members_of(user_tokens_key("user-1")) == [token_fingerprint(winner)]
    for i, won in enumerate(results):
        if not won:
            assert sessions.verify_refresh_token(f"r{round_no}-{i}") is None
