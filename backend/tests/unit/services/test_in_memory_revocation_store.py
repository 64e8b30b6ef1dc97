"""InMemoryRevocationStore behaves like the Redis adapter, driven by a fake clock."""

from __future__ import annotations

import pytest
from wallet_api.services._shared.ports import InMemoryRevocationStore


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock) -> InMemoryRevocationStore:
    return InMemoryRevocationStore(clock=clock)


def test_value_expires_after_ttl(store, clock):
    store.put_with_ttl("k", "v", 10)
    clock.advance(9)
    assert store.get("k") == "v"
    assert store.ttl("k") == 1
    clock.advance(1)
    assert store.get("k") is None
    assert not store.exists("k")


def test_ttl_is_floored_to_one_second(store, clock):
    store.put_with_ttl("k", "v", 0)
    assert store.exists("k")
    clock.advance(1)
    assert not store.exists("k")


def test_delete_counts_only_live_keys(store, clock):
    store.put_with_ttl("live", "1", 100)
    store.put_with_ttl("stale", "1", 1)
    clock.advance(5)
    assert store.delete("live", "stale", "never") == 1


def test_set_members_in_insertion_order_within_same_tick(store):
    for member in ("c", "a", "b"):
        store.add_to_set("s", member)
    assert store.members_of("s") == ["c", "a", "b"]


def test_set_expires_as_a_whole(store, clock):
    store.add_to_set("s", "a", ttl_seconds=5)
    clock.advance(6)
    assert store.members_of("s") == []


def test_remove_from_set_counts_present_members(store):
    store.add_to_set("s", "a")
    assert store.remove_from_set("s", "a", "b") == 1
    assert store.members_of("s") == []


def test_swap_moves_value_and_member(store):
    store.put_with_ttl("old", "subject", 60)
    store.add_to_set("set", "m-old")
    store.add_to_set("set", "m-other")

    assert store.swap(
        old_key="old",
        new_key="new",
        value="subject",
        ttl_seconds=60,
        set_key="set",
        old_member="m-old",
        new_member="m-new",
    )
    assert store.get("old") is None
    assert store.get("new") == "subject"
    # The rotated member is the newest one
    assert store.members_of("set") == ["m-other", "m-new"]


def test_swap_refuses_expired_old_key(store, clock):
    store.put_with_ttl("old", "subject", 5)
    clock.advance(5)
    assert not store.swap(
        old_key="old",
        new_key="new",
        value="subject",
        ttl_seconds=60,
        set_key="set",
        old_member="m-old",
        new_member="m-new",
    )
    assert store.get("new") is None
