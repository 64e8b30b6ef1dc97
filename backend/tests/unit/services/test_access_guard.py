from __future__ import annotations

from datetime import timedelta

import pytest
from wallet_api.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from wallet_api.services._shared.errors import (
    InvalidTokenError,
    StoreUnavailableError,
    TokenRevokedError,
    UnauthorizedError,
)
from wallet_api.services._shared.ports import InMemoryRevocationStore
from wallet_api.services.auth.denylist import TokenDenylist
from wallet_api.services.auth.guard import AccessRevocationGuard, extract_bearer


class DownStore(InMemoryRevocationStore):
    def exists(self, key):
        raise StoreUnavailableError()


@pytest.fixture()
def codec() -> PyJWTTokenCodec:
    return PyJWTTokenCodec(
        access_secret="a" * 64,
        refresh_secret="r" * 64,
        access_lifetime=timedelta(minutes=15),
        refresh_lifetime=timedelta(days=7),
    )


@pytest.fixture()
def denylist(codec) -> TokenDenylist:
    return TokenDenylist(InMemoryRevocationStore(), codec)


@pytest.fixture()
def guard(codec, denylist) -> AccessRevocationGuard:
    return AccessRevocationGuard(codec, denylist)


# ------------------------------ extract_bearer ----------------------------- #
@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        ("BEARER   abc  ", "abc"),
        ("abc.def.ghi", "abc.def.ghi"),
        ("Bearer", None),
        ("Bearer ", None),
        ("", None),
        ("   ", None),
        (None, None),
        ("Basic dXNlcjpwYXNz", None),
    ],
)
def test_extract_bearer(header, expected):
    assert extract_bearer(header) == expected


# ------------------------------ authenticate ------------------------------- #
def test_valid_token_yields_context(guard, codec):
    token = codec.issue_access(subject_id="user-1", email="a@b.com")
    ctx = guard.authenticate(f"Bearer {token}")
    assert ctx.subject_id == "user-1"
    assert ctx.email == "a@b.com"
    assert ctx.token == token
    assert ctx.expires_at is not None


def test_missing_token(guard):
    with pytest.raises(UnauthorizedError) as excinfo:
        guard.authenticate(None)
    assert type(excinfo.value) is UnauthorizedError
    assert excinfo.value.message == "No token provided"


def test_revoked_token(guard, codec, denylist):
    token = codec.issue_access(subject_id="user-1", email="a@b.com")
    denylist.revoke(token)
    with pytest.raises(TokenRevokedError):
        guard.authenticate(f"Bearer {token}")


def test_invalid_token(guard):
    with pytest.raises(InvalidTokenError):
        guard.authenticate("Bearer not-a-jwt")


def test_refresh_token_is_not_an_access_token(guard, codec):
    token = codec.issue_refresh(subject_id="user-1", email="a@b.com")
    with pytest.raises(InvalidTokenError):
        guard.authenticate(f"Bearer {token}")


def test_store_outage_fails_closed(codec):
    guard = AccessRevocationGuard(codec, TokenDenylist(DownStore(), codec))
    token = codec.issue_access(subject_id="user-1", email="a@b.com")
    with pytest.raises(StoreUnavailableError):
        guard.authenticate(f"Bearer {token}")
