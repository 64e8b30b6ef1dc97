# tests/unit/services/test_auth_service.py
from __future__ import annotations

import pytest
from wallet_api.models.user import User
from wallet_api.services._shared.errors import (
    ConflictError,
    StoreUnavailableError,
    UnauthorizedError,
)
from wallet_api.services._shared.ports import InMemoryRevocationStore
from wallet_api.services.auth.denylist import TokenDenylist
from wallet_api.services.auth.dto import RefreshIn, SignInIn, SignOutIn, SignUpIn
from wallet_api.services.auth.service import (
    BAD_CREDENTIALS_MESSAGE,
    BAD_REFRESH_MESSAGE,
    EMAIL_TAKEN_MESSAGE,
    AuthService,
)
from wallet_api.services.auth.sessions import RefreshSessionManager

from tests.factories.user import UserFactory
from tests.helpers.utils import DEFAULT_PASSWORD


class CountingHasher:
    """Wrap a real hasher and count ``verify`` calls."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.verify_calls = 0

    def hash(self, plaintext: str) -> str:
        return self.inner.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        self.verify_calls += 1
        return self.inner.verify(plaintext, hashed)


class FlakyStore(InMemoryRevocationStore):
    """In-memory store that can be switched off mid-test."""

    down = False

    def _check(self):
        if self.down:
            raise StoreUnavailableError()

    def get(self, key):
        self._check()
        return super().get(key)

    def put_with_ttl(self, key, value, ttl_seconds):
        self._check()
        super().put_with_ttl(key, value, ttl_seconds)

    def members_of(self, set_key):
        self._check()
        return super().members_of(set_key)


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture()
def service(auth_components, store) -> AuthService:
    """
    Build an AuthService wired to an in-memory store.

    .. note::
       Hasher and codec come from the test app so secrets and cost match
       :class:`TestingConfig`.
    """
    codec = auth_components.codec
    return AuthService(
        hasher=CountingHasher(auth_components.hasher),
        codec=codec,
        sessions=RefreshSessionManager(store, refresh_lifetime=codec.refresh_lifetime),
        denylist=TokenDenylist(store, codec),
    )


# ------------------------------- Sign-up ---------------------------------- #
def test_sign_up_creates_user_and_session(service, session):
    result = service.sign_up(SignUpIn(email="new@example.com", password=DEFAULT_PASSWORD))

    assert result.user.email == "new@example.com"
    row = session.get(User, result.user.id)
    assert row is not None
    assert row.password_hash != DEFAULT_PASSWORD
    assert service.hasher.verify(DEFAULT_PASSWORD, row.password_hash)

    claims = service.codec.verify_access(result.tokens.access_token)
    assert claims.subject_id == result.user.id
    assert service.sessions.verify_refresh_token(result.tokens.refresh_token) == result.user.id


def test_sign_up_duplicate_email_conflicts(service, session):
    UserFactory(email="taken@example.com")

    with pytest.raises(ConflictError) as excinfo:
        service.sign_up(SignUpIn(email="taken@example.com", password=DEFAULT_PASSWORD))
    assert excinfo.value.message == EMAIL_TAKEN_MESSAGE


def test_email_is_case_sensitive(service, session):
    service.sign_up(SignUpIn(email="mixed@example.com", password=DEFAULT_PASSWORD))
    other = service.sign_up(SignUpIn(email="Mixed@example.com", password=DEFAULT_PASSWORD))
    assert other.user.email == "Mixed@example.com"

    with pytest.raises(UnauthorizedError):
        service.sign_in(SignInIn(email="MIXED@example.com", password=DEFAULT_PASSWORD))


def test_sign_up_rolls_back_when_session_cannot_be_stored(service, store, session):
    store.down = True
    with pytest.raises(StoreUnavailableError):
        service.sign_up(SignUpIn(email="retry@example.com", password=DEFAULT_PASSWORD))
    assert session.query(User).filter_by(email="retry@example.com").count() == 0

    store.down = False
    result = service.sign_up(SignUpIn(email="retry@example.com", password=DEFAULT_PASSWORD))
    assert result.user.email == "retry@example.com"


# ------------------------------- Sign-in ---------------------------------- #
def test_sign_in_issues_independent_sessions(service, session):
    user = UserFactory(password="pw-123456")

    first = service.sign_in(SignInIn(email=user.email, password="pw-123456"))
    second = service.sign_in(SignInIn(email=user.email, password="pw-123456"))

    assert first.user.id == second.user.id == user.id
    assert first.tokens.refresh_token != second.tokens.refresh_token
    assert service.sessions.verify_refresh_token(first.tokens.refresh_token) == user.id
    assert service.sessions.verify_refresh_token(second.tokens.refresh_token) == user.id


def test_sign_in_wrong_password_and_unknown_email_look_the_same(service, session):
    user = UserFactory(password="pw-123456")

    with pytest.raises(UnauthorizedError) as wrong:
        service.sign_in(SignInIn(email=user.email, password="nope"))
    with pytest.raises(UnauthorizedError) as unknown:
        service.sign_in(SignInIn(email="ghost@example.com", password="nope"))

    assert wrong.value.message == unknown.value.message == BAD_CREDENTIALS_MESSAGE
    assert wrong.value.code == unknown.value.code == "UNAUTHORIZED"


def test_sign_in_unknown_email_still_verifies_a_hash(service, session):
    with pytest.raises(UnauthorizedError):
        service.sign_in(SignInIn(email="ghost@example.com", password="whatever"))
    assert service.hasher.verify_calls == 1


# ------------------------------- Refresh ---------------------------------- #
def test_refresh_rotates_and_blocks_reuse(service, session):
    """First refresh rotates; replaying the old token is rejected."""
    signed = service.sign_up(SignUpIn(email="r@example.com", password=DEFAULT_PASSWORD))
    old = signed.tokens.refresh_token

    pair = service.refresh(RefreshIn(refresh_token=old))
    assert pair.refresh_token != old
    assert service.codec.verify_access(pair.access_token).subject_id == signed.user.id

    with pytest.raises(UnauthorizedError) as excinfo:
        service.refresh(RefreshIn(refresh_token=old))
    assert excinfo.value.message == BAD_REFRESH_MESSAGE

    # The rotated token keeps working
    service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_rejects_access_token(service, session):
    signed = service.sign_up(SignUpIn(email="r@example.com", password=DEFAULT_PASSWORD))
    with pytest.raises(UnauthorizedError):
        service.refresh(RefreshIn(refresh_token=signed.tokens.access_token))


def test_refresh_rejects_well_signed_but_unknown_token(service, session):
    signed = service.sign_up(SignUpIn(email="r@example.com", password=DEFAULT_PASSWORD))
    stray = service.codec.issue_refresh(subject_id=signed.user.id, email=signed.user.email)
    with pytest.raises(UnauthorizedError):
        service.refresh(RefreshIn(refresh_token=stray))


def test_refresh_rejects_deleted_user(service, session):
    signed = service.sign_up(SignUpIn(email="gone@example.com", password=DEFAULT_PASSWORD))
    session.delete(session.get(User, signed.user.id))
    session.commit()

    with pytest.raises(UnauthorizedError):
        service.refresh(RefreshIn(refresh_token=signed.tokens.refresh_token))


def test_refresh_fails_closed_when_store_is_down(service, store, session):
    signed = service.sign_up(SignUpIn(email="r@example.com", password=DEFAULT_PASSWORD))
    store.down = True
    with pytest.raises(StoreUnavailableError):
        service.refresh(RefreshIn(refresh_token=signed.tokens.refresh_token))


# ------------------------------- Sign-out --------------------------------- #
def test_sign_out_denies_access_and_revokes_all_sessions(service, session):
    user = UserFactory(password="pw-123456")
    a = service.sign_in(SignInIn(email=user.email, password="pw-123456"))
    b = service.sign_in(SignInIn(email=user.email, password="pw-123456"))

    service.sign_out(SignOutIn(subject_id=user.id, access_token=a.tokens.access_token))

    assert service.denylist.is_revoked(a.tokens.access_token)
    # Only the presented access token is deny-listed
    assert not service.denylist.is_revoked(b.tokens.access_token)
    for refresh in (a.tokens.refresh_token, b.tokens.refresh_token):
        with pytest.raises(UnauthorizedError):
            service.refresh(RefreshIn(refresh_token=refresh))


def test_sign_out_is_idempotent(service, session):
    signed = service.sign_up(SignUpIn(email="o@example.com", password=DEFAULT_PASSWORD))
    dto = SignOutIn(subject_id=signed.user.id, access_token=signed.tokens.access_token)
    service.sign_out(dto)
    service.sign_out(dto)


def test_sign_out_tolerates_store_outage(service, store, session):
    signed = service.sign_up(SignUpIn(email="o@example.com", password=DEFAULT_PASSWORD))
    store.down = True
    service.sign_out(
        SignOutIn(subject_id=signed.user.id, access_token=signed.tokens.access_token)
    )
