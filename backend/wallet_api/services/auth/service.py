"""
AuthService
===========

Sign-up / sign-in / refresh / sign-out use cases.

The service composes the password hasher, the token codec, the refresh
session manager and the access denylist. All of them are injected, so unit
tests can pass in-memory doubles.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from wallet_api.models.user import User
from wallet_api.repositories.user import UserRepository
from wallet_api.services._shared.base import BaseService, ReadOnlyUowFactory, UowFactory
from wallet_api.services._shared.errors import (
    ConflictError,
    InvalidTokenError,
    StoreUnavailableError,
    UnauthorizedError,
    violates,
)
from wallet_api.services._shared.ports import PasswordHasher, TokenCodec
from wallet_api.services.auth.denylist import TokenDenylist
from wallet_api.services.auth.dto import (
    AuthResultOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
    TokenPairOut,
    UserOut,
)
from wallet_api.services.auth.sessions import RefreshSessionManager

log = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "User with this email already exists"
BAD_CREDENTIALS_MESSAGE = "Invalid email or password"
BAD_REFRESH_MESSAGE = "Invalid or expired refresh token"

_DUMMY_PASSWORD = "dummy-password-for-timing"


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Security
    --------
    - Sign-in answers identically for an unknown email and a wrong password,
      and hashes once in both paths.
    - Refresh tokens are single use: rotation goes through the session
      manager's atomic swap, so a replayed token always loses.
    - Sign-out deny-lists the presented access token and revokes every
      refresh session of the subject.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        codec: TokenCodec,
        sessions: RefreshSessionManager,
        denylist: TokenDenylist,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: ReadOnlyUowFactory | None = None,
    ) -> None:
        super().__init__(uow_factory=uow_factory, ro_uow_factory=ro_uow_factory)
        self.hasher = hasher
        self.codec = codec
        self.sessions = sessions
        self.denylist = denylist
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Sign-up
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn) -> AuthResultOut:
        """
        Register a user and open a first session.

        The refresh session is stored before the user row commits, so a store
        outage rolls the registration back and the caller can retry.

        :param dto: Registration input.
        :returns: The new user and a token pair.
        :raises ConflictError: If the email is already registered.
        :raises StoreUnavailableError: If the session cannot be stored.
        """
        password_hash = self.hasher.hash(dto.password)
        try:
            with self.rw_uow() as uow:
                users: UserRepository = uow.users
                if users.exists_by_email(dto.email):
                    raise ConflictError(EMAIL_TAKEN_MESSAGE)
                user = users.add(User(email=dto.email, password_hash=password_hash))
                out = self._to_user_out(user)
                tokens = self._open_session(out)
        except IntegrityError as exc:
            # Lost a race with a concurrent sign-up for the same email
            if violates(exc, "uq_users_email", "users.email"):
                raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
            raise

        log.info("auth.signup", extra={"subject_id": out.id})
        return AuthResultOut(user=out, tokens=tokens)

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh, independent token pair.

        :raises UnauthorizedError: On any credential mismatch.
        """
        with self.ro_uow() as uow:
            users: UserRepository = uow.users
            user = users.get_by_email(dto.email)
            if user is None:
                self.hasher.verify(dto.password, self._get_dummy_hash())
                out = None
            elif self.hasher.verify(dto.password, user.password_hash):
                out = self._to_user_out(user)
            else:
                out = None

        if out is None:
            log.info("auth.signin.rejected")
            raise UnauthorizedError(BAD_CREDENTIALS_MESSAGE)

        log.info("auth.signin", extra={"subject_id": out.id})
        return AuthResultOut(user=out, tokens=self._open_session(out))

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token into a new token pair.

        Every rejection uses the same message so a caller cannot tell a
        forged token from a replayed, revoked or expired one.

        :raises UnauthorizedError: If the token cannot be rotated.
        :raises StoreUnavailableError: If liveness cannot be checked.
        """
        try:
            claims = self.codec.verify_refresh(dto.refresh_token)
        except InvalidTokenError as exc:
            raise UnauthorizedError(BAD_REFRESH_MESSAGE) from exc

        stored_subject = self.sessions.verify_refresh_token(dto.refresh_token)
        if stored_subject is None or stored_subject != claims.subject_id:
            log.info("auth.refresh.rejected", extra={"subject_id": claims.subject_id})
            raise UnauthorizedError(BAD_REFRESH_MESSAGE)

        with self.ro_uow() as uow:
            users: UserRepository = uow.users
            user = users.get(claims.subject_id)
            out = self._to_user_out(user) if user is not None else None
        if out is None:
            raise UnauthorizedError(BAD_REFRESH_MESSAGE)

        access = self.codec.issue_access(subject_id=out.id, email=out.email)
        refresh = self.codec.issue_refresh(subject_id=out.id, email=out.email)
        if not self.sessions.store_refresh_token(out.id, refresh, old_token=dto.refresh_token):
            raise UnauthorizedError(BAD_REFRESH_MESSAGE)

        log.info("auth.refresh", extra={"subject_id": out.id})
        return TokenPairOut(access_token=access, refresh_token=refresh)

    # ------------------------------------------------------------------ #
    # Sign-out
    # ------------------------------------------------------------------ #

    def sign_out(self, dto: SignOutIn) -> None:
        """
        Deny-list the access token and revoke all refresh sessions.

        Idempotent, and best effort against store outages: a failed write is
        logged, never surfaced, because the token expires on its own anyway.
        """
        self.denylist.revoke(dto.access_token)
        try:
            revoked = self.sessions.revoke_all_user_tokens(dto.subject_id)
        except StoreUnavailableError:
            log.warning("auth.signout.revoke_failed", extra={"subject_id": dto.subject_id})
            return
        log.info("auth.signout: sessions=%s", revoked, extra={"subject_id": dto.subject_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _open_session(self, user: UserOut) -> TokenPairOut:
        access = self.codec.issue_access(subject_id=user.id, email=user.email)
        refresh = self.codec.issue_refresh(subject_id=user.id, email=user.email)
        self.sessions.store_refresh_token(user.id, refresh)
        return TokenPairOut(access_token=access, refresh_token=refresh)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash

    @staticmethod
    def _to_user_out(user: User) -> UserOut:
        return UserOut(id=user.id, email=user.email)
