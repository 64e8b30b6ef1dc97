from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for registration.

    :param email: User email, stored exactly as given.
    :type email: str
    :param password: Raw password (hashed before persistence).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param email: User email (exact match).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class SignOutIn:
    """
    Input DTO for sign-out.

    :param subject_id: Authenticated user id (from the guard).
    :type subject_id: str
    :param access_token: The bearer token presented on this request.
    :type access_token: str
    """

    subject_id: str
    access_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public user projection; never carries the password hash."""

    id: str
    email: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """Sign-up / sign-in result: the user plus a fresh token pair."""

    user: UserOut
    tokens: TokenPairOut


@dataclass(frozen=True, slots=True)
class AuthContext:
    """
    Identity attached to a request that passed the access guard.

    :param subject_id: User id from the ``sub`` claim.
    :param email: Email from the token.
    :param token: The raw bearer token (needed to deny-list it on sign-out).
    :param expires_at: Token expiry (UTC).
    """

    subject_id: str
    email: str
    token: str
    expires_at: datetime
