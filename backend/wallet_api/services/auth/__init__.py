"""Authentication services: sessions, denylist, guard and orchestration."""

from __future__ import annotations

from .denylist import TokenDenylist
from .dto import (
    AuthContext,
    AuthResultOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
    TokenPairOut,
    UserOut,
)
from .guard import AccessRevocationGuard, extract_bearer
from .service import AuthService
from .sessions import RefreshSessionManager, token_fingerprint

__all__ = [
    "AccessRevocationGuard",
    "AuthContext",
    "AuthResultOut",
    "AuthService",
    "RefreshIn",
    "RefreshSessionManager",
    "SignInIn",
    "SignOutIn",
    "SignUpIn",
    "TokenDenylist",
    "TokenPairOut",
    "UserOut",
    "extract_bearer",
    "token_fingerprint",
]
