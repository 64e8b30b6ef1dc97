"""Assembly of the authentication components for one application."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import redis
from flask import Flask, current_app

from wallet_api.core.config import parse_duration
from wallet_api.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from wallet_api.infra.redis.redis_revocation_store import RedisRevocationStore
from wallet_api.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from wallet_api.services._shared.ports import RevocationStore
from wallet_api.services.auth import (
    AccessRevocationGuard,
    AuthService,
    RefreshSessionManager,
    TokenDenylist,
)

AUTH_EXTENSION_KEY = "wallet_api.auth"


@dataclass(frozen=True, slots=True)
class AuthComponents:
    """Process-wide auth collaborators, built once per app."""

    hasher: WerkzeugPasswordHasher
    codec: PyJWTTokenCodec
    store: RevocationStore
    sessions: RefreshSessionManager
    denylist: TokenDenylist
    guard: AccessRevocationGuard
    service: AuthService


def build_auth_components(settings: Mapping[str, Any], store: RevocationStore) -> AuthComponents:
    """
    Wire hasher, codec, session manager, denylist, guard and service.

    :param settings: Validated configuration mapping (``app.config``).
    :param store: Revocation store shared by the session manager and denylist.
    """
    hasher = WerkzeugPasswordHasher(cost=int(settings["PASSWORD_HASH_COST"]))
    codec = PyJWTTokenCodec(
        access_secret=settings["JWT_SECRET"],
        refresh_secret=settings["JWT_REFRESH_SECRET"],
        access_lifetime=parse_duration(settings["JWT_EXPIRES_IN"]),
        refresh_lifetime=parse_duration(settings["JWT_REFRESH_EXPIRES_IN"]),
    )
    sessions = RefreshSessionManager(
        store,
        refresh_lifetime=codec.refresh_lifetime,
        max_sessions=int(settings["MAX_REFRESH_SESSIONS"]),
    )
    denylist = TokenDenylist(store, codec)
    guard = AccessRevocationGuard(codec, denylist)
    service = AuthService(hasher=hasher, codec=codec, sessions=sessions, denylist=denylist)
    return AuthComponents(
        hasher=hasher,
        codec=codec,
        store=store,
        sessions=sessions,
        denylist=denylist,
        guard=guard,
        service=service,
    )


def init_auth(app: Flask, client: redis.Redis) -> AuthComponents:
    """Build the components over ``client`` and register them on ``app``."""
    components = build_auth_components(app.config, RedisRevocationStore(client))
    app.extensions[AUTH_EXTENSION_KEY] = components
    return components


def get_auth_components(app: Flask | None = None) -> AuthComponents:
    target = app if app is not None else current_app
    components = target.extensions.get(AUTH_EXTENSION_KEY)
    if components is None:
        raise RuntimeError("Auth components are not initialized. Call init_auth() first.")
    return components
