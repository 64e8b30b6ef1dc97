"""
wallet_api.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, token signing and token revocation storage.

These ports decouple the service layer from concrete implementations.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: salted, cost-parameterized hashing.

- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` and :class:`~.TokenClaims`: issue and
    verify access/refresh tokens.

- :mod:`revocation_store`:
    Defines :class:`~.RevocationStore` and the
    :class:`~.InMemoryRevocationStore` test double.

Design Notes
------------
Concrete adapters (Werkzeug, PyJWT, Redis) implement these interfaces under
``wallet_api.infra`` and are wired together in :mod:`wallet_api.core.auth`.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .revocation_store import InMemoryRevocationStore, RevocationStore
from .token_codec import TokenClaims, TokenCodec

__all__ = [
    "PasswordHasher",
    "TokenCodec",
    "TokenClaims",
    "RevocationStore",
    "InMemoryRevocationStore",
]
