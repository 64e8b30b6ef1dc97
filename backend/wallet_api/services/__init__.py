"""Service layer public API.

Callers can import from :mod:`wallet_api.services` without knowing the
internal layout.

Re-exports
----------
- Base primitives (from ``wallet_api.services._shared.base``)
    * :class:`BaseService`

- Shared DTOs (from ``wallet_api.services._shared.dto``)
    * :class:`PageMeta`

- Auth service (from ``wallet_api.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`SignUpIn`, :class:`SignInIn`, :class:`RefreshIn`,
      :class:`SignOutIn`, :class:`AuthResultOut`, :class:`TokenPairOut`

- Wallet service (from ``wallet_api.services.wallets``)
    * :class:`WalletService`
    * DTOs: :class:`WalletCreateIn`, :class:`WalletUpdateIn`,
      :class:`WalletListIn`, :class:`WalletOut`, :class:`WalletListOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import PageMeta

# Auth service + DTOs
from .auth import (
    AuthResultOut,
    AuthService,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
    TokenPairOut,
)

# Wallet service + DTOs
from .wallets import (
    WalletCreateIn,
    WalletListIn,
    WalletListOut,
    WalletOut,
    WalletService,
    WalletUpdateIn,
)

__all__ = [
    # Base
    "BaseService",
    "PageMeta",
    # Auth
    "AuthService",
    "SignUpIn",
    "SignInIn",
    "RefreshIn",
    "SignOutIn",
    "AuthResultOut",
    "TokenPairOut",
    # Wallets
    "WalletService",
    "WalletCreateIn",
    "WalletUpdateIn",
    "WalletListIn",
    "WalletOut",
    "WalletListOut",
]
