"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthResultSchema,
    RefreshSchema,
    SignInSchema,
    SignUpSchema,
    TokenPairSchema,
    UserSchema,
)
from .common import PaginationSchema, build_pagination
from .wallet import WalletCreateSchema, WalletQuerySchema, WalletSchema, WalletUpdateSchema

__all__ = [
    "AuthResultSchema",
    "PaginationSchema",
    "RefreshSchema",
    "SignInSchema",
    "SignUpSchema",
    "TokenPairSchema",
    "UserSchema",
    "WalletCreateSchema",
    "WalletQuerySchema",
    "WalletSchema",
    "WalletUpdateSchema",
    "build_pagination",
]
