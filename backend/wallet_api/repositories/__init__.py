"""Persistence-only repositories for the wallet API aggregates."""

from wallet_api.repositories.base import BaseRepository, Page, Pagination
from wallet_api.repositories.user import UserRepository
from wallet_api.repositories.wallet import WalletRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "UserRepository",
    "WalletRepository",
]
