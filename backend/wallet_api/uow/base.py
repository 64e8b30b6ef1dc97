"""Unit of Work contract shared by the service layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wallet_api.repositories import UserRepository, WalletRepository


class UnitOfWork(ABC):
    """
    One transaction for one use case.

    ``users`` and ``wallets`` are bound to the same transaction. Used as a
    context manager, a clean exit commits and an exception rolls back.
    """

    users: UserRepository
    wallets: WalletRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
