"""Wallet model: a blockchain address registered by a user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wallet_api.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User


class Wallet(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Blockchain wallet address owned by a single user.

    Fields
    ------
    user_id : str
        Owner; rows disappear when the user is deleted.
    tag : str | None
        Optional human label (max 100 chars).
    chain : str
        One of the supported chain names (e.g. ``"Ethereum"``).
    address : str
        Address string, unique across all users.
    """

    __tablename__ = "wallets"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    chain: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped[User] = relationship(back_populates="wallets")

    __table_args__ = (
        UniqueConstraint("address", name="uq_wallets_address"),
        Index("ix_wallets_user_id", "user_id"),
        Index("ix_wallets_chain", "chain"),
    )
