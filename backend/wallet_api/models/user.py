"""User model: the authentication identity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from wallet_api.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .wallet import Wallet


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account able to sign in and own wallets.

    Fields
    ------
    email : str
        Login email. Unique and compared case-sensitively, exactly as stored.
    password_hash : str
        Output of the password hasher. Never serialized.
    wallets : list[Wallet]
        Wallet records owned by the user (deleted with the user).
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    wallets: Mapped[list[Wallet]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Wallet.created_at.desc()",
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Sanity-check the email without altering it.

        :raises ValueError: If email is missing or obviously malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in value:
            raise ValueError("Email format looks invalid.")
        return value
