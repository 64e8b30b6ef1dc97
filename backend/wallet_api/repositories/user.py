"""User repository: persistence-only lookups for accounts."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from wallet_api.models.user import User
from wallet_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Emails are matched exactly as stored (case-sensitive). This repository
    never hashes or verifies passwords and never touches tokens.
    """

    model = User

    def _sortable_fields(self):
        return {"email": User.email, "created_at": User.created_at}

    def _filterable_fields(self):
        return {"email": User.email}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by exact email.

        :param email: Email address as submitted.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with exactly this email exists."""
        stmt = select(User.id).where(User.email == email)
        return self.session.execute(stmt).first() is not None
