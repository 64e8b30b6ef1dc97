"""Wallet repository with owner scoping and search helpers."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, or_, select

from wallet_api.models.wallet import Wallet
from wallet_api.repositories.base import BaseRepository, Page, Pagination


class WalletRepository(BaseRepository[Wallet]):
    """Persistence-only repository for :class:`Wallet`.

    Every read that serves an API call is scoped by ``user_id``; a wallet
    owned by someone else is indistinguishable from a missing one.
    """

    model = Wallet

    def _sortable_fields(self):
        return {
            "created_at": Wallet.created_at,
            "updated_at": Wallet.updated_at,
            "chain": Wallet.chain,
            "tag": Wallet.tag,
        }

    def _filterable_fields(self):
        return {
            "user_id": Wallet.user_id,
            "chain": Wallet.chain,
            "tag": Wallet.tag,
        }

    def _updatable_fields(self):
        return {"tag", "chain", "address"}

    def list_for_user(self, user_id: str) -> list[Wallet]:
        """Return all wallets of ``user_id``, newest first."""
        stmt = (
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .order_by(Wallet.created_at.desc(), Wallet.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_for_user(self, user_id: str, wallet_id: str) -> Wallet | None:
        """Return the wallet only if it belongs to ``user_id``."""
        stmt = select(Wallet).where(Wallet.id == wallet_id, Wallet.user_id == user_id)
        return cast(Wallet | None, self.session.execute(stmt).scalars().first())

    def exists_by_address(self, address: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` when any user already registered ``address``.

        :param address: Address to look for (exact match).
        :param exclude_id: Wallet id to ignore, used when updating in place.
        """
        stmt = select(Wallet.id).where(Wallet.address == address)
        if exclude_id is not None:
            stmt = stmt.where(Wallet.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def search_for_user(
        self,
        user_id: str,
        pagination: Pagination,
        *,
        chain: str | None = None,
        tag: str | None = None,
        search: str | None = None,
    ) -> Page[Wallet]:
        """Paginate a user's wallets with optional filters.

        :param user_id: Owner id.
        :param pagination: Page, limit and sort tokens.
        :param chain: Exact chain name.
        :param tag: Exact tag.
        :param search: Case-insensitive substring matched against tag or address.
        :returns: Requested page with total count.
        """
        stmt = self._apply_equality_filters(
            select(Wallet), {"user_id": user_id, "chain": chain, "tag": tag}
        )
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Wallet.tag).like(pattern),
                    func.lower(Wallet.address).like(pattern),
                )
            )
        return self._paginate_statement(stmt, pagination)
