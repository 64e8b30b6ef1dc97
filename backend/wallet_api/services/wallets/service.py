from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from wallet_api.models.wallet import Wallet
from wallet_api.repositories.wallet import WalletRepository
from wallet_api.services._shared.base import BaseService
from wallet_api.services._shared.dto import PageMeta
from wallet_api.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from wallet_api.services.wallets.chains import (
    SUPPORTED_CHAINS,
    is_supported_chain,
    normalize_address,
    validate_address,
)
from wallet_api.services.wallets.dto import (
    WalletCreateIn,
    WalletListIn,
    WalletListOut,
    WalletOut,
    WalletUpdateIn,
)

log = logging.getLogger(__name__)

ADDRESS_TAKEN_MESSAGE = "Wallet address already exists"


class WalletService(BaseService):
    """
    Application service for a user's wallet records.

    Responsibilities
    ----------------
    - CRUD scoped to the owner: another user's wallet is reported as missing.
    - Chain and address-format validation before any write.
    - Translating the address uniqueness constraint into :class:`ConflictError`.
    """

    # ------------------------------------------------------------------ #
    # Read
    # ------------------------------------------------------------------ #

    def list_wallets(self, user_id: str) -> list[WalletOut]:
        with self.ro_uow() as uow:
            repo: WalletRepository = uow.wallets
            return [self._to_out(w) for w in repo.list_for_user(user_id)]

    def list_wallets_page(self, user_id: str, query: WalletListIn) -> WalletListOut:
        """
        Paginate the user's wallets.

        :param user_id: Owner id.
        :param query: Filters, sorting and page parameters.
        :returns: Items plus pagination metadata.
        """
        sort_token = f"-{query.sort_by}" if query.descending else query.sort_by
        pagination = self.ensure_pagination(page=query.page, limit=query.limit, sort=[sort_token])
        with self.ro_uow() as uow:
            repo: WalletRepository = uow.wallets
            page = repo.search_for_user(
                user_id,
                pagination,
                chain=query.chain or None,
                tag=query.tag or None,
                search=(query.search or "").strip() or None,
            )
            items = [self._to_out(w) for w in page.items]
        meta = PageMeta(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
            has_prev=page.has_prev,
            has_next=page.has_next,
        )
        return WalletListOut(items=items, meta=meta)

    def get_wallet(self, user_id: str, wallet_id: str) -> WalletOut:
        """
        :raises NotFoundError: If the wallet does not exist or is not owned by ``user_id``.
        """
        with self.ro_uow() as uow:
            repo: WalletRepository = uow.wallets
            row = repo.get_for_user(user_id, wallet_id)
            if row is None:
                raise NotFoundError("Wallet", wallet_id)
            return self._to_out(row)

    # ------------------------------------------------------------------ #
    # Write
    # ------------------------------------------------------------------ #

    def create_wallet(self, user_id: str, data: WalletCreateIn) -> WalletOut:
        """
        Register a new wallet for ``user_id``.

        :raises ValidationError: Unsupported chain or malformed address.
        :raises ConflictError: The address is already registered.
        """
        chain, address = self._validated(data.chain, data.address)
        try:
            with self.rw_uow() as uow:
                repo: WalletRepository = uow.wallets
                if repo.exists_by_address(address):
                    raise ConflictError(ADDRESS_TAKEN_MESSAGE)
                row = repo.add(
                    Wallet(user_id=user_id, chain=chain, address=address, tag=_clean_tag(data.tag))
                )
                out = self._to_out(row)
        except IntegrityError as exc:
            if violates(exc, "uq_wallets_address", "wallets.address"):
                raise ConflictError(ADDRESS_TAKEN_MESSAGE) from exc
            raise
        log.info("wallet.created", extra={"subject_id": user_id})
        return out

    def update_wallet(self, user_id: str, wallet_id: str, data: WalletUpdateIn) -> WalletOut:
        """
        Apply a partial update. The resulting chain/address pair is validated
        as a whole, so changing only the chain re-checks the stored address.

        :raises NotFoundError: Unknown wallet or not owned by ``user_id``.
        :raises ValidationError: Resulting chain/address pair is invalid.
        :raises ConflictError: The new address belongs to another wallet.
        """
        try:
            with self.rw_uow() as uow:
                repo: WalletRepository = uow.wallets
                row = repo.get_for_user(user_id, wallet_id)
                if row is None:
                    raise NotFoundError("Wallet", wallet_id)

                changes: dict[str, str | None] = {}
                if data.chain is not None or data.address is not None:
                    chain, address = self._validated(
                        data.chain if data.chain is not None else row.chain,
                        data.address if data.address is not None else row.address,
                    )
                    if address != row.address and repo.exists_by_address(
                        address, exclude_id=row.id
                    ):
                        raise ConflictError(ADDRESS_TAKEN_MESSAGE)
                    changes.update(chain=chain, address=address)
                if data.tag is not None:
                    changes["tag"] = _clean_tag(data.tag)

                if changes:
                    repo.update(row, **changes)
                out = self._to_out(row)
        except IntegrityError as exc:
            if violates(exc, "uq_wallets_address", "wallets.address"):
                raise ConflictError(ADDRESS_TAKEN_MESSAGE) from exc
            raise
        return out

    def delete_wallet(self, user_id: str, wallet_id: str) -> None:
        """
        :raises NotFoundError: Unknown wallet or not owned by ``user_id``.
        """
        with self.rw_uow() as uow:
            repo: WalletRepository = uow.wallets
            row = repo.get_for_user(user_id, wallet_id)
            if row is None:
                raise NotFoundError("Wallet", wallet_id)
            repo.delete(row)
        log.info("wallet.deleted", extra={"subject_id": user_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validated(chain: str, address: str) -> tuple[str, str]:
        chain = chain.strip()
        if not is_supported_chain(chain):
            raise ValidationError(
                f"Unsupported chain: {chain}",
                details={"supportedChains": list(SUPPORTED_CHAINS)},
            )
        address = normalize_address(address)
        if not validate_address(chain, address):
            raise ValidationError(f"Invalid {chain} address format")
        return chain, address

    @staticmethod
    def _to_out(row: Wallet) -> WalletOut:
        return WalletOut(
            id=row.id,
            user_id=row.user_id,
            tag=row.tag,
            chain=row.chain,
            address=row.address,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def _clean_tag(tag: str | None) -> str | None:
    if tag is None:
        return None
    return tag.strip() or None
