from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from wallet_api.services._shared.dto import PageMeta

# ------------------------------ Input DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class WalletCreateIn:
    """
    Input DTO for wallet creation.

    :param chain: Supported chain name.
    :type chain: str
    :param address: Address in the chain's format.
    :type address: str
    :param tag: Optional label.
    :type tag: str | None
    """

    chain: str
    address: str
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class WalletUpdateIn:
    """Partial update; ``None`` leaves a field unchanged."""

    chain: str | None = None
    address: str | None = None
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class WalletListIn:
    """
    Listing query.

    :param page: 1-based page.
    :param limit: Page size (clamped to 100).
    :param sort_by: Internal column name (``created_at``, ``updated_at``,
        ``chain`` or ``tag``).
    :param descending: Sort direction.
    :param chain: Exact chain filter.
    :param tag: Exact tag filter.
    :param search: Case-insensitive substring over tag and address.
    """

    page: int = 1
    limit: int = 10
    sort_by: str = "created_at"
    descending: bool = True
    chain: str | None = None
    tag: str | None = None
    search: str | None = None


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class WalletOut:
    """Public projection of a Wallet row."""

    id: str
    user_id: str
    tag: str | None
    chain: str
    address: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class WalletListOut:
    items: list[WalletOut]
    meta: PageMeta
