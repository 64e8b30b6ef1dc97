"""Supported blockchains and their address formats."""

from __future__ import annotations

import re
from typing import Final

ETHEREUM: Final = "Ethereum"
BITCOIN: Final = "Bitcoin"
POLYGON: Final = "Polygon"
BINANCE_SMART_CHAIN: Final = "Binance Smart Chain"
AVALANCHE: Final = "Avalanche"
ARBITRUM: Final = "Arbitrum"
OPTIMISM: Final = "Optimism"

SUPPORTED_CHAINS: Final[tuple[str, ...]] = (
    ETHEREUM,
    BITCOIN,
    POLYGON,
    BINANCE_SMART_CHAIN,
    AVALANCHE,
    ARBITRUM,
    OPTIMISM,
)

EVM_ADDRESS_RE = re.compile(r"0x[a-fA-F0-9]{40}")
BITCOIN_LEGACY_RE = re.compile(r"[13][a-km-zA-HJ-NP-Z1-9]{25,34}")
BITCOIN_BECH32_RE = re.compile(r"bc1[a-z0-9]{39,59}")

# Every supported chain except Bitcoin shares the EVM address format.
_ADDRESS_PATTERNS: Final[dict[str, tuple[re.Pattern[str], ...]]] = {
    chain: (EVM_ADDRESS_RE,) for chain in SUPPORTED_CHAINS if chain != BITCOIN
}
_ADDRESS_PATTERNS[BITCOIN] = (BITCOIN_LEGACY_RE, BITCOIN_BECH32_RE)


def is_supported_chain(chain: str) -> bool:
    return chain in _ADDRESS_PATTERNS


def normalize_address(address: str) -> str:
    """Trim surrounding whitespace; case is significant for some formats."""
    return address.strip()


def validate_address(chain: str, address: str) -> bool:
    """
    Check ``address`` against the format of ``chain``.

    :param chain: Chain name, exactly as listed in :data:`SUPPORTED_CHAINS`.
    :param address: Candidate address (already normalized).
    :returns: ``False`` for unknown chains and malformed addresses.
    """
    patterns = _ADDRESS_PATTERNS.get(chain)
    if not patterns:
        return False
    return any(p.fullmatch(address) for p in patterns)
