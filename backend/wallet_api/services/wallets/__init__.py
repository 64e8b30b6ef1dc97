from __future__ import annotations

from .chains import SUPPORTED_CHAINS, is_supported_chain, normalize_address, validate_address
from .dto import WalletCreateIn, WalletListIn, WalletListOut, WalletOut, WalletUpdateIn
from .service import WalletService

__all__ = [
    "SUPPORTED_CHAINS",
    "WalletCreateIn",
    "WalletListIn",
    "WalletListOut",
    "WalletOut",
    "WalletService",
    "WalletUpdateIn",
    "is_supported_chain",
    "normalize_address",
    "validate_address",
]
