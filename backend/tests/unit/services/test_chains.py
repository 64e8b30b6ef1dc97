from __future__ import annotations

import pytest
from wallet_api.services.wallets.chains import (
    SUPPORTED_CHAINS,
    is_supported_chain,
    normalize_address,
    validate_address,
)

from tests.helpers.utils import BTC_ADDRESS, ETH_ADDRESS

BECH32_ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


def test_supported_chains():
    assert SUPPORTED_CHAINS == (
        "Ethereum",
        "Bitcoin",
        "Polygon",
        "Binance Smart Chain",
        "Avalanche",
        "Arbitrum",
        "Optimism",
    )
    assert is_supported_chain("Polygon")
    assert not is_supported_chain("polygon")
    assert not is_supported_chain("Solana")


@pytest.mark.parametrize("chain", [c for c in SUPPORTED_CHAINS if c != "Bitcoin"])
def test_evm_chains_accept_hex_addresses(chain):
    assert validate_address(chain, ETH_ADDRESS)
    assert validate_address(chain, ETH_ADDRESS.lower())
    assert not validate_address(chain, BTC_ADDRESS)


@pytest.mark.parametrize(
    "address",
    [
        "0x71C7656EC7ab88b098defB751B7401B5f6d8976",  # 39 hex digits
        "0x71C7656EC7ab88b098defB751B7401B5f6d8976FF",  # 41 hex digits
        "71C7656EC7ab88b098defB751B7401B5f6d8976F00",  # no prefix
        "0xZZC7656EC7ab88b098defB751B7401B5f6d8976F",  # not hex
    ],
)
def test_evm_rejects_malformed(address):
    assert not validate_address("Ethereum", address)


@pytest.mark.parametrize("address", [BTC_ADDRESS, "3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy", BECH32_ADDRESS])
def test_bitcoin_accepts_legacy_p2sh_and_bech32(address):
    assert validate_address("Bitcoin", address)


@pytest.mark.parametrize(
    "address",
    [
        ETH_ADDRESS,
        "0A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",  # wrong leading digit
        "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfN0",  # '0' is not base58
        "BC1QAR0SRRR7XFKVY5L643LYDNW9RE59GTZZWF5MDQ",  # upper-case bech32
    ],
)
def test_bitcoin_rejects_malformed(address):
    assert not validate_address("Bitcoin", address)


def test_unknown_chain_never_validates():
    assert not validate_address("Solana", ETH_ADDRESS)


def test_normalize_address_trims_only():
    assert normalize_address(f"\t{ETH_ADDRESS} \n") == ETH_ADDRESS


@pytest.mark.parametrize(
    ("chain", "address"),
    [
        ("Ethereum", f"{ETH_ADDRESS}\n"),
        ("Polygon", f"{ETH_ADDRESS}\n"),
        ("Bitcoin", f"{BTC_ADDRESS}\n"),
        ("Bitcoin", f"{BECH32_ADDRESS}\n"),
    ],
)
def test_trailing_newline_is_not_a_valid_address(chain, address):
    assert not validate_address(chain, address)
