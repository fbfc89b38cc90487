"""
Protocol constants per supported network.

Addresses are the canonical GPv2 deployments, identical on every chain.
They are assumed, not fetched from the order-book service.
"""

from __future__ import annotations

from enum import IntEnum


class SupportedChainId(IntEnum):
    MAINNET = 1
    GNOSIS_CHAIN = 100
    BASE = 8453
    ARBITRUM_ONE = 42161
    SEPOLIA = 11155111


# GPv2Settlement: EIP-712 verifying contract for orders.
SETTLEMENT_CONTRACT = "0x9008D19f58AAbD9eD0D60971565AA8510560ab41"

# GPv2VaultRelayer: the spender that pulls sell tokens at settlement.
VAULT_RELAYER = "0xC92E8bdf79f0507f65a392b0ab4667716BFE0110"

ORDER_BOOK_URLS: dict[int, str] = {
    SupportedChainId.MAINNET: "https://api.cow.fi/mainnet",
    SupportedChainId.GNOSIS_CHAIN: "https://api.cow.fi/xdai",
    SupportedChainId.BASE: "https://api.cow.fi/base",
    SupportedChainId.ARBITRUM_ONE: "https://api.cow.fi/arbitrum_one",
    SupportedChainId.SEPOLIA: "https://api.cow.fi/sepolia",
}

EXPLORER_TX_URLS: dict[int, str] = {
    SupportedChainId.MAINNET: "https://etherscan.io/tx/",
    SupportedChainId.GNOSIS_CHAIN: "https://gnosisscan.io/tx/",
    SupportedChainId.BASE: "https://basescan.org/tx/",
    SupportedChainId.ARBITRUM_ONE: "https://arbiscan.io/tx/",
    SupportedChainId.SEPOLIA: "https://sepolia.etherscan.io/tx/",
}


def order_book_url(chain_id: int) -> str:
    """Base URL of the order-book API for chain_id. KeyError if unsupported."""
    try:
        return ORDER_BOOK_URLS[chain_id]
    except KeyError:
        raise KeyError(f"No order-book endpoint known for chain {chain_id}") from None


def explorer_tx_url(chain_id: int, tx_hash: str) -> str | None:
    """Block explorer link for a transaction, or None for unknown chains."""
    base = EXPLORER_TX_URLS.get(chain_id)
    return f"{base}{tx_hash}" if base else None
