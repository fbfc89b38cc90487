"""
Wallet: an address plus a signing capability.

Read-only after construction. The private key never leaves the underlying
eth-account LocalAccount.
"""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import SignableMessage


class Wallet:
    """Signing identity for one run. Construct once, share read-only."""

    __slots__ = ("_account",)

    def __init__(self, account: Any) -> None:
        object.__setattr__(self, "_account", account)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Wallet is read-only")

    def __repr__(self) -> str:
        return f"Wallet(address={self.address})"

    @classmethod
    def from_private_key(cls, private_key: str) -> "Wallet":
        key = private_key if private_key.startswith("0x") else "0x" + private_key
        return cls(Account.from_key(key))

    @property
    def address(self) -> str:
        """Checksummed address."""
        return self._account.address

    def sign_message(self, message: SignableMessage) -> bytes:
        """Sign an encoded (e.g. EIP-712) message. Returns 65-byte r||s||v."""
        return bytes(self._account.sign_message(message).signature)

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        """Sign a transaction dict. Returns the raw RLP-encoded transaction."""
        return bytes(self._account.sign_transaction(tx).raw_transaction)
