"""
Blockchain abstraction layer.

ChainClient ABC: chain id, gas price, ERC-20 allowance read, approval send and
receipt wait. JsonRpcChainClient talks to any Ethereum JSON-RPC endpoint;
PaperChain (execution.paper) implements it in memory for simulation.
"""

from __future__ import annotations

import itertools
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import requests
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from swapflow_core.errors import ChainRpcError
from swapflow_core.execution.types import TxReceipt

if TYPE_CHECKING:
    from swapflow_core.wallet import Wallet

logger = logging.getLogger(__name__)

ALLOWANCE_SELECTOR = function_signature_to_4byte_selector("allowance(address,address)")
APPROVE_SELECTOR = function_signature_to_4byte_selector("approve(address,uint256)")

APPROVE_GAS_LIMIT = 100_000


def approve_calldata(spender: str, amount: int) -> str:
    """ABI-encoded approve(spender, amount) call."""
    return "0x" + (APPROVE_SELECTOR + encode(["address", "uint256"], [spender, amount])).hex()


def allowance_calldata(owner: str, spender: str) -> str:
    """ABI-encoded allowance(owner, spender) call."""
    return "0x" + (ALLOWANCE_SELECTOR + encode(["address", "address"], [owner, spender])).hex()


class ChainClient(ABC):
    """
    Abstract chain client. Same interface for JSON-RPC and paper simulation.
    Every method is one or more blocking network round trips.
    """

    @abstractmethod
    def chain_id(self) -> int:
        """Id of the connected chain (eth_chainId)."""
        ...

    @abstractmethod
    def gas_price(self) -> int:
        """Current gas price in wei."""
        ...

    @abstractmethod
    def allowance(self, token: str, owner: str, spender: str) -> int:
        """ERC-20 allowance(owner, spender) at the latest block."""
        ...

    @abstractmethod
    def send_approve(
        self,
        wallet: "Wallet",
        token: str,
        spender: str,
        amount: int,
        *,
        gas_price: int,
        gas_limit: int = APPROVE_GAS_LIMIT,
    ) -> str:
        """Sign and broadcast approve(spender, amount) from wallet. Returns the tx hash."""
        ...

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        """
        Block until tx_hash is mined (one confirmation) and return its receipt.
        Raises TimeoutError if it is not mined within timeout seconds.
        """
        ...


class JsonRpcChainClient(ChainClient):
    """
    Chain client over Ethereum JSON-RPC (HTTP POST).

    Transactions are signed locally by the Wallet and broadcast raw; the node
    never sees the key. Receipts are polled every receipt_poll_interval seconds.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 20.0,
        receipt_poll_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rpc_url = rpc_url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.receipt_poll_interval = receipt_poll_interval
        self._clock = clock
        self._sleep = sleep
        self._ids = itertools.count(1)

    def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise ChainRpcError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise ChainRpcError(f"{method} returned invalid JSON") from e
        if body.get("error"):
            err = body["error"]
            raise ChainRpcError(f"{method}: {err.get('message', err)}", code=err.get("code"))
        return body.get("result")

    def chain_id(self) -> int:
        return int(self._rpc("eth_chainId", []), 16)

    def gas_price(self) -> int:
        return int(self._rpc("eth_gasPrice", []), 16)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        call = {"to": to_checksum_address(token), "data": allowance_calldata(owner, spender)}
        result = self._rpc("eth_call", [call, "latest"])
        if not result or result == "0x":
            raise ChainRpcError(f"allowance() returned no data; is {token} an ERC-20 contract?")
        (amount,) = decode(["uint256"], bytes.fromhex(result[2:]))
        return amount

    def send_approve(
        self,
        wallet: "Wallet",
        token: str,
        spender: str,
        amount: int,
        *,
        gas_price: int,
        gas_limit: int = APPROVE_GAS_LIMIT,
    ) -> str:
        nonce = int(self._rpc("eth_getTransactionCount", [wallet.address, "pending"]), 16)
        tx = {
            "to": to_checksum_address(token),
            "value": 0,
            "data": approve_calldata(spender, amount),
            "gas": gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": self.chain_id(),
        }
        raw = wallet.sign_transaction(tx)
        tx_hash = self._rpc("eth_sendRawTransaction", ["0x" + raw.hex()])
        logger.debug("Broadcast approve tx %s (nonce=%s, gasPrice=%s)", tx_hash, nonce, gas_price)
        return tx_hash

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        start = self._clock()
        while True:
            receipt = self._rpc("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                return TxReceipt(
                    tx_hash=tx_hash,
                    block_number=int(receipt["blockNumber"], 16),
                    status=int(receipt.get("status", "0x0"), 16),
                )
            if self._clock() - start >= timeout:
                raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout:.0f}s")
            self._sleep(self.receipt_poll_interval)
