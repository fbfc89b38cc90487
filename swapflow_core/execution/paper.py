"""
Paper adapters: simulate the chain and the order book in memory.

No network. PaperChain keeps allowances and mines approvals instantly;
PaperOrderBook quotes at a fixed price, verifies signatures like the real
service, and replays a scripted status sequence for each order.
"""

from __future__ import annotations

import itertools
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from eth_utils import keccak

from swapflow_core.errors import ChainRpcError, QuoteError, StatusFetchError, SubmissionError
from swapflow_core.execution.chain import APPROVE_GAS_LIMIT, ChainClient
from swapflow_core.execution.orderbook import OrderBookApi
from swapflow_core.execution.signer import order_signable, recover_owner
from swapflow_core.execution.types import TxReceipt
from swapflow_core.order import Order, SignedOrder, SigningScheme

if TYPE_CHECKING:
    from swapflow_core.wallet import Wallet


class PaperChain(ChainClient):
    """
    In-memory chain. Allowances are keyed by (token, owner, spender), lowercased.
    Every call is recorded in .calls; every approval in .approvals.

    reject_sends / revert_approvals / never_mine simulate the three ways an
    approval can fail.
    """

    def __init__(
        self,
        chain_id: int = 1,
        *,
        gas_price: int = 20 * 10**9,
        allowances: dict[tuple[str, str, str], int] | None = None,
        reject_sends: bool = False,
        revert_approvals: bool = False,
        never_mine: bool = False,
    ) -> None:
        self._chain_id = chain_id
        self._gas_price = gas_price
        self._allowances = {self._key(*k): v for k, v in (allowances or {}).items()}
        self.reject_sends = reject_sends
        self.revert_approvals = revert_approvals
        self.never_mine = never_mine
        self._receipts: dict[str, TxReceipt] = {}
        self._block = itertools.count(19_000_000)
        self.calls: list[str] = []
        self.approvals: list[tuple[str, str, str, int]] = []

    @staticmethod
    def _key(token: str, owner: str, spender: str) -> tuple[str, str, str]:
        return (token.lower(), owner.lower(), spender.lower())

    def chain_id(self) -> int:
        self.calls.append("chain_id")
        return self._chain_id

    def gas_price(self) -> int:
        self.calls.append("gas_price")
        return self._gas_price

    def allowance(self, token: str, owner: str, spender: str) -> int:
        self.calls.append("allowance")
        return self._allowances.get(self._key(token, owner, spender), 0)

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
        self.calls.append("send_approve")
        if self.reject_sends:
            raise ChainRpcError("insufficient funds for gas * price + value", code=-32000)
        tx_hash = "0x" + uuid.uuid4().hex * 2
        self.approvals.append((token, wallet.address, spender, amount))
        status = 0 if self.revert_approvals else 1
        if status:
            self._allowances[self._key(token, wallet.address, spender)] = amount
        self._receipts[tx_hash] = TxReceipt(tx_hash=tx_hash, block_number=next(self._block), status=status)
        return tx_hash

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        self.calls.append("wait_for_receipt")
        if self.never_mine or tx_hash not in self._receipts:
            raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout:.0f}s")
        return self._receipts[tx_hash]


def order_uid(order: Order, owner: str, chain_id: int) -> str:
    """Protocol order uid: EIP-712 digest (32 bytes) || owner (20) || validTo (4)."""
    signable = order_signable(order, chain_id)
    digest = keccak(b"\x19" + signable.version + signable.header + signable.body)
    return "0x" + digest.hex() + owner.lower().removeprefix("0x") + order.valid_to.to_bytes(4, "big").hex()


class PaperOrderBook(OrderBookApi):
    """
    Simulated order book.

    Quotes buy_amount = (sellAmountBeforeFee - fee_amount) * price, in base
    units (the default price is ~2500 USDT per WETH). Orders are
    rejected like the real service: expired validTo, signature not from the
    declared owner, insufficient balance (when balances are given). get_order
    replays statuses for each order, repeating the last one; fetch numbers in
    fail_fetches (1-based, counted across all orders) raise StatusFetchError.
    """

    def __init__(
        self,
        *,
        chain_id: int = 1,
        price: Decimal | str = Decimal("0.0000000025"),
        fee_amount: int = 10**14,
        quote_ttl: int = 1800,
        statuses: Sequence[str] = ("open", "fulfilled"),
        fail_fetches: Iterable[int] = (),
        unsupported_tokens: Iterable[str] = (),
        balances: dict[tuple[str, str], int] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not statuses:
            raise ValueError("statuses must not be empty")
        self.chain_id = chain_id
        self.price = Decimal(price)
        self.fee_amount = fee_amount
        self.quote_ttl = quote_ttl
        self.statuses = list(statuses)
        self.fail_fetches = set(fail_fetches)
        self.unsupported_tokens = {t.lower() for t in unsupported_tokens}
        self.balances = {(o.lower(), t.lower()): v for (o, t), v in (balances or {}).items()} if balances else None
        self._clock = clock
        self._quote_ids = itertools.count(1)
        self.orders: dict[str, dict[str, Any]] = {}
        self._polls: dict[str, int] = {}
        self.quote_requests: list[dict[str, Any]] = []
        self.fetch_count = 0

    def post_quote(self, request: dict[str, Any]) -> dict[str, Any]:
        self.quote_requests.append(dict(request))
        for token in (request["sellToken"], request["buyToken"]):
            if token.lower() in self.unsupported_tokens:
                raise QuoteError(
                    "HTTP 400: UnsupportedToken",
                    status_code=400,
                    error_type="UnsupportedToken",
                    description=f"Token {token} is not supported",
                )
        sell_before_fee = int(request["sellAmountBeforeFee"])
        if sell_before_fee <= self.fee_amount:
            raise QuoteError(
                "HTTP 400: SellAmountDoesNotCoverFee",
                status_code=400,
                error_type="SellAmountDoesNotCoverFee",
                description="The sell amount does not cover the fee",
            )
        sell_amount = sell_before_fee - self.fee_amount
        valid_to = int(self._clock()) + self.quote_ttl
        return {
            "quote": {
                "sellToken": request["sellToken"],
                "buyToken": request["buyToken"],
                "receiver": request.get("receiver"),
                "sellAmount": str(sell_amount),
                "buyAmount": str(int(Decimal(sell_amount) * self.price)),
                "validTo": valid_to,
                "appData": "0x" + "00" * 32,
                "feeAmount": str(self.fee_amount),
                "kind": request.get("kind", "sell"),
                "partiallyFillable": False,
                "sellTokenBalance": "erc20",
                "buyTokenBalance": "erc20",
            },
            "from": request["from"],
            "expiration": valid_to,
            "id": next(self._quote_ids),
        }

    def _reject(self, error_type: str, description: str) -> SubmissionError:
        return SubmissionError(
            f"HTTP 400: {error_type}", status_code=400, error_type=error_type, description=description
        )

    def post_order(self, order: dict[str, Any]) -> str:
        parsed = Order.from_api(order)
        owner = order["from"]
        if parsed.valid_to <= int(self._clock()):
            raise self._reject("InsufficientValidTo", "validTo is in the past")
        signed = SignedOrder(
            order=parsed,
            signature=order["signature"],
            signing_scheme=SigningScheme(order["signingScheme"]),
            owner=owner,
        )
        try:
            recovered = recover_owner(signed, self.chain_id)
        except Exception:  # noqa: BLE001
            recovered = None
        if recovered is None or recovered.lower() != owner.lower():
            raise self._reject("InvalidSignature", "signature does not recover to the owner")
        if self.balances is not None:
            balance = self.balances.get((owner.lower(), parsed.sell_token.lower()), 0)
            if balance < parsed.sell_amount:
                raise self._reject("InsufficientBalance", "owner balance below sellAmount")

        uid = order_uid(parsed, owner, self.chain_id)
        self.orders[uid] = dict(order, uid=uid)
        self._polls[uid] = 0
        return uid

    def get_order(self, uid: str) -> dict[str, Any]:
        self.fetch_count += 1
        if self.fetch_count in self.fail_fetches:
            raise StatusFetchError("GET order failed: connection reset")
        if uid not in self.orders:
            raise StatusFetchError("HTTP 404: OrderNotFound", status_code=404, error_type="OrderNotFound")
        index = min(self._polls[uid], len(self.statuses) - 1)
        self._polls[uid] += 1
        record = dict(self.orders[uid], status=self.statuses[index])
        if record["status"] == "fulfilled":
            record.update(
                executedSellAmount=record["sellAmount"],
                executedBuyAmount=record["buyAmount"],
                executedFeeAmount="0",
                txHash="0x" + "ab" * 32,
            )
        return record
