"""
Quote, Order, SignedOrder: the trade intent as it moves through the lifecycle.

All immutable. Amounts are integers in token base units; to_api() renders
them as decimal strings, the order-book wire format.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

ZERO_APP_DATA = "0x" + "00" * 32


class OrderKind(Enum):
    SELL = "sell"
    BUY = "buy"


class SigningScheme(Enum):
    EIP712 = "eip712"
    ETHSIGN = "ethsign"


class TokenBalance(Enum):
    ERC20 = "erc20"
    EXTERNAL = "external"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Quote:
    """
    Price quote from the order-book service.

    requested_sell_amount is the caller's amount exactly as sent; sell_amount
    is what the service reports (it may net out its fee estimate).
    """

    sell_token: str
    buy_token: str
    sell_amount: int
    buy_amount: int
    fee_amount: int
    valid_to: int
    requested_sell_amount: int
    owner: str
    receiver: str | None = None
    app_data: str = ZERO_APP_DATA
    kind: OrderKind = OrderKind.SELL
    partially_fillable: bool = False
    quote_id: int | None = None

    @classmethod
    def from_api(cls, body: dict[str, Any], *, requested_sell_amount: int, owner: str) -> "Quote":
        """Parse a POST /quote response body."""
        q = body["quote"]
        return cls(
            sell_token=q["sellToken"],
            buy_token=q["buyToken"],
            sell_amount=int(q["sellAmount"]),
            buy_amount=int(q["buyAmount"]),
            fee_amount=int(q.get("feeAmount", 0)),
            valid_to=int(q["validTo"]),
            requested_sell_amount=requested_sell_amount,
            owner=body.get("from", owner),
            receiver=q.get("receiver"),
            app_data=_app_data_hash(q),
            kind=OrderKind(q.get("kind", "sell")),
            partially_fillable=bool(q.get("partiallyFillable", False)),
            quote_id=body.get("id"),
        )


def _app_data_hash(quote: dict[str, Any]) -> str:
    """bytes32 app-data digest from a quote: appDataHash, else a hex appData, else zero."""
    for key in ("appDataHash", "appData"):
        value = quote.get(key)
        if isinstance(value, str) and value.startswith("0x") and len(value) == 66:
            return value
    return ZERO_APP_DATA


@dataclass(frozen=True)
class Order:
    """Unsigned order: the exact struct that gets signed."""

    sell_token: str
    buy_token: str
    receiver: str
    sell_amount: int
    buy_amount: int
    valid_to: int
    app_data: str
    fee_amount: int
    kind: OrderKind = OrderKind.SELL
    partially_fillable: bool = False
    sell_token_balance: TokenBalance = TokenBalance.ERC20
    buy_token_balance: TokenBalance = TokenBalance.ERC20

    @classmethod
    def from_api(cls, body: dict[str, Any]) -> "Order":
        """Parse the order fields of an order-book payload."""
        return cls(
            sell_token=body["sellToken"],
            buy_token=body["buyToken"],
            receiver=body["receiver"],
            sell_amount=int(body["sellAmount"]),
            buy_amount=int(body["buyAmount"]),
            valid_to=int(body["validTo"]),
            app_data=body.get("appData", ZERO_APP_DATA),
            fee_amount=int(body.get("feeAmount", 0)),
            kind=OrderKind(body.get("kind", "sell")),
            partially_fillable=bool(body.get("partiallyFillable", False)),
            sell_token_balance=TokenBalance(body.get("sellTokenBalance", "erc20")),
            buy_token_balance=TokenBalance(body.get("buyTokenBalance", "erc20")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "receiver": self.receiver,
            "sellAmount": str(self.sell_amount),
            "buyAmount": str(self.buy_amount),
            "validTo": self.valid_to,
            "appData": self.app_data,
            "feeAmount": str(self.fee_amount),
            "kind": self.kind.value,
            "partiallyFillable": self.partially_fillable,
            "sellTokenBalance": self.sell_token_balance.value,
            "buyTokenBalance": self.buy_token_balance.value,
        }


@dataclass(frozen=True)
class SignedOrder:
    """Order plus signature. Produced once per run by OrderSigner."""

    order: Order
    signature: str
    signing_scheme: SigningScheme
    owner: str
    quote_id: int | None = None

    def to_api(self) -> dict[str, Any]:
        """Body for POST /orders."""
        body = self.order.to_api()
        body.update(
            {
                "signature": self.signature,
                "signingScheme": self.signing_scheme.value,
                "from": self.owner,
            }
        )
        if self.quote_id is not None:
            body["quoteId"] = self.quote_id
        return body
