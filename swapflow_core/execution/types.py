"""
Execution-layer types: order status, monitor outcome, allowance and receipts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class OrderStatusKind(Enum):
    """Status of an order as reported by the order-book service."""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    UNKNOWN = "unknown"

    @classmethod
    def from_api(cls, raw: str | None) -> "OrderStatusKind":
        """Map a service status string. open/presignaturePending are pending."""
        if raw in ("open", "presignaturePending", "pending"):
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatusKind.FULFILLED, OrderStatusKind.CANCELLED, OrderStatusKind.EXPIRED)


class MonitorState(Enum):
    """OrderMonitor state machine. PENDING is initial; all others are terminal."""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    ABORTED = "aborted"

    @classmethod
    def from_status(cls, status: OrderStatusKind) -> "MonitorState":
        """Terminal order status -> matching state; anything else stays PENDING."""
        return {
            OrderStatusKind.FULFILLED: cls.FULFILLED,
            OrderStatusKind.CANCELLED: cls.CANCELLED,
            OrderStatusKind.EXPIRED: cls.EXPIRED,
        }.get(status, cls.PENDING)


@dataclass(frozen=True)
class OrderStatusSnapshot:
    """One GET /orders/{uid} observation. Immutable."""

    uid: str
    status: OrderStatusKind
    raw_status: str | None = None
    sell_token: str | None = None
    buy_token: str | None = None
    sell_amount: int | None = None
    buy_amount: int | None = None
    fee_amount: int | None = None
    valid_to: int | None = None
    executed_sell_amount: int | None = None
    executed_buy_amount: int | None = None
    executed_fee_amount: int | None = None
    tx_hash: str | None = None
    creation_date: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, body: dict[str, Any], uid: str | None = None) -> "OrderStatusSnapshot":
        def _int(key: str) -> int | None:
            value = body.get(key)
            return int(value) if value not in (None, "") else None

        raw_status = body.get("status")
        return cls(
            uid=body.get("uid", uid or ""),
            status=OrderStatusKind.from_api(raw_status),
            raw_status=raw_status,
            sell_token=body.get("sellToken"),
            buy_token=body.get("buyToken"),
            sell_amount=_int("sellAmount"),
            buy_amount=_int("buyAmount"),
            fee_amount=_int("feeAmount"),
            valid_to=_int("validTo"),
            executed_sell_amount=_int("executedSellAmount"),
            executed_buy_amount=_int("executedBuyAmount"),
            executed_fee_amount=_int("executedFeeAmount"),
            tx_hash=body.get("txHash"),
            creation_date=body.get("creationDate"),
            raw=dict(body),
        )


@dataclass
class MonitorResult:
    """Outcome of OrderMonitor.monitor()."""

    order_id: str
    state: MonitorState
    fetches: int = 0
    last_status: OrderStatusSnapshot | None = None
    history: list[tuple[datetime, OrderStatusKind]] = field(default_factory=list)
    error: Exception | None = None

    @property
    def timed_out(self) -> bool:
        return self.state == MonitorState.TIMED_OUT


@dataclass(frozen=True)
class AllowanceRecord:
    """Allowance of owner -> spender for token, read fresh from chain."""

    token: str
    owner: str
    spender: str
    current_amount: int

    def covers(self, required_amount: int) -> bool:
        return self.current_amount >= required_amount


@dataclass(frozen=True)
class TxReceipt:
    """Mined transaction. status 1 = success, 0 = reverted."""

    tx_hash: str
    block_number: int
    status: int

    @property
    def succeeded(self) -> bool:
        return self.status == 1
