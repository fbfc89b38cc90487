"""
Tests for swapflow_core: Event, EventLoop, Quote, Order, Wallet, status types, networks.
"""

import logging
from datetime import datetime, timezone

import pytest

from swapflow_core import Event, EventKind, EventLoop, Order, Quote, Wallet
from swapflow_core.event_loop import log_event
from swapflow_core.execution.types import MonitorState, OrderStatusKind, OrderStatusSnapshot
from swapflow_core.networks import SupportedChainId, explorer_tx_url, order_book_url
from swapflow_core.order import ZERO_APP_DATA, OrderKind, SignedOrder, SigningScheme

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
OWNER = "0x1111111111111111111111111111111111111111"


# --- Event ---


def test_event_creation():
    ts = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
    e = Event(kind=EventKind.ORDER_SUBMITTED, payload={"orderId": "0xabc"}, timestamp=ts)
    assert e.timestamp == ts
    assert e.kind == EventKind.ORDER_SUBMITTED
    assert e.payload == {"orderId": "0xabc"}


def test_event_immutable():
    e = Event(kind=EventKind.ORDER_SIGNED)
    with pytest.raises(AttributeError):
        e.kind = EventKind.MONITOR_TIMEOUT


def test_event_parses_iso_timestamp():
    e = Event(kind=EventKind.ORDER_SIGNED, timestamp="2024-01-15T10:00:00")
    assert e.timestamp == datetime(2024, 1, 15, 10, 0, 0)


# --- EventLoop ---


def test_event_loop_dispatch_order():
    log = []
    loop = EventLoop()
    loop.subscribe(lambda ev: log.append(("a", ev)))
    loop.subscribe(lambda ev: log.append(("b", ev)))
    ev = Event(kind=EventKind.ORDER_SIGNED)
    loop.dispatch(ev)
    assert log == [("a", ev), ("b", ev)]


def test_event_loop_emit_records_history():
    loop = EventLoop()
    loop.emit(EventKind.ALLOWANCE_DECISION, issued=True)
    loop.emit(EventKind.ORDER_SIGNED)
    kinds = [e.kind for e in loop.history]
    assert kinds == [EventKind.ALLOWANCE_DECISION, EventKind.ORDER_SIGNED]
    assert loop.history[0].payload == {"issued": True}


def test_log_event_levels(caplog):
    with caplog.at_level(logging.INFO, logger="swapflow_core.event_loop"):
        log_event(Event(kind=EventKind.ORDER_SUBMITTED, payload={"orderId": "0x1"}))
        log_event(Event(kind=EventKind.STAGE_FAILED, payload={"stage": "quote"}))
    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.INFO, logging.WARNING]
    assert "order_submitted" in caplog.records[0].getMessage()


# --- Quote ---


def _quote_body(**overrides):
    quote = {
        "sellToken": WETH,
        "buyToken": USDT,
        "receiver": OWNER,
        "sellAmount": "9900000000000000",
        "buyAmount": "24750000",
        "validTo": 1_900_000_000,
        "appData": ZERO_APP_DATA,
        "feeAmount": "100000000000000",
        "kind": "sell",
        "partiallyFillable": False,
    }
    quote.update(overrides)
    return {"quote": quote, "from": OWNER, "id": 42}


def test_quote_from_api_keeps_requested_amount():
    q = Quote.from_api(_quote_body(), requested_sell_amount=10**16, owner=OWNER)
    assert q.requested_sell_amount == 10**16
    assert q.sell_amount == 9_900_000_000_000_000
    assert q.fee_amount == 10**14
    assert q.buy_amount == 24_750_000
    assert q.quote_id == 42
    assert q.kind == OrderKind.SELL


def test_quote_prefers_app_data_hash():
    digest = "0x" + "ab" * 32
    q = Quote.from_api(
        _quote_body(appData='{"appCode":"swapflow"}', appDataHash=digest),
        requested_sell_amount=1,
        owner=OWNER,
    )
    assert q.app_data == digest


def test_quote_non_hex_app_data_falls_back_to_zero():
    q = Quote.from_api(_quote_body(appData="{}"), requested_sell_amount=1, owner=OWNER)
    assert q.app_data == ZERO_APP_DATA


# --- Order ---


def _order(**overrides):
    fields = dict(
        sell_token=WETH,
        buy_token=USDT,
        receiver=OWNER,
        sell_amount=10**16,
        buy_amount=24_750_000,
        valid_to=1_900_000_000,
        app_data=ZERO_APP_DATA,
        fee_amount=0,
    )
    fields.update(overrides)
    return Order(**fields)


def test_order_to_api_uses_decimal_strings():
    body = _order().to_api()
    assert body["sellAmount"] == "10000000000000000"
    assert body["feeAmount"] == "0"
    assert body["kind"] == "sell"
    assert body["sellTokenBalance"] == "erc20"
    assert body["validTo"] == 1_900_000_000


def test_order_from_api_inverts_to_api():
    o = _order(fee_amount=5, partially_fillable=True)
    assert Order.from_api(o.to_api()) == o


def test_signed_order_to_api_includes_signature_and_quote():
    signed = SignedOrder(
        order=_order(), signature="0x" + "00" * 65, signing_scheme=SigningScheme.EIP712, owner=OWNER, quote_id=7
    )
    body = signed.to_api()
    assert body["signingScheme"] == "eip712"
    assert body["from"] == OWNER
    assert body["quoteId"] == 7
    assert body["feeAmount"] == "0"


def test_order_immutable():
    o = _order()
    with pytest.raises(AttributeError):
        o.fee_amount = 1


# --- Status types ---


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("open", OrderStatusKind.PENDING),
        ("presignaturePending", OrderStatusKind.PENDING),
        ("fulfilled", OrderStatusKind.FULFILLED),
        ("cancelled", OrderStatusKind.CANCELLED),
        ("expired", OrderStatusKind.EXPIRED),
        ("somethingNew", OrderStatusKind.UNKNOWN),
        (None, OrderStatusKind.UNKNOWN),
    ],
)
def test_order_status_kind_from_api(raw, expected):
    assert OrderStatusKind.from_api(raw) == expected


def test_monitor_state_from_status():
    assert MonitorState.from_status(OrderStatusKind.FULFILLED) == MonitorState.FULFILLED
    assert MonitorState.from_status(OrderStatusKind.EXPIRED) == MonitorState.EXPIRED
    assert MonitorState.from_status(OrderStatusKind.PENDING) == MonitorState.PENDING
    assert MonitorState.from_status(OrderStatusKind.UNKNOWN) == MonitorState.PENDING


def test_status_snapshot_parses_executed_amounts():
    snap = OrderStatusSnapshot.from_api(
        {
            "uid": "0xabc",
            "status": "fulfilled",
            "sellAmount": "10",
            "executedSellAmount": "10",
            "executedBuyAmount": "25",
            "executedFeeAmount": "0",
            "txHash": "0xdead",
        }
    )
    assert snap.status == OrderStatusKind.FULFILLED
    assert snap.executed_buy_amount == 25
    assert snap.tx_hash == "0xdead"
    assert snap.buy_amount is None


# --- Wallet ---


def test_wallet_from_private_key_accepts_bare_hex():
    a = Wallet.from_private_key("11" * 32)
    b = Wallet.from_private_key("0x" + "11" * 32)
    assert a.address == b.address
    assert a.address.startswith("0x") and len(a.address) == 42


def test_wallet_is_read_only():
    w = Wallet.from_private_key("11" * 32)
    with pytest.raises(AttributeError):
        w.address = OWNER
    assert "11" * 32 not in repr(w)


# --- Networks ---


def test_order_book_url_per_chain():
    assert order_book_url(SupportedChainId.MAINNET) == "https://api.cow.fi/mainnet"
    assert order_book_url(100) == "https://api.cow.fi/xdai"
    with pytest.raises(KeyError):
        order_book_url(999)


def test_explorer_tx_url():
    assert explorer_tx_url(1, "0xabc") == "https://etherscan.io/tx/0xabc"
    assert explorer_tx_url(999, "0xabc") is None
