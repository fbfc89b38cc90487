"""
End-to-end tests for SwapPipeline against the paper chain and order book.
"""

import pytest
import requests

from swapflow_core import (
    AllowanceTxError,
    EventKind,
    EventLoop,
    NetworkMismatchError,
    QuoteError,
    SubmissionError,
    SwapConfig,
    Wallet,
)
from swapflow_core.config import MAX_UINT256, USDT_MAINNET, WETH_MAINNET
from swapflow_core.execution import (
    HttpOrderBookApi,
    JsonRpcChainClient,
    MonitorState,
    OrderMonitor,
    PaperChain,
    PaperOrderBook,
    SwapPipeline,
    SwapRequest,
    SwapStage,
)
from swapflow_core.execution.signer import recover_owner
from swapflow_core.networks import VAULT_RELAYER

SELL_AMOUNT = 10**16
REQUEST = SwapRequest(sell_token=WETH_MAINNET, buy_token=USDT_MAINNET, sell_amount=SELL_AMOUNT)


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def _pipeline(chain=None, order_book=None, **kwargs):
    wallet = Wallet.from_private_key("0x" + "11" * 32)
    chain = chain or PaperChain()
    order_book = order_book or PaperOrderBook()
    clock = FakeClock()
    kwargs.setdefault("monitor", OrderMonitor(order_book, clock=clock, sleep=clock.sleep))
    pipeline = SwapPipeline(wallet, chain, order_book, 1, **kwargs)
    return pipeline, chain, order_book, clock


# --- Happy path ---


def test_swap_end_to_end():
    order_book = PaperOrderBook(statuses=("open", "open", "open", "fulfilled"))
    pipeline, chain, _, clock = _pipeline(order_book=order_book)
    result = pipeline.run(REQUEST)

    assert result.ok
    assert result.settled
    assert result.failed_stage is None
    assert result.allowance_issued is True
    assert chain.approvals == [(WETH_MAINNET, pipeline.wallet.address, VAULT_RELAYER, MAX_UINT256)]
    assert result.monitor.state == MonitorState.FULFILLED
    assert result.monitor.fetches == 4
    assert clock.sleeps == [30.0, 30.0, 30.0]
    assert result.monitor.last_status.tx_hash == "0x" + "ab" * 32
    assert result.order_id in order_book.orders


def test_event_order():
    pipeline, _, _, _ = _pipeline(order_book=PaperOrderBook(statuses=("open", "fulfilled")))
    result = pipeline.run(REQUEST)
    assert [e.kind for e in result.events] == [
        EventKind.QUOTE_RECEIVED,
        EventKind.ALLOWANCE_DECISION,
        EventKind.ORDER_SIGNED,
        EventKind.ORDER_SUBMITTED,
        EventKind.STATUS_UPDATE,
        EventKind.STATUS_UPDATE,
        EventKind.MONITOR_TERMINAL,
    ]
    assert result.events[0].payload["feeAmount"] == str(result.quote.fee_amount)
    assert result.events[1].payload == {"issued": True}
    assert result.events[3].payload == {"orderId": result.order_id}


def test_sell_amount_and_fee_invariants():
    pipeline, _, order_book, _ = _pipeline(order_book=PaperOrderBook(fee_amount=10**14))
    result = pipeline.run(REQUEST)
    assert order_book.quote_requests[0]["sellAmountBeforeFee"] == str(SELL_AMOUNT)
    assert result.order.sell_amount == SELL_AMOUNT
    assert result.signed_order.order.sell_amount == SELL_AMOUNT
    assert result.quote.fee_amount == 10**14
    assert result.order.fee_amount == 0
    submitted = order_book.orders[result.order_id]
    assert submitted["sellAmount"] == str(SELL_AMOUNT)
    assert submitted["feeAmount"] == "0"
    assert submitted["quoteId"] == result.quote.quote_id
    assert recover_owner(result.signed_order, 1) == pipeline.wallet.address


def test_second_run_skips_approval():
    pipeline, chain, _, _ = _pipeline()
    first = pipeline.run(REQUEST)
    second = pipeline.run(REQUEST)
    assert first.allowance_issued is True
    assert second.allowance_issued is False
    assert len(chain.approvals) == 1
    assert second.events[0].kind == EventKind.QUOTE_RECEIVED


def test_run_without_monitoring():
    pipeline, _, order_book, _ = _pipeline()
    result = pipeline.run(REQUEST, monitor=False)
    assert result.ok
    assert result.monitor is None
    assert not result.settled
    assert order_book.fetch_count == 0
    assert result.events[-1].kind == EventKind.ORDER_SUBMITTED


def test_monitor_timeout_is_not_a_failure():
    pipeline, _, _, _ = _pipeline(
        order_book=PaperOrderBook(statuses=("open",)), poll_interval=30, monitor_timeout=90
    )
    result = pipeline.run(REQUEST)
    assert result.ok
    assert result.monitor.state == MonitorState.TIMED_OUT
    assert result.monitor.fetches == 4
    assert result.events[-1].kind == EventKind.MONITOR_TIMEOUT


def test_monitor_with_own_event_loop_still_reports_to_pipeline():
    order_book = PaperOrderBook(statuses=("open", "fulfilled"))
    clock = FakeClock()
    own_events = EventLoop()
    monitor = OrderMonitor(order_book, events=own_events, clock=clock, sleep=clock.sleep)
    seen = []
    pipeline, _, _, _ = _pipeline(order_book=order_book, monitor=monitor, observers=[seen.append])
    result = pipeline.run(REQUEST)
    kinds = [e.kind for e in result.events]
    assert kinds[-3:] == [EventKind.STATUS_UPDATE, EventKind.STATUS_UPDATE, EventKind.MONITOR_TERMINAL]
    assert seen == result.events
    assert [e.kind for e in own_events.history] == kinds[-3:]
    assert monitor.events is own_events


def test_observers_receive_events():
    seen = []
    pipeline, _, _, _ = _pipeline(observers=[seen.append])
    result = pipeline.run(REQUEST)
    assert seen == result.events


# --- Stage failures ---


def test_network_mismatch_fails_quote_stage():
    pipeline, chain, order_book, _ = _pipeline(chain=PaperChain(chain_id=100))
    result = pipeline.run(REQUEST)
    assert not result.ok
    assert result.failed_stage == SwapStage.QUOTE
    assert isinstance(result.error, NetworkMismatchError)
    assert order_book.quote_requests == []
    assert chain.approvals == []
    assert [e.kind for e in result.events] == [EventKind.STAGE_FAILED]
    assert result.events[0].payload["stage"] == "quote"
    with pytest.raises(NetworkMismatchError):
        result.raise_for_error()


def test_approval_revert_fails_allowance_stage():
    pipeline, _, order_book, _ = _pipeline(chain=PaperChain(revert_approvals=True))
    result = pipeline.run(REQUEST)
    assert result.failed_stage == SwapStage.ALLOWANCE
    assert isinstance(result.error, AllowanceTxError)
    assert result.quote is not None
    assert result.order is None
    assert order_book.orders == {}


def test_rejected_order_fails_submit_stage():
    wallet_address = Wallet.from_private_key("0x" + "11" * 32).address
    order_book = PaperOrderBook(balances={(wallet_address, WETH_MAINNET): 1})
    pipeline, _, _, _ = _pipeline(order_book=order_book)
    result = pipeline.run(REQUEST)
    assert result.failed_stage == SwapStage.SUBMIT
    assert isinstance(result.error, SubmissionError)
    assert result.signed_order is not None
    assert result.order_id is None
    assert result.monitor is None


def test_expired_quote_fails_sign_stage():
    pipeline, _, order_book, _ = _pipeline(now=lambda: 4_000_000_000.0)
    result = pipeline.run(REQUEST)
    assert result.failed_stage == SwapStage.SIGN
    assert isinstance(result.error, QuoteError)
    assert "expired" in str(result.error)
    assert result.signed_order is None
    assert order_book.orders == {}


def test_quote_rejection_fails_quote_stage():
    pipeline, chain, _, _ = _pipeline(order_book=PaperOrderBook(unsupported_tokens=[USDT_MAINNET]))
    result = pipeline.run(REQUEST)
    assert result.failed_stage == SwapStage.QUOTE
    assert result.error.error_type == "UnsupportedToken"
    assert "allowance" not in chain.calls


# --- Wiring ---


def test_from_config_wires_http_adapters():
    config = SwapConfig(private_key="0x" + "11" * 32, rpc_url="https://rpc.example", chain_id=100, poll_interval=5.0)
    pipeline = SwapPipeline.from_config(config, session=requests.Session())
    assert isinstance(pipeline.quotes.chain, JsonRpcChainClient)
    assert isinstance(pipeline.submitter.order_book, HttpOrderBookApi)
    assert pipeline.submitter.order_book.base_url == "https://api.cow.fi/xdai"
    assert pipeline.expected_chain_id == 100
    assert pipeline.poll_interval == 5.0
    assert pipeline.monitor.events is pipeline.events
