"""
Tests for reporting: status history frame, event frame, printed summary.
"""

import pandas as pd

from swapflow_core import Event, EventKind, Wallet
from swapflow_core.config import USDT_MAINNET, WETH_MAINNET
from swapflow_core.execution import (
    OrderMonitor,
    PaperChain,
    PaperOrderBook,
    SwapPipeline,
    SwapRequest,
)
from reporting import event_frame, print_report, status_history_frame

REQUEST = SwapRequest(sell_token=WETH_MAINNET, buy_token=USDT_MAINNET, sell_amount=10**16)


def _run(chain=None, statuses=("open", "fulfilled")):
    order_book = PaperOrderBook(statuses=statuses)
    monitor = OrderMonitor(order_book, sleep=lambda s: None)
    pipeline = SwapPipeline(
        Wallet.from_private_key("0x" + "11" * 32), chain or PaperChain(), order_book, 1, monitor=monitor
    )
    return pipeline.run(REQUEST)


def test_status_history_frame():
    df = status_history_frame(_run())
    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.name == "timestamp"
    assert list(df["poll"]) == [1, 2]
    assert list(df["status"]) == ["pending", "fulfilled"]


def test_status_history_frame_empty_when_not_monitored():
    result = _run(chain=PaperChain(chain_id=5))
    df = status_history_frame(result)
    assert df.empty
    assert list(df.columns) == ["poll", "status"]


def test_event_frame():
    events = [
        Event(kind=EventKind.ORDER_SUBMITTED, payload={"orderId": "0x1"}),
        Event(kind=EventKind.MONITOR_TERMINAL, payload={"orderId": "0x1", "status": "fulfilled"}),
    ]
    df = event_frame(events)
    assert list(df["kind"]) == ["order_submitted", "monitor_terminal"]
    assert list(df["orderId"]) == ["0x1", "0x1"]
    assert df.index.name == "timestamp"
    assert event_frame([]).empty


def test_print_report_settled(capsys):
    result = _run()
    history = print_report(result, chain_id=1)
    out = capsys.readouterr().out
    assert "--- Swap Report ---" in out
    assert "Approval sent:    yes" in out
    assert f"Order ID:         {result.order_id}" in out
    assert "Final state:      fulfilled after 2 fetches" in out
    assert "Settlement tx:    0x" + "ab" * 32 in out
    assert "https://etherscan.io/tx/0x" in out
    assert "Status polls:     2" in out
    assert len(history) == 2


def test_print_report_failed_run(capsys):
    result = _run(chain=PaperChain(chain_id=5))
    history = print_report(result, chain_id=1)
    out = capsys.readouterr().out
    assert "FAILED at stage:  quote" in out
    assert "Order ID" not in out
    assert "Status polls:     0" in out
    assert history.empty
