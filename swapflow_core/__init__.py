"""
swapflow-core: order lifecycle for a single swap on an off-chain order book.

Quote, allowance, build, sign, submit, monitor. The matching engine, signature
verification and on-chain settlement belong to the external services it calls.
"""

__version__ = "0.1.0"

from swapflow_core.config import SwapConfig, load_config, parse_units
from swapflow_core.errors import (
    AllowanceTxError,
    ChainRpcError,
    ConfigError,
    NetworkMismatchError,
    QuoteError,
    StatusFetchError,
    SubmissionError,
    SwapError,
)
from swapflow_core.events import Event, EventKind
from swapflow_core.event_loop import EventLoop
from swapflow_core.order import Order, Quote, SignedOrder
from swapflow_core.wallet import Wallet

__all__ = [
    "SwapConfig",
    "load_config",
    "parse_units",
    "SwapError",
    "ConfigError",
    "ChainRpcError",
    "NetworkMismatchError",
    "AllowanceTxError",
    "QuoteError",
    "SubmissionError",
    "StatusFetchError",
    "Event",
    "EventKind",
    "EventLoop",
    "Order",
    "Quote",
    "SignedOrder",
    "Wallet",
]
