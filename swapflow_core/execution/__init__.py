"""
Execution layer: the six lifecycle components, their adapters, and the pipeline.

ChainClient / OrderBookApi interfaces with JSON-RPC, HTTP and paper adapters.
AllowanceManager, QuoteService, OrderBuilder, OrderSigner, OrderSubmitter,
OrderMonitor; SwapPipeline runs them in order.
"""

from swapflow_core.execution.allowance import AllowanceManager
from swapflow_core.execution.builder import ZERO_FEE_AMOUNT, OrderBuilder
from swapflow_core.execution.chain import ChainClient, JsonRpcChainClient
from swapflow_core.execution.engine import SwapPipeline, SwapRequest, SwapResult, SwapStage
from swapflow_core.execution.monitor import OrderMonitor, RetryPolicy
from swapflow_core.execution.orderbook import HttpOrderBookApi, OrderBookApi
from swapflow_core.execution.paper import PaperChain, PaperOrderBook
from swapflow_core.execution.quote import QuoteService
from swapflow_core.execution.signer import OrderSigner
from swapflow_core.execution.submitter import OrderSubmitter
from swapflow_core.execution.types import (
    AllowanceRecord,
    MonitorResult,
    MonitorState,
    OrderStatusKind,
    OrderStatusSnapshot,
    TxReceipt,
)

__all__ = [
    "AllowanceManager",
    "AllowanceRecord",
    "ChainClient",
    "HttpOrderBookApi",
    "JsonRpcChainClient",
    "MonitorResult",
    "MonitorState",
    "OrderBookApi",
    "OrderBuilder",
    "OrderMonitor",
    "OrderSigner",
    "OrderStatusKind",
    "OrderStatusSnapshot",
    "OrderSubmitter",
    "PaperChain",
    "PaperOrderBook",
    "QuoteService",
    "RetryPolicy",
    "SwapPipeline",
    "SwapRequest",
    "SwapResult",
    "SwapStage",
    "TxReceipt",
    "ZERO_FEE_AMOUNT",
]
