"""
Swap pipeline: one swap from quote to settlement.

Flow: network check + quote -> allowance -> build -> expiry guard -> sign
-> submit -> monitor. Each stage takes the previous stage's typed output.
A SwapError in any stage stops the run and is recorded on the SwapResult
with the stage it came from; nothing is retried.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import requests

from swapflow_core.config import SwapConfig
from swapflow_core.errors import QuoteError, SwapError
from swapflow_core.event_loop import EventLoop, log_event
from swapflow_core.events import Event, EventKind
from swapflow_core.execution.allowance import AllowanceManager
from swapflow_core.execution.builder import OrderBuilder
from swapflow_core.execution.chain import ChainClient, JsonRpcChainClient
from swapflow_core.execution.monitor import OrderMonitor, RetryPolicy
from swapflow_core.execution.orderbook import HttpOrderBookApi, OrderBookApi
from swapflow_core.execution.quote import QuoteService
from swapflow_core.execution.signer import OrderSigner
from swapflow_core.execution.submitter import OrderSubmitter
from swapflow_core.execution.types import MonitorResult, MonitorState
from swapflow_core.networks import VAULT_RELAYER
from swapflow_core.order import Order, Quote, SignedOrder
from swapflow_core.wallet import Wallet

logger = logging.getLogger(__name__)


class SwapStage(Enum):
    QUOTE = "quote"
    ALLOWANCE = "allowance"
    BUILD = "build"
    SIGN = "sign"
    SUBMIT = "submit"
    MONITOR = "monitor"


@dataclass(frozen=True)
class SwapRequest:
    """What to trade. receiver defaults to the wallet itself."""

    sell_token: str
    buy_token: str
    sell_amount: int
    receiver: str | None = None


@dataclass
class SwapResult:
    """Everything one run produced, up to the stage where it stopped."""

    request: SwapRequest
    quote: Quote | None = None
    allowance_issued: bool | None = None
    order: Order | None = None
    signed_order: SignedOrder | None = None
    order_id: str | None = None
    monitor: MonitorResult | None = None
    failed_stage: SwapStage | None = None
    error: SwapError | None = None
    events: list[Event] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if no fatal stage failed (monitoring outcome aside)."""
        return self.error is None

    @property
    def settled(self) -> bool:
        return self.monitor is not None and self.monitor.state == MonitorState.FULFILLED

    def raise_for_error(self) -> None:
        """Re-raise the fatal error of the run, if any."""
        if self.error is not None:
            raise self.error


class SwapPipeline:
    """
    Runs the order lifecycle for one wallet against one chain and order book.
    Components can be replaced (e.g. a preconfigured OrderMonitor); by default
    they are built from the given adapters.
    Observers are subscribed to the pipeline's EventLoop alongside log_event.
    """

    def __init__(
        self,
        wallet: Wallet,
        chain: ChainClient,
        order_book: OrderBookApi,
        expected_chain_id: int,
        *,
        spender: str = VAULT_RELAYER,
        poll_interval: float = 30.0,
        monitor_timeout: float = 600.0,
        confirmation_timeout: float = 120.0,
        retry_policy: RetryPolicy | None = None,
        observers: Sequence[Callable[[Event], None]] = (),
        monitor: OrderMonitor | None = None,
        now: Callable[[], float] = time.time,
    ) -> None:
        self.wallet = wallet
        self.expected_chain_id = expected_chain_id
        self.spender = spender
        self.poll_interval = poll_interval
        self.monitor_timeout = monitor_timeout
        self._now = now

        self.events = EventLoop()
        self.events.subscribe(log_event)
        for obs in observers:
            self.events.subscribe(obs)

        self.quotes = QuoteService(chain, order_book, expected_chain_id)
        self.allowances = AllowanceManager(chain, wallet, confirmation_timeout=confirmation_timeout)
        self.builder = OrderBuilder()
        self.signer = OrderSigner()
        self.submitter = OrderSubmitter(order_book)
        if monitor is None:
            monitor = OrderMonitor(order_book, retry_policy=retry_policy)
        if monitor.events is None:
            monitor.events = self.events
        elif monitor.events is not self.events:
            # forward monitor events into this pipeline's loop
            monitor.events.subscribe(self.events.dispatch)
        self.monitor = monitor

    @classmethod
    def from_config(
        cls,
        config: SwapConfig,
        *,
        session: requests.Session | None = None,
        **kwargs,
    ) -> "SwapPipeline":
        """Wire a pipeline to the configured RPC endpoint and order-book API."""
        config.validate()
        return cls(
            Wallet.from_private_key(config.private_key),
            JsonRpcChainClient(config.rpc_url, session=session),
            HttpOrderBookApi(config.resolved_order_book_url, session=session),
            config.chain_id,
            poll_interval=config.poll_interval,
            monitor_timeout=config.monitor_timeout,
            confirmation_timeout=config.approval_timeout,
            **kwargs,
        )

    def run(
        self,
        request: SwapRequest,
        *,
        monitor: bool = True,
        cancel: threading.Event | None = None,
    ) -> SwapResult:
        """
        Execute one swap.

        Parameters
        ----------
        request : SwapRequest
            Tokens and exact sell amount (base units). The same integer is used
            for the quote, the allowance check and the signed order.
        monitor : bool
            Poll the order after submission (default True).
        cancel : threading.Event, optional
            Stops monitoring early when set.

        Returns
        -------
        SwapResult
            Outputs of every completed stage; failed_stage and error on failure.
        """
        result = SwapResult(request=request)
        first_event = len(self.events.history)
        owner = self.wallet.address
        receiver = request.receiver or owner
        stage = SwapStage.QUOTE
        logger.info("Swap start: owner=%s sell %s %s -> %s", owner, request.sell_amount, request.sell_token, request.buy_token)

        try:
            quote = self.quotes.get_quote(
                request.sell_token, request.buy_token, owner, request.sell_amount, receiver=receiver
            )
            result.quote = quote
            self.events.emit(
                EventKind.QUOTE_RECEIVED,
                feeAmount=str(quote.fee_amount),
                buyAmount=str(quote.buy_amount),
                validTo=quote.valid_to,
            )

            stage = SwapStage.ALLOWANCE
            result.allowance_issued = self.allowances.ensure_allowance(
                request.sell_token, owner, self.spender, request.sell_amount
            )
            self.events.emit(EventKind.ALLOWANCE_DECISION, issued=result.allowance_issued)

            stage = SwapStage.BUILD
            order = self.builder.build(quote, receiver)
            if order.sell_amount != request.sell_amount:
                raise SwapError(f"sellAmount changed between stages: {request.sell_amount} -> {order.sell_amount}")
            result.order = order

            stage = SwapStage.SIGN
            if order.valid_to <= int(self._now()):
                raise QuoteError(f"Quote expired before signing (validTo={order.valid_to})")
            result.signed_order = self.signer.sign(
                order, self.expected_chain_id, self.wallet, quote_id=quote.quote_id
            )
            self.events.emit(EventKind.ORDER_SIGNED)

            stage = SwapStage.SUBMIT
            result.order_id = self.submitter.submit(result.signed_order)
            self.events.emit(EventKind.ORDER_SUBMITTED, orderId=result.order_id)
        except SwapError as e:
            result.failed_stage = stage
            result.error = e
            logger.error("Swap failed at %s stage: %s", stage.value, e)
            self.events.emit(EventKind.STAGE_FAILED, stage=stage.value, error=str(e))
            result.events = self.events.history[first_event:]
            return result

        if monitor:
            result.monitor = self.monitor.monitor(
                result.order_id, self.monitor_timeout, self.poll_interval, cancel=cancel
            )
        result.events = self.events.history[first_event:]
        return result
