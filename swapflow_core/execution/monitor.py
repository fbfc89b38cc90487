"""
OrderMonitor: poll an order's status until it is terminal or time runs out.

State machine: PENDING -> FULFILLED | CANCELLED | EXPIRED | TIMED_OUT | ERRORED
| ABORTED. Polls are poll_interval apart; once timeout has elapsed exactly one
final fetch decides the outcome. A failed fetch is retried per RetryPolicy;
when retries are exhausted the monitor stops in ERRORED. The order itself
stays live on the service either way.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone

from swapflow_core.errors import StatusFetchError
from swapflow_core.event_loop import EventLoop
from swapflow_core.events import EventKind
from swapflow_core.execution.orderbook import OrderBookApi
from swapflow_core.execution.types import MonitorResult, MonitorState, OrderStatusSnapshot

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_TIMEOUT = 600.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retries for a failed status fetch: up to max_retries more attempts,
    waiting backoff, backoff * multiplier, ... seconds between them.
    """

    max_retries: int = 2
    backoff: float = 2.0
    multiplier: float = 2.0

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        """Stop monitoring on the first failed fetch."""
        return cls(max_retries=0)

    def delays(self) -> Iterator[float]:
        for attempt in range(self.max_retries):
            yield self.backoff * self.multiplier**attempt


class OrderMonitor:
    """
    Polls GET order/{uid}. Clock and sleep are injectable so the loop can be
    driven by a simulated clock. clock measures elapsed time; now (epoch
    seconds) stamps the status history, and follows clock when only clock
    is given. Emits status_update per observation and one closing event when
    an EventLoop is attached.
    """

    def __init__(
        self,
        order_book: OrderBookApi,
        *,
        retry_policy: RetryPolicy | None = None,
        events: EventLoop | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.order_book = order_book
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self.events = events
        self._clock = clock if clock is not None else time.monotonic
        if now is None:
            now = clock if clock is not None else time.time
        self._now = now
        self._sleep = sleep

    def _emit(self, kind: EventKind, **payload) -> None:
        if self.events is not None:
            self.events.emit(kind, **payload)

    def _fetch(self, order_id: str, result: MonitorResult) -> OrderStatusSnapshot | None:
        """One status observation, with retries. None means the monitor is now ERRORED."""
        delays = self.retry_policy.delays()
        while True:
            result.fetches += 1
            try:
                body = self.order_book.get_order(order_id)
                try:
                    snapshot = OrderStatusSnapshot.from_api(body, uid=order_id)
                except (TypeError, ValueError) as e:
                    raise StatusFetchError(f"Malformed order payload: {e!r}", body=body) from e
            except StatusFetchError as e:
                delay = next(delays, None)
                if delay is None:
                    logger.error("Error checking order %s: %s", order_id, e)
                    result.state = MonitorState.ERRORED
                    result.error = e
                    self._emit(EventKind.MONITOR_ERROR, orderId=order_id, error=str(e))
                    return None
                logger.warning("Status fetch failed (%s); retrying in %.1fs", e, delay)
                self._sleep(delay)
                continue

            result.last_status = snapshot
            observed_at = datetime.fromtimestamp(self._now(), tz=timezone.utc)
            result.history.append((observed_at, snapshot.status))
            logger.info("Order status: %s", snapshot.raw_status)
            self._emit(EventKind.STATUS_UPDATE, orderId=order_id, status=snapshot.status.value)
            return snapshot

    def monitor(
        self,
        order_id: str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        *,
        cancel: threading.Event | None = None,
    ) -> MonitorResult:
        """
        Watch order_id until a terminal status, an error, cancellation or timeout.

        Parameters
        ----------
        order_id : str
            Uid returned by OrderSubmitter.submit.
        timeout : float
            Seconds of polling before the final fetch (default 600).
        poll_interval : float
            Seconds between fetches (default 30).
        cancel : threading.Event, optional
            When set, polling stops before the next fetch (state ABORTED).

        Returns
        -------
        MonitorResult
            state, number of fetches, last snapshot and status history.
        """
        if timeout < 0 or poll_interval <= 0:
            raise ValueError("timeout must be >= 0 and poll_interval > 0")
        result = MonitorResult(order_id=order_id, state=MonitorState.PENDING)
        logger.info("Monitoring order %s for up to %.0fs (every %.0fs)", order_id, timeout, poll_interval)
        start = self._clock()

        while self._clock() - start < timeout:
            if cancel is not None and cancel.is_set():
                logger.info("Monitoring of %s cancelled by caller", order_id)
                result.state = MonitorState.ABORTED
                self._emit(EventKind.MONITOR_ABORTED, orderId=order_id)
                return result
            snapshot = self._fetch(order_id, result)
            if snapshot is None:
                return result
            if snapshot.status.is_terminal:
                result.state = MonitorState.from_status(snapshot.status)
                logger.info("Order %s reached %s", order_id, result.state.value)
                self._emit(EventKind.MONITOR_TERMINAL, orderId=order_id, status=result.state.value)
                return result
            self._sleep(poll_interval)

        logger.info("Monitoring timeout reached for %s; final status check", order_id)
        snapshot = self._fetch(order_id, result)
        if snapshot is None:
            return result
        state = MonitorState.from_status(snapshot.status)
        if state == MonitorState.PENDING:
            result.state = MonitorState.TIMED_OUT
            self._emit(EventKind.MONITOR_TIMEOUT, orderId=order_id)
        else:
            result.state = state
            self._emit(EventKind.MONITOR_TERMINAL, orderId=order_id, status=state.value)
        return result
