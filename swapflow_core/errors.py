"""
Error taxonomy for the swap lifecycle.

Every fatal failure of a stage is a SwapError subclass. A monitor timeout is
not an error: it is reported as MonitorState.TIMED_OUT.
"""

from __future__ import annotations

from typing import Any


class SwapError(Exception):
    """Base class for all swap lifecycle failures."""


class ConfigError(SwapError):
    """Configuration is missing or invalid."""


class ChainRpcError(SwapError):
    """JSON-RPC endpoint returned an error or could not be reached."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class NetworkMismatchError(SwapError):
    """Connected chain is not the chain the run was configured for."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Connected to chain {actual}, expected chain {expected}")
        self.expected = expected
        self.actual = actual


class AllowanceTxError(SwapError):
    """Approval transaction was rejected, reverted, or never confirmed."""

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class OrderBookError(SwapError):
    """Order-book service rejected a request. Carries the service's error body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
        description: str | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.description = description
        self.body = body


class QuoteError(OrderBookError):
    """Quote request was rejected (unsupported pair, zero amount, ...)."""


class SubmissionError(OrderBookError):
    """Signed order was rejected (bad signature, expired quote, balance, ...)."""


class StatusFetchError(OrderBookError):
    """Status poll failed. Aborts monitoring; the placed order is unaffected."""
