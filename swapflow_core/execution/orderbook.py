"""
Order-book service abstraction layer.

OrderBookApi ABC: post_quote, post_order, get_order, working on wire-format
dicts. HttpOrderBookApi implements it against the protocol's REST API;
PaperOrderBook (execution.paper) simulates it in memory.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from swapflow_core.errors import OrderBookError, QuoteError, StatusFetchError, SubmissionError

logger = logging.getLogger(__name__)


class OrderBookApi(ABC):
    """
    Abstract order-book service. Implementations raise QuoteError,
    SubmissionError and StatusFetchError respectively on any failure.
    """

    @abstractmethod
    def post_quote(self, request: dict[str, Any]) -> dict[str, Any]:
        """POST a quote request; return the response body ({"quote": {...}, "id": ...})."""
        ...

    @abstractmethod
    def post_order(self, order: dict[str, Any]) -> str:
        """POST a signed order; return the order uid assigned by the service."""
        ...

    @abstractmethod
    def get_order(self, uid: str) -> dict[str, Any]:
        """GET the current order record (includes "status")."""
        ...


class HttpOrderBookApi(OrderBookApi):
    """
    REST client for the order-book service.

    base_url is the per-network root, e.g. https://api.cow.fi/mainnet.
    Non-2xx answers are mapped to the operation's error type with the
    service's errorType/description attached.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 20.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _request(
        self,
        method: str,
        path: str,
        error_cls: type[OrderBookError],
        payload: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise error_cls(f"{method} {path} failed: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {"description": response.text}
            if not isinstance(body, dict):
                body = {"description": str(body)}
            error_type = body.get("errorType")
            description = body.get("description")
            logger.warning(
                "Order book rejected %s %s: HTTP %s %s %s",
                method, path, response.status_code, error_type, description,
            )
            message = f"HTTP {response.status_code}: {error_type or response.reason}"
            if description:
                message += f" ({description})"
            raise error_cls(
                message,
                status_code=response.status_code,
                error_type=error_type,
                description=description,
                body=body,
            )
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"{method} {path} returned invalid JSON") from e

    def post_quote(self, request: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/v1/quote", QuoteError, request)

    def post_order(self, order: dict[str, Any]) -> str:
        uid = self._request("POST", "/api/v1/orders", SubmissionError, order)
        if not isinstance(uid, str):
            raise SubmissionError(f"Unexpected order uid in response: {uid!r}")
        return uid

    def get_order(self, uid: str) -> dict[str, Any]:
        body = self._request("GET", f"/api/v1/orders/{uid}", StatusFetchError)
        if not isinstance(body, dict):
            raise StatusFetchError(f"Unexpected order payload: {body!r}")
        return body
