"""
OrderSubmitter: hand the signed order to the order book, get its uid back.
"""

from __future__ import annotations

import logging

from swapflow_core.errors import SubmissionError
from swapflow_core.execution.orderbook import OrderBookApi
from swapflow_core.order import SignedOrder

logger = logging.getLogger(__name__)


class OrderSubmitter:
    """Posts signed orders. The returned uid is the only handle used afterwards."""

    def __init__(self, order_book: OrderBookApi) -> None:
        self.order_book = order_book

    def submit(self, signed_order: SignedOrder) -> str:
        """
        Submit signed_order. Returns the service-assigned order uid.
        Raises SubmissionError on any rejection or an empty uid.
        """
        logger.info(
            "Submitting order: sell %s %s for >= %s %s",
            signed_order.order.sell_amount, signed_order.order.sell_token,
            signed_order.order.buy_amount, signed_order.order.buy_token,
        )
        order_id = self.order_book.post_order(signed_order.to_api())
        if not order_id:
            raise SubmissionError("Order book accepted the order but returned no uid")
        logger.info("Order submitted successfully: %s", order_id)
        return order_id
