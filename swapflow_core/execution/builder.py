"""
OrderBuilder: quote + policy overrides -> unsigned Order.

Fee policy: the signed feeAmount is always ZERO_FEE_AMOUNT, whatever fee the
quote reported; the quoted fee is logged, never signed. This changes the
settlement economics relative to the quote. sellAmount is the amount the
caller asked to sell, unchanged.
"""

from __future__ import annotations

import logging

from swapflow_core.order import Order, Quote

logger = logging.getLogger(__name__)

ZERO_FEE_AMOUNT = 0


class OrderBuilder:
    """Builds the order struct that will be signed."""

    def build(self, quote: Quote, receiver: str) -> Order:
        if quote.fee_amount != ZERO_FEE_AMOUNT:
            logger.info(
                "Overriding quoted fee %s with %s (sellAmount stays %s)",
                quote.fee_amount, ZERO_FEE_AMOUNT, quote.requested_sell_amount,
            )
        return Order(
            sell_token=quote.sell_token,
            buy_token=quote.buy_token,
            receiver=receiver,
            sell_amount=quote.requested_sell_amount,
            buy_amount=quote.buy_amount,
            valid_to=quote.valid_to,
            app_data=quote.app_data,
            fee_amount=ZERO_FEE_AMOUNT,
            kind=quote.kind,
            partially_fillable=quote.partially_fillable,
        )
