"""
QuoteService: network pre-flight check and price quote.
"""

from __future__ import annotations

import logging

from swapflow_core.errors import NetworkMismatchError, QuoteError
from swapflow_core.execution.chain import ChainClient
from swapflow_core.execution.orderbook import OrderBookApi
from swapflow_core.order import OrderKind, Quote

logger = logging.getLogger(__name__)


class QuoteService:
    """
    Requests sell-side quotes. Every get_quote first verifies the connected
    chain; on mismatch nothing else is called.
    """

    def __init__(self, chain: ChainClient, order_book: OrderBookApi, expected_chain_id: int) -> None:
        self.chain = chain
        self.order_book = order_book
        self.expected_chain_id = expected_chain_id

    def check_network(self) -> int:
        """Return the connected chain id; NetworkMismatchError if unexpected."""
        chain_id = self.chain.chain_id()
        logger.info("Connected chainId %s", chain_id)
        if chain_id != self.expected_chain_id:
            raise NetworkMismatchError(expected=self.expected_chain_id, actual=chain_id)
        return chain_id

    def get_quote(
        self,
        sell_token: str,
        buy_token: str,
        owner: str,
        sell_amount: int,
        *,
        receiver: str | None = None,
    ) -> Quote:
        self.check_network()
        if sell_amount <= 0:
            raise QuoteError(f"sell_amount must be positive, got {sell_amount}")

        request = {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "from": owner,
            "receiver": receiver or owner,
            "sellAmountBeforeFee": str(sell_amount),
            "kind": OrderKind.SELL.value,
        }
        logger.info("Requesting quote: sell %s of %s for %s", sell_amount, sell_token, buy_token)
        body = self.order_book.post_quote(request)
        try:
            quote = Quote.from_api(body, requested_sell_amount=sell_amount, owner=owner)
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteError(f"Malformed quote response: {e!r}", body=body) from e
        logger.info(
            "Quote received: buyAmount=%s feeAmount=%s validTo=%s",
            quote.buy_amount, quote.fee_amount, quote.valid_to,
        )
        return quote
