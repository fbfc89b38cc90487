"""
Live swap entry point: configuration from the environment (or .env), JSON-RPC
chain client, HTTP order book.

Required: PRIVATE_KEY, RPC_URL. Submission is blocked unless
SWAPFLOW_LIVE_TRADING_ENABLED=true; without it the script only checks the
network and prints a quote.
"""

from __future__ import annotations

import logging
import sys

from reporting import print_report
from swapflow_core import ConfigError, SwapError, load_config
from swapflow_core.config import LIVE_TRADING_ENV
from swapflow_core.execution import SwapPipeline, SwapRequest

logger = logging.getLogger("swapflow.live")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 2

    pipeline = SwapPipeline.from_config(config)
    logger.info("Wallet address: %s", pipeline.wallet.address)
    request = SwapRequest(
        sell_token=config.sell_token,
        buy_token=config.buy_token,
        sell_amount=config.sell_amount,
    )

    if not config.live_trading_enabled:
        logger.warning("Live trading is disabled. Set %s=true to approve and submit.", LIVE_TRADING_ENV)
        try:
            quote = pipeline.quotes.get_quote(
                request.sell_token, request.buy_token, pipeline.wallet.address, request.sell_amount
            )
        except SwapError as e:
            logger.error("Quote failed: %s", e)
            return 1
        logger.info("Dry run quote: buyAmount=%s feeAmount=%s validTo=%s", quote.buy_amount, quote.fee_amount, quote.valid_to)
        return 0

    logger.warning("LIVE TRADING is ENABLED. Real funds at risk.")
    result = pipeline.run(request)
    print_report(result, chain_id=config.chain_id)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
