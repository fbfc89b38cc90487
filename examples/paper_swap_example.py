"""
Paper swap example: the full lifecycle against in-memory adapters.

Demonstrates:
- PaperChain (allowance 0 -> one MAX_UINT256 approval) and PaperOrderBook.
- Quote -> allowance -> build (fee forced to 0) -> EIP-712 sign -> submit -> monitor.
- Running the same request twice: the second run sends no approval.
- Report with status history.
"""

from __future__ import annotations

import logging

from eth_account import Account

from reporting import print_report
from swapflow_core import Wallet
from swapflow_core.config import USDT_MAINNET, WETH_MAINNET, parse_units
from swapflow_core.execution import PaperChain, PaperOrderBook, SwapPipeline, SwapRequest


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    wallet = Wallet(Account.create())
    chain = PaperChain(chain_id=1)
    order_book = PaperOrderBook(chain_id=1, statuses=("open", "open", "fulfilled"))
    pipeline = SwapPipeline(
        wallet,
        chain,
        order_book,
        expected_chain_id=1,
        poll_interval=0.2,
        monitor_timeout=5.0,
    )
    request = SwapRequest(
        sell_token=WETH_MAINNET,
        buy_token=USDT_MAINNET,
        sell_amount=parse_units("0.01", 18),
    )

    print("=== First run (fresh wallet, allowance 0) ===\n")
    result = pipeline.run(request)
    print_report(result, chain_id=1)

    print("\n=== Second run (allowance already MAX) ===\n")
    result2 = pipeline.run(request)
    print_report(result2, chain_id=1)
    print(f"\nApproval transactions sent in total: {len(chain.approvals)}")


if __name__ == "__main__":
    main()
