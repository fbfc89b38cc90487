"""
AllowanceManager: make sure the protocol's spender may pull the sell token.

Read-before-write: the allowance is read fresh on every call and an approval is
sent only when it is below the requirement. Approvals are for MAX_UINT256 so
later runs skip the transaction. A dropped or replaced approval is not
re-sent and its gas price is not bumped.
"""

from __future__ import annotations

import logging

from swapflow_core.config import MAX_UINT256
from swapflow_core.errors import AllowanceTxError, ChainRpcError
from swapflow_core.execution.chain import APPROVE_GAS_LIMIT, ChainClient
from swapflow_core.execution.types import AllowanceRecord
from swapflow_core.wallet import Wallet

logger = logging.getLogger(__name__)


class AllowanceManager:
    """Checks and raises ERC-20 allowances for the wallet it manages."""

    def __init__(
        self,
        chain: ChainClient,
        wallet: Wallet,
        *,
        approval_amount: int = MAX_UINT256,
        confirmation_timeout: float = 120.0,
        gas_limit: int = APPROVE_GAS_LIMIT,
    ) -> None:
        self.chain = chain
        self.wallet = wallet
        self.approval_amount = approval_amount
        self.confirmation_timeout = confirmation_timeout
        self.gas_limit = gas_limit

    def read_allowance(self, token: str, owner: str, spender: str) -> AllowanceRecord:
        amount = self.chain.allowance(token, owner, spender)
        return AllowanceRecord(token=token, owner=owner, spender=spender, current_amount=amount)

    def ensure_allowance(self, token: str, owner: str, spender: str, required_amount: int) -> bool:
        """
        Return False if allowance already covers required_amount, else approve,
        wait for one confirmation and return True.

        Raises AllowanceTxError if the approval is rejected, reverts, or is not
        confirmed within confirmation_timeout.
        """
        if owner.lower() != self.wallet.address.lower():
            raise ValueError(f"owner {owner} is not the managed wallet {self.wallet.address}")

        logger.info("Checking allowance for %s to spender %s", token, spender)
        record = self.read_allowance(token, owner, spender)
        logger.info("Current allowance: %s (required %s)", record.current_amount, required_amount)
        if record.covers(required_amount):
            logger.info("Token allowance is sufficient")
            return False

        logger.info("Setting approval for %s", token)
        try:
            gas_price = self.chain.gas_price()
            tx_hash = self.chain.send_approve(
                self.wallet,
                token,
                spender,
                self.approval_amount,
                gas_price=gas_price,
                gas_limit=self.gas_limit,
            )
        except ChainRpcError as e:
            raise AllowanceTxError(f"Approval transaction rejected: {e}") from e
        logger.info("Approval transaction sent: %s; waiting for confirmation", tx_hash)

        try:
            receipt = self.chain.wait_for_receipt(tx_hash, self.confirmation_timeout)
        except TimeoutError as e:
            raise AllowanceTxError(str(e), tx_hash=tx_hash) from e
        except ChainRpcError as e:
            raise AllowanceTxError(f"Could not confirm approval: {e}", tx_hash=tx_hash) from e
        if not receipt.succeeded:
            raise AllowanceTxError(
                f"Approval reverted in block {receipt.block_number}", tx_hash=tx_hash
            )
        logger.info("Approval confirmed in block %s", receipt.block_number)
        return True
