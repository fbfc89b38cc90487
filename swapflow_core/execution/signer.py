"""
EIP-712 order signing.

The signature binds the wallet to every Order field under the settlement
contract's domain for one chain. Pure: no network, no clock. RFC 6979 nonces
make it deterministic for identical (order, chain_id, key).
"""

from __future__ import annotations

import logging

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import to_checksum_address

from swapflow_core.networks import SETTLEMENT_CONTRACT
from swapflow_core.order import Order, SignedOrder, SigningScheme
from swapflow_core.wallet import Wallet

logger = logging.getLogger(__name__)

DOMAIN_NAME = "Gnosis Protocol"
DOMAIN_VERSION = "v2"

ORDER_TYPE = [
    {"name": "sellToken", "type": "address"},
    {"name": "buyToken", "type": "address"},
    {"name": "receiver", "type": "address"},
    {"name": "sellAmount", "type": "uint256"},
    {"name": "buyAmount", "type": "uint256"},
    {"name": "validTo", "type": "uint32"},
    {"name": "appData", "type": "bytes32"},
    {"name": "feeAmount", "type": "uint256"},
    {"name": "kind", "type": "string"},
    {"name": "partiallyFillable", "type": "bool"},
    {"name": "sellTokenBalance", "type": "string"},
    {"name": "buyTokenBalance", "type": "string"},
]


def domain_data(chain_id: int) -> dict:
    return {
        "name": DOMAIN_NAME,
        "version": DOMAIN_VERSION,
        "chainId": chain_id,
        "verifyingContract": SETTLEMENT_CONTRACT,
    }


def order_signable(order: Order, chain_id: int) -> SignableMessage:
    """EIP-712 encoding of order for chain_id, ready to sign or recover."""
    message = {
        "sellToken": to_checksum_address(order.sell_token),
        "buyToken": to_checksum_address(order.buy_token),
        "receiver": to_checksum_address(order.receiver),
        "sellAmount": order.sell_amount,
        "buyAmount": order.buy_amount,
        "validTo": order.valid_to,
        "appData": bytes.fromhex(order.app_data[2:]),
        "feeAmount": order.fee_amount,
        "kind": order.kind.value,
        "partiallyFillable": order.partially_fillable,
        "sellTokenBalance": order.sell_token_balance.value,
        "buyTokenBalance": order.buy_token_balance.value,
    }
    return encode_typed_data(
        domain_data=domain_data(chain_id),
        message_types={"Order": ORDER_TYPE},
        message_data=message,
    )


def recover_owner(signed: SignedOrder, chain_id: int) -> str:
    """Address that produced signed.signature over signed.order on chain_id."""
    signature = bytes.fromhex(signed.signature.removeprefix("0x"))
    return Account.recover_message(order_signable(signed.order, chain_id), signature=signature)


class OrderSigner:
    """Signs orders with the EIP-712 scheme."""

    signing_scheme = SigningScheme.EIP712

    def sign(
        self,
        order: Order,
        chain_id: int,
        wallet: Wallet,
        *,
        quote_id: int | None = None,
    ) -> SignedOrder:
        signature = wallet.sign_message(order_signable(order, chain_id))
        logger.info("Signed order for %s (scheme=%s, chain=%s)", wallet.address, self.signing_scheme.value, chain_id)
        return SignedOrder(
            order=order,
            signature="0x" + signature.hex(),
            signing_scheme=self.signing_scheme,
            owner=wallet.address,
            quote_id=quote_id,
        )
