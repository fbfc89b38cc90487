"""
Run configuration: secrets and endpoints, built once and validated before any
lifecycle call.

Values come from the process environment, optionally seeded from a .env file.
Live submission stays blocked unless SWAPFLOW_LIVE_TRADING_ENABLED=true.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv
from eth_utils import is_address

from swapflow_core.errors import ConfigError
from swapflow_core.networks import ORDER_BOOK_URLS, SupportedChainId

# Environment variable that must be "true" before the live entry point submits anything.
LIVE_TRADING_ENV = "SWAPFLOW_LIVE_TRADING_ENABLED"

WETH_MAINNET = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDT_MAINNET = "0xdAC17F958D2ee523a2206206994597C13D831ec7"

MAX_UINT256 = 2**256 - 1

_PRIVATE_KEY_RE = re.compile(r"(0x)?[0-9a-fA-F]{64}")


def parse_units(amount: str, decimals: int) -> int:
    """
    Convert a human token amount ("0.01") to integer base units.

    Exact decimal arithmetic; rejects amounts with more fractional digits than
    the token has, non-positive amounts, and scientific notation.
    """
    text = str(amount).strip()
    if not text:
        raise ConfigError("Amount must not be empty")
    if not 0 <= decimals <= 255:
        raise ConfigError("Token decimals must be 0..255")
    if "e" in text.lower():
        raise ConfigError(f"Scientific notation is not supported: {amount!r}")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ConfigError(f"Invalid amount {amount!r}") from None
    if not value.is_finite():
        raise ConfigError(f"Amount must be a finite number: {amount!r}")
    units = value * (Decimal(10) ** decimals)
    if units != units.to_integral_value():
        raise ConfigError(f"Amount {amount!r} has more than {decimals} decimal places")
    result = int(units)
    if result <= 0:
        raise ConfigError("Amount must be positive")
    if result > MAX_UINT256:
        raise ConfigError("Amount exceeds uint256")
    return result


@dataclass(frozen=True)
class SwapConfig:
    """
    Everything a run needs from the outside world. Immutable.

    private_key and rpc_url are required; the rest default to a 0.01 WETH -> USDT
    sell on mainnet, polled every 30 s for up to 10 minutes.
    """

    private_key: str
    rpc_url: str
    chain_id: int = SupportedChainId.MAINNET
    order_book_url: str | None = None
    sell_token: str = WETH_MAINNET
    buy_token: str = USDT_MAINNET
    sell_amount: int = 10**16
    poll_interval: float = 30.0
    monitor_timeout: float = 600.0
    approval_timeout: float = 120.0
    live_trading_enabled: bool = False

    def __repr__(self) -> str:
        return (
            f"SwapConfig(rpc_url={self.rpc_url!r}, chain_id={self.chain_id}, "
            f"sell_token={self.sell_token}, buy_token={self.buy_token}, "
            f"sell_amount={self.sell_amount}, live_trading_enabled={self.live_trading_enabled})"
        )

    @property
    def resolved_order_book_url(self) -> str:
        """Explicit override, else the protocol endpoint for chain_id."""
        return self.order_book_url or ORDER_BOOK_URLS[self.chain_id]

    def validate(self) -> None:
        """Raise ConfigError on the first invalid setting."""
        if not self.private_key or not _PRIVATE_KEY_RE.fullmatch(self.private_key):
            raise ConfigError("PRIVATE_KEY must be 32 bytes of hex (optionally 0x-prefixed)")
        if not self.rpc_url or not self.rpc_url.startswith(("http://", "https://")):
            raise ConfigError("RPC_URL must be an http(s) URL")
        if self.order_book_url is None and self.chain_id not in ORDER_BOOK_URLS:
            raise ConfigError(
                f"Chain {self.chain_id} has no known order-book endpoint; set SWAPFLOW_ORDER_BOOK_URL"
            )
        for name in ("sell_token", "buy_token"):
            if not is_address(getattr(self, name)):
                raise ConfigError(f"{name} is not a valid address: {getattr(self, name)!r}")
        if self.sell_token.lower() == self.buy_token.lower():
            raise ConfigError("sell_token and buy_token must differ")
        if self.sell_amount <= 0:
            raise ConfigError("sell_amount must be positive")
        if self.poll_interval <= 0 or self.monitor_timeout <= 0 or self.approval_timeout <= 0:
            raise ConfigError("poll_interval, monitor_timeout and approval_timeout must be positive")


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def load_config(
    env: Mapping[str, str] | None = None,
    *,
    dotenv_path: str | Path | None = None,
) -> SwapConfig:
    """
    Build and validate a SwapConfig.

    Parameters
    ----------
    env : mapping, optional
        Source of settings. If None, os.environ after loading .env
        (dotenv_path, or .env found from the working directory).
    dotenv_path : str or Path, optional
        Explicit .env file. Existing environment variables win.

    Raises
    ------
    ConfigError
        PRIVATE_KEY or RPC_URL missing, or any setting invalid.
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path, override=False)
        env = os.environ

    private_key = (env.get("PRIVATE_KEY") or "").strip()
    rpc_url = (env.get("RPC_URL") or "").strip()
    if not private_key or not rpc_url:
        raise ConfigError("Please set PRIVATE_KEY and RPC_URL (environment or .env file)")

    decimals = _int(env, "SWAPFLOW_SELL_DECIMALS", 18)
    raw_amount = (env.get("SWAPFLOW_SELL_AMOUNT") or "").strip()
    sell_amount = parse_units(raw_amount, decimals) if raw_amount else 10**16

    config = SwapConfig(
        private_key=private_key,
        rpc_url=rpc_url,
        chain_id=_int(env, "SWAPFLOW_CHAIN_ID", SupportedChainId.MAINNET),
        order_book_url=(env.get("SWAPFLOW_ORDER_BOOK_URL") or "").strip() or None,
        sell_token=(env.get("SWAPFLOW_SELL_TOKEN") or "").strip() or WETH_MAINNET,
        buy_token=(env.get("SWAPFLOW_BUY_TOKEN") or "").strip() or USDT_MAINNET,
        sell_amount=sell_amount,
        poll_interval=_float(env, "SWAPFLOW_POLL_INTERVAL", 30.0),
        monitor_timeout=_float(env, "SWAPFLOW_MONITOR_TIMEOUT", 600.0),
        approval_timeout=_float(env, "SWAPFLOW_APPROVAL_TIMEOUT", 120.0),
        live_trading_enabled=(env.get(LIVE_TRADING_ENV) or "").strip().lower() == "true",
    )
    config.validate()
    return config
