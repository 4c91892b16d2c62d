"""x402 agent wallet: pay for HTTP 402 protected resources from a private key."""

from __future__ import annotations

from .balance import Balance, Web3ChainClient, format_units, read_usdc_balance
from .config import ConfigurationError, WalletConfig
from .constants import (
    CHAIN_PROFILES,
    DEFAULT_NETWORK,
    SUPPORTED_NETWORKS,
    USDC_ADDRESSES,
    UnsupportedNetworkError,
    get_usdc_address,
)
from .keys import account_from_private_key, normalize_private_key
from .paid_fetch import (
    PaidFetch,
    PaidResponse,
    PaymentRetryRejectedError,
    PaymentState,
    is_paid,
    settlement,
)
from .policy import (
    PolicyConfig,
    PolicyRejectionError,
    allow_networks,
    amount_in_minor_units,
    filter_requirements,
    within_budget,
)
from .wallet import Wallet, create_paid_fetch, create_wallet, create_wallet_from_env

__all__ = [
    "CHAIN_PROFILES",
    "DEFAULT_NETWORK",
    "SUPPORTED_NETWORKS",
    "USDC_ADDRESSES",
    "UnsupportedNetworkError",
    "get_usdc_address",
    "ConfigurationError",
    "WalletConfig",
    "normalize_private_key",
    "account_from_private_key",
    "PolicyConfig",
    "PolicyRejectionError",
    "allow_networks",
    "amount_in_minor_units",
    "filter_requirements",
    "within_budget",
    "PaidFetch",
    "PaidResponse",
    "PaymentRetryRejectedError",
    "PaymentState",
    "is_paid",
    "settlement",
    "Balance",
    "Web3ChainClient",
    "format_units",
    "read_usdc_balance",
    "Wallet",
    "create_wallet",
    "create_wallet_from_env",
    "create_paid_fetch",
]
