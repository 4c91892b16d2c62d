"""Shared constants for the x402 agent wallet."""

from __future__ import annotations

from typing import Any, Dict, List, TypedDict


DEFAULT_NETWORK = "eip155:8453"

SUPPORTED_NETWORKS: List[str] = ["eip155:8453", "eip155:84532"]

PRIVATE_KEY_ENV = "X402_PRIVATE_KEY"
NETWORK_ENV = "X402_NETWORK"
RPC_URL_ENV = "X402_RPC_URL"
MAX_PAYMENT_ENV = "X402_MAX_PAYMENT"

# 100 cents = $1
DEFAULT_MAX_PAYMENT = 100

# Headers a resource server sets once a payment has been settled (v2, v1).
PAYMENT_RESPONSE_HEADERS = ("PAYMENT-RESPONSE", "X-PAYMENT-RESPONSE")


class ChainProfile(TypedDict):
    chain_id: int
    name: str
    rpc_url: str


CHAIN_PROFILES: Dict[str, ChainProfile] = {
    "eip155:8453": {
        "chain_id": 8453,
        "name": "Base",
        "rpc_url": "https://mainnet.base.org",
    },
    "eip155:84532": {
        "chain_id": 84532,
        "name": "Base Sepolia",
        "rpc_url": "https://sepolia.base.org",
    },
}

USDC_ADDRESSES: Dict[str, str] = {
    "eip155:8453": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "eip155:84532": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
}

ERC20_ABI: List[Dict[str, Any]] = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "balance", "type": "uint256"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


class UnsupportedNetworkError(ValueError):
    """Raised when a network has no chain profile or USDC deployment configured."""


def get_chain_profile(network: str) -> ChainProfile:
    try:
        return CHAIN_PROFILES[network]
    except KeyError as exc:
        raise UnsupportedNetworkError(f"No chain profile configured for network {network}") from exc


def get_usdc_address(network: str) -> str:
    try:
        return USDC_ADDRESSES[network]
    except KeyError as exc:
        raise UnsupportedNetworkError(f"Unknown USDC address for network {network}") from exc
