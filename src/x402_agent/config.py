"""Wallet configuration and environment loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from .constants import (
    DEFAULT_MAX_PAYMENT,
    DEFAULT_NETWORK,
    MAX_PAYMENT_ENV,
    NETWORK_ENV,
    PRIVATE_KEY_ENV,
    RPC_URL_ENV,
)
from .policy import PolicyConfig


class ConfigurationError(ValueError):
    """Raised for a missing private key or an unusable environment setting."""


@dataclass(frozen=True)
class WalletConfig:
    network: str = DEFAULT_NETWORK
    rpc_url: Optional[str] = None
    policy: PolicyConfig = field(default_factory=lambda: PolicyConfig(DEFAULT_MAX_PAYMENT))

    @property
    def max_payment(self) -> Optional[int]:
        return self.policy.max_payment

    @classmethod
    def from_env(cls) -> "WalletConfig":
        """Build a config from ``X402_NETWORK``, ``X402_RPC_URL`` and ``X402_MAX_PAYMENT``."""
        network = os.getenv(NETWORK_ENV) or DEFAULT_NETWORK
        rpc_url = os.getenv(RPC_URL_ENV) or None
        raw_max = os.getenv(MAX_PAYMENT_ENV)
        max_payment: Optional[int] = DEFAULT_MAX_PAYMENT
        if raw_max:
            try:
                max_payment = int(raw_max)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{MAX_PAYMENT_ENV} must be an integer number of cents, got {raw_max!r}"
                ) from exc
        return cls(network=network, rpc_url=rpc_url, policy=PolicyConfig(max_payment))


def private_key_from_env(env_var: str = PRIVATE_KEY_ENV) -> str:
    private_key = os.getenv(env_var)
    if not private_key:
        raise ConfigurationError(f"Environment variable {env_var} not set")
    return private_key
