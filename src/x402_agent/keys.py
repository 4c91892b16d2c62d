"""Private key handling."""

from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .config import ConfigurationError


def normalize_private_key(private_key: str) -> str:
    key = (private_key or "").strip()
    if not key:
        raise ConfigurationError("private key must be a non-empty hex string")
    if key.startswith("0x"):
        return key
    return f"0x{key}"


def account_from_private_key(private_key: str) -> LocalAccount:
    """Derive the signing account; ``eth_account`` validates the key itself."""
    return Account.from_key(normalize_private_key(private_key))
