"""USDC balance lookups over JSON-RPC."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol, Sequence

from web3 import AsyncWeb3

from .constants import ERC20_ABI, get_chain_profile, get_usdc_address

logger = logging.getLogger(__name__)


class ChainClient(Protocol):
    async def read_contract(
        self, address: str, function_name: str, args: Sequence[Any] = ()
    ) -> Any: ...


class Web3ChainClient:
    """Read-only ERC-20 calls through ``web3.AsyncWeb3``."""

    def __init__(self, rpc_url: str, request_timeout: Optional[float] = None) -> None:
        request_kwargs = {"timeout": request_timeout} if request_timeout else None
        self.rpc_url = rpc_url
        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs=request_kwargs))

    @classmethod
    def for_network(cls, network: str, rpc_url: Optional[str] = None) -> "Web3ChainClient":
        return cls(rpc_url or get_chain_profile(network)["rpc_url"])

    async def read_contract(
        self, address: str, function_name: str, args: Sequence[Any] = ()
    ) -> Any:
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=ERC20_ABI
        )
        function = getattr(contract.functions, function_name)
        return await function(*args).call()

    async def aclose(self) -> None:
        await self._w3.provider.disconnect()


@dataclass(frozen=True)
class Balance:
    balance: str
    formatted: str
    currency: str
    network: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def format_units(value: int, decimals: int) -> str:
    """Render an integer amount of smallest units as a plain decimal string."""
    text = format(Decimal(f"{value}e-{decimals}"), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


async def read_usdc_balance(chain: ChainClient, owner: str, network: str) -> Balance:
    # balanceOf and decimals are separate reads; nothing ties them to one block.
    usdc = get_usdc_address(network)
    raw = await chain.read_contract(usdc, "balanceOf", [owner])
    decimals = await chain.read_contract(usdc, "decimals")
    logger.debug("USDC balance of %s on %s: %s (decimals=%s)", owner, network, raw, decimals)
    return Balance(
        balance=str(raw),
        formatted=format_units(int(raw), int(decimals)),
        currency="USDC",
        network=network,
    )
