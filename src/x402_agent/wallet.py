"""Agent wallet: one account, one payment policy, one paying HTTP client."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

import httpx
from eth_account.signers.local import LocalAccount
from x402 import x402Client
from x402.mechanisms.evm import EthAccountSigner
from x402.mechanisms.evm.exact import ExactEvmScheme

from .balance import Balance, ChainClient, Web3ChainClient, read_usdc_balance
from .config import WalletConfig, private_key_from_env
from .constants import DEFAULT_MAX_PAYMENT, DEFAULT_NETWORK, PRIVATE_KEY_ENV
from .keys import account_from_private_key
from .paid_fetch import PaidFetch, PaidResponse, read_paid_response
from .policy import PolicyConfig, RequirementPredicate, as_payment_policy, within_budget

logger = logging.getLogger(__name__)

PaidFetchFunc = Callable[..., Awaitable[httpx.Response]]


def build_payment_client(
    account: LocalAccount, predicates: Sequence[RequirementPredicate] = ()
) -> x402Client:
    """Register the exact EVM scheme for every ``eip155`` network plus the wallet policies."""
    client = x402Client()
    client.register("eip155:*", ExactEvmScheme(EthAccountSigner(account)))
    for predicate in predicates:
        client.register_policy(as_payment_policy(predicate))
    return client


class Wallet:
    def __init__(
        self,
        account: LocalAccount,
        config: WalletConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        payment_client: Any = None,
        chain_client: Optional[ChainClient] = None,
        extra_policies: Sequence[RequirementPredicate] = (),
    ) -> None:
        self._account = account
        self._config = config
        predicates = [within_budget(config.policy), *extra_policies]

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient()
        if payment_client is None:
            payment_client = build_payment_client(account, predicates)
        self._paid_fetch = PaidFetch(self._http, payment_client, predicates)
        self._chain_client = chain_client
        self._owned_chain_client: Optional[Web3ChainClient] = None
        self._closed = False

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def network(self) -> str:
        return self._config.network

    @property
    def config(self) -> WalletConfig:
        return self._config

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        content: bytes | str | None = None,
    ) -> httpx.Response:
        """Send a request, paying for it if the server answers 402."""
        return await self._paid_fetch.request(method, url, headers=headers, content=content)

    async def get(self, url: str, headers: Optional[Mapping[str, str]] = None) -> PaidResponse:
        response = await self.fetch(url, "GET", headers=dict(headers or {}))
        return await read_paid_response(response)

    async def post(
        self, url: str, body: Any, headers: Optional[Mapping[str, str]] = None
    ) -> PaidResponse:
        merged = {"Content-Type": "application/json", **(headers or {})}
        response = await self.fetch(url, "POST", headers=merged, content=json.dumps(body))
        return await read_paid_response(response)

    async def get_balance(self) -> Balance:
        if self._chain_client is None:
            self._owned_chain_client = Web3ChainClient.for_network(
                self._config.network, self._config.rpc_url
            )
            self._chain_client = self._owned_chain_client
        return await read_usdc_balance(self._chain_client, self.address, self._config.network)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_http_client:
            await self._http.aclose()
        if self._owned_chain_client is not None:
            await self._owned_chain_client.aclose()

    async def __aenter__(self) -> "Wallet":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def create_wallet(
    private_key: str,
    *,
    network: str = DEFAULT_NETWORK,
    rpc_url: Optional[str] = None,
    max_payment: Optional[int] = DEFAULT_MAX_PAYMENT,
    policy: Optional[PolicyConfig] = None,
    **kwargs: Any,
) -> Wallet:
    """Create a wallet from a hex private key (``0x`` prefix optional).

    ``max_payment`` is the largest payment in cents the wallet will sign;
    ``0`` or ``None`` disables the limit. Pass ``policy`` to supply custom
    asset divisors instead. Remaining keyword arguments go to ``Wallet``.
    """
    account = account_from_private_key(private_key)
    config = WalletConfig(
        network=network,
        rpc_url=rpc_url,
        policy=policy if policy is not None else PolicyConfig(max_payment),
    )
    logger.debug("created wallet %s on %s", account.address, network)
    return Wallet(account, config, **kwargs)


def create_wallet_from_env(env_var: str = PRIVATE_KEY_ENV, **options: Any) -> Wallet:
    return create_wallet(private_key_from_env(env_var), **options)


def create_paid_fetch(private_key: str, **options: Any) -> PaidFetchFunc:
    wallet = create_wallet(private_key, **options)
    return wallet.fetch
