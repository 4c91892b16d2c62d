"""Command line entry point: ``x402-agent balance|get|post|help``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from .config import ConfigurationError, WalletConfig
from .constants import NETWORK_ENV, PRIVATE_KEY_ENV
from .paid_fetch import PaidResponse
from .wallet import Wallet, create_wallet

logger = logging.getLogger("x402_agent")

EPILOG = f"""\
Environment:
  {PRIVATE_KEY_ENV}     Hex private key (required)
  {NETWORK_ENV}         Network ID (default: eip155:8453 = Base mainnet)
                       Use eip155:84532 for Base Sepolia testnet
  X402_RPC_URL         Custom JSON-RPC endpoint for balance queries
  X402_MAX_PAYMENT     Maximum payment per request in cents (default: 100)

Examples:
  {PRIVATE_KEY_ENV}=0x... x402-agent balance
  {PRIVATE_KEY_ENV}=0x... x402-agent get https://api.example.com/data
  {PRIVATE_KEY_ENV}=0x... x402-agent post https://api.example.com/submit '{{"key":"value"}}'
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="x402-agent",
        description="Agent wallet for the x402 payment protocol.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log payment negotiation details to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    balance_parser = subparsers.add_parser("balance", help="Check USDC balance")
    balance_parser.set_defaults(handler=run_balance)

    get_parser = subparsers.add_parser("get", help="Fetch a URL (auto-pay 402)")
    get_parser.add_argument("url")
    get_parser.set_defaults(handler=run_get)

    post_parser = subparsers.add_parser("post", help="POST to a URL (auto-pay 402)")
    post_parser.add_argument("url")
    post_parser.add_argument("body", metavar="json-body")
    post_parser.set_defaults(handler=run_post)

    subparsers.add_parser("help", help="Show this help")

    return parser


def _print_result(result: PaidResponse) -> None:
    if result.paid:
        print("(Payment was made)", file=sys.stderr)
    if isinstance(result.data, str):
        print(result.data)
    else:
        print(json.dumps(result.data, indent=2))


async def run_balance(wallet: Wallet, _: argparse.Namespace) -> None:
    result = await wallet.get_balance()
    print(f"Address: {wallet.address}")
    print(f"Network: {result.network}")
    print(f"Balance: {result.formatted} {result.currency}")


async def run_get(wallet: Wallet, args: argparse.Namespace) -> None:
    print(f"Fetching {args.url}...", file=sys.stderr)
    _print_result(await wallet.get(args.url))


async def run_post(wallet: Wallet, args: argparse.Namespace) -> None:
    try:
        body: Any = json.loads(args.body)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"json-body is not valid JSON: {exc}") from exc
    print(f"POSTing to {args.url}...", file=sys.stderr)
    _print_result(await wallet.post(args.url, body))


async def _run(args: argparse.Namespace, private_key: str) -> None:
    config = WalletConfig.from_env()
    async with create_wallet(
        private_key,
        network=config.network,
        rpc_url=config.rpc_url,
        policy=config.policy,
    ) as wallet:
        await args.handler(wallet, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="x402-agent %(levelname)s: %(message)s",
    )

    if getattr(args, "handler", None) is None:
        parser.print_help()
        return 0

    private_key = os.getenv(PRIVATE_KEY_ENV)
    if not private_key:
        print(f"Error: {PRIVATE_KEY_ENV} environment variable required", file=sys.stderr)
        print("Set it to your hex private key (with or without 0x prefix)", file=sys.stderr)
        return 1

    try:
        asyncio.run(_run(args, private_key))
    except Exception as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    sys.exit(main())
