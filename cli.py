#!/usr/bin/env python3
"""Simple CLI for trying Injective swaps locally"""

import argparse
import asyncio
import sys

from injective_swap.config import settings
from injective_swap.core.recovery import RecoverableError
from injective_swap.logging_config import setup_logging
from injective_swap.providers.injective_indexer import InjectiveIndexerProvider
from injective_swap.tools import swap_token


async def cli_swap(from_denom: str, to_denom: str, amount: str, slippage: str):
    """CLI command to run a swap.

    No wallet is configured here, so the run always ends in a simulated
    result after discovering the market and pricing the order.
    """
    print(f"🔄 Swapping {amount} {from_denom} -> {to_denom} on {settings.injective_network}...")

    result = await swap_token(from_denom, to_denom, amount, slippage)
    data = result.data or {}

    print()
    print(data.get("message", "❌ No result"))

    if result.warnings:
        print(f"\n⚠️  Warnings: {'; '.join(result.warnings)}")

    if not data.get("success"):
        sys.exit(1)


async def cli_markets(limit: int):
    """CLI command to list spot markets"""
    provider = InjectiveIndexerProvider()
    print(f"🔍 Fetching spot markets from {provider.base_url}...")

    try:
        markets = await provider.list_markets()
    except RecoverableError as e:
        print(f"❌ Error: {e.message}")
        sys.exit(1)

    print(f"\nSpot Markets ({len(markets)})")
    print("=" * 50)
    for market in markets[:limit]:
        ticker = market.ticker or f"{market.base.denom}/{market.quote.denom}"
        print(f"{ticker:<24} {market.market_id}")
        print(f"    base:  {market.base.denom} ({market.base.decimals} decimals)")
        print(f"    quote: {market.quote.denom} ({market.quote.decimals} decimals)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Injective Swap CLI")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    swap_parser = subparsers.add_parser("swap", help="Swap tokens (dry run without a wallet)")
    swap_parser.add_argument("--from", dest="from_denom", required=True, help="Denom to spend (e.g. inj)")
    swap_parser.add_argument("--to", dest="to_denom", required=True, help="Denom to receive")
    swap_parser.add_argument("--amount", required=True, help="Amount of the source token")
    swap_parser.add_argument("--slippage", default="1", help="Slippage tolerance in percent (default: 1)")

    markets_parser = subparsers.add_parser("markets", help="List active spot markets")
    markets_parser.add_argument("--limit", type=int, default=20, help="Maximum markets to print (default: 20)")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    if command == "swap":
        await cli_swap(args.from_denom, args.to_denom, args.amount, args.slippage)

    elif command == "markets":
        if args.limit <= 0:
            raise ValueError("Limit must be positive")
        await cli_markets(args.limit)

    else:
        print(f"❌ Unknown command: {command}")
        parser.print_help()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
