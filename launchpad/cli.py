#!/usr/bin/env python3
"""
Launchpad CLI

Run the API server, inspect the curve, and trade against a running server.

Usage:
    launchpad serve --config launchpad.json
    launchpad curve --points 8
    launchpad tokens
    launchpad launch --name Doge --symbol DOGE --caller 0xcreator
    launchpad quote <asset_id> --side buy --amount 1533
    launchpad buy <asset_id> --amount 1533 --caller 0xcreator
    launchpad sell <asset_id> --amount 5000000 --caller 0xcreator

Amounts on the command line are whole units/currency (decimals allowed);
they are scaled by 1e18 before being sent.
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation

from .client import LaunchpadClient
from .config import load_config, save_default_config
from .curve import format_amount, price_table
from .errors import LaunchpadError
from .launch_types import SCALE, LaunchParams

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s'
)


def parse_amount(text: str) -> int:
    """'1.5' -> 1.5e18 scaled integer."""
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Not a number: {text}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"Amount must be non-negative: {text}")
    return int(value * SCALE)


def _client(args) -> LaunchpadClient:
    config = load_config(args.config)
    return LaunchpadClient(args.api or config["client"]["api_url"],
                           timeout=config["client"]["timeout"])


# ═══════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════

def cmd_serve(args):
    from .server import serve
    config = load_config(args.config)
    if args.host:
        config["server"]["host"] = args.host
    if args.port:
        config["server"]["port"] = args.port
    serve(config)


def cmd_init_config(args):
    save_default_config(args.path)
    print(f"Default config written to {args.path}")


def cmd_curve(args):
    params = LaunchParams.from_config(load_config(args.config)["curve"])
    print(f"Max supply:       {format_amount(params.max_supply)}")
    print(f"Bonding max:      {format_amount(params.bonding_max)}")
    print(f"Reserve:          {format_amount(params.reserve_amount)}")
    print(f"Creator cap:      {format_amount(params.creator_cap)}")
    print(f"Unlock threshold: {format_amount(params.unlock_threshold)}")
    print(f"Fee:              {params.fee_percent}%")
    print()
    print(f"{'Supply':>24}  {'Price':>16}")
    for supply, p in price_table(params, args.points):
        print(f"{format_amount(supply):>24}  {format_amount(p, places=10):>16}")


def cmd_tokens(args):
    tokens = _client(args).tokens()
    print(f"Launches: {len(tokens)}")
    for t in tokens:
        print(f"  {t['asset_id']}  {t['symbol']:<8} {t['state']:<10} "
              f"supply {format_amount(int(t['current_supply']))}  "
              f"price {format_amount(int(t['price']), places=10)}")


def cmd_info(args):
    t = _client(args).token(args.asset_id)
    print(f"{t['name']} ({t['symbol']})  {t['asset_id']}")
    print(f"  State:        {t['state']}  unlocked={t['unlocked']}")
    print(f"  Creator:      {t['creator']}")
    print(f"  Supply:       {format_amount(int(t['current_supply']))}")
    print(f"  Price:        {format_amount(int(t['price']), places=10)}")
    print(f"  Held reserve: {format_amount(int(t['held_reserve']))}")
    print(f"  Traded:       {format_amount(int(t['total_value_traded']))} "
          f"in {t['trade_count']} trades")
    print(f"  Holders:      {len(t['holders'])}")


def cmd_launch(args):
    t = _client(args).create_token(args.name, args.symbol, args.metadata, args.caller)
    print(f"Launched {t['symbol']}: {t['asset_id']}")


def cmd_quote(args):
    q = _client(args).quote(args.asset_id, args.side, args.amount)
    if args.side == "buy":
        print(f"Pay {format_amount(int(q['currency_in']))} -> "
              f"{format_amount(int(q['units_out']))} units "
              f"(fee {format_amount(int(q['fee']))})")
    else:
        print(f"Sell {format_amount(int(q['units_in']))} units -> "
              f"{format_amount(int(q['net']))} "
              f"(gross {format_amount(int(q['gross']))}, fee {format_amount(int(q['fee']))})")
    print(f"Price {format_amount(int(q['price']), places=10)} -> "
          f"{format_amount(int(q['new_price']), places=10)}")


def cmd_buy(args):
    units = _client(args).buy(args.asset_id, args.amount, args.min_out, args.caller)
    print(f"Bought {format_amount(units)} units")


def cmd_sell(args):
    api = _client(args)
    api.approve(args.asset_id, args.amount, args.caller)
    currency = api.sell(args.asset_id, args.amount, args.caller)
    print(f"Sold {format_amount(args.amount)} units for {format_amount(currency)} (before fee)")


def cmd_fund(args):
    balance = _client(args).fund(args.address, args.amount)
    print(f"{args.address} balance: {format_amount(balance)}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bonding-curve launchpad")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--api", help="API URL (overrides config)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind host")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    init_parser = subparsers.add_parser("init-config", help="Write the default config")
    init_parser.add_argument("path", help="Output path")

    curve_parser = subparsers.add_parser("curve", help="Show curve parameters and prices")
    curve_parser.add_argument("--points", type=int, default=8, help="Samples (default: 8)")

    subparsers.add_parser("tokens", help="List launches")

    info_parser = subparsers.add_parser("info", help="Show one launch")
    info_parser.add_argument("asset_id")

    launch_parser = subparsers.add_parser("launch", help="Launch a new asset")
    launch_parser.add_argument("--name", required=True)
    launch_parser.add_argument("--symbol", required=True)
    launch_parser.add_argument("--metadata", default="")
    launch_parser.add_argument("--caller", required=True, help="Creator identity")

    quote_parser = subparsers.add_parser("quote", help="Preview a trade")
    quote_parser.add_argument("asset_id")
    quote_parser.add_argument("--side", choices=["buy", "sell"], default="buy")
    quote_parser.add_argument("--amount", type=parse_amount, required=True)

    buy_parser = subparsers.add_parser("buy", help="Buy units with currency")
    buy_parser.add_argument("asset_id")
    buy_parser.add_argument("--amount", type=parse_amount, required=True, help="Currency to pay")
    buy_parser.add_argument("--min-out", type=parse_amount, default=0, help="Minimum units")
    buy_parser.add_argument("--caller", required=True)

    sell_parser = subparsers.add_parser("sell", help="Sell units back to the curve")
    sell_parser.add_argument("asset_id")
    sell_parser.add_argument("--amount", type=parse_amount, required=True, help="Units to sell")
    sell_parser.add_argument("--caller", required=True)

    fund_parser = subparsers.add_parser("fund", help="Faucet currency to an address")
    fund_parser.add_argument("address")
    fund_parser.add_argument("--amount", type=parse_amount, required=True)

    args = parser.parse_args(argv)

    commands = {
        "serve": cmd_serve,
        "init-config": cmd_init_config,
        "curve": cmd_curve,
        "tokens": cmd_tokens,
        "info": cmd_info,
        "launch": cmd_launch,
        "quote": cmd_quote,
        "buy": cmd_buy,
        "sell": cmd_sell,
        "fund": cmd_fund,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        handler(args)
    except LaunchpadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
