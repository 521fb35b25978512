"""
Top-level CLI dispatcher: price-aggregator <command> [args...].

  price-aggregator price BTCUSDT
  price-aggregator klines BTCUSDT --interval 1h --hours 2
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from price_aggregator.providers.base import now_ms
from price_aggregator.providers.errors import ProviderError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="price-aggregator",
        description="Crypto price and candle lookup (Binance with CoinMarketCap fallback)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="command")

    p_price = subparsers.add_parser("price", help="Current price with fallback")
    p_price.add_argument("symbol", help="Trading pair, e.g. BTCUSDT")

    p_klines = subparsers.add_parser("klines", help="Candles from the primary provider")
    p_klines.add_argument("symbol", help="Trading pair, e.g. BTCUSDT")
    p_klines.add_argument("--interval", default="1h", help="Candle interval (default: 1h)")
    p_klines.add_argument("--hours", type=float, default=2.0, help="Look-back window in hours (default: 2)")
    return parser


def _cmd_price(aggregator, args: argparse.Namespace) -> int:
    quote = aggregator.get_price(args.symbol)
    print(json.dumps(quote.to_dict()))
    return 0


def _cmd_klines(aggregator, args: argparse.Namespace) -> int:
    start_time = now_ms() - int(args.hours * 3_600_000)
    candles = aggregator.get_klines(args.symbol, args.interval, start_time)
    print(f"Fetched {len(candles)} candles")
    if candles:
        print(json.dumps(candles[-1].to_dict()))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from price_aggregator.providers.defaults import create_aggregator

    aggregator = create_aggregator()
    try:
        if args.command == "price":
            return _cmd_price(aggregator, args)
        return _cmd_klines(aggregator, args)
    except ProviderError as e:
        print(f"{args.command} failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
