"""DTI Scan — command-line entry point.

    python -m dtiscan.main scan [--market nifty50 ...] [--universe PATH]
    python -m dtiscan.main backtest AAPL [--csv prices.csv]
"""

import argparse
import asyncio
import logging
from dataclasses import replace
from typing import Optional

import pandas as pd

from dtiscan.backtest.stats import calculate_stats
from dtiscan.cli.report import format_opportunities, format_trades
from dtiscan.config import Config, load_config
from dtiscan.data.provider import MarketDataProvider
from dtiscan.data.universe import load_universe
from dtiscan.scanner import Scanner, analyze_bars
from dtiscan.strategy.models import PriceBar, Stock

logger = logging.getLogger("dtiscan")


def load_csv_bars(path: str) -> list[PriceBar]:
    """Read ``Date,Open,High,Low,Close,Volume`` rows into ascending bars.

    Rows with a missing price are dropped, as are repeated dates.
    """
    df = pd.read_csv(path, parse_dates=["Date"])
    df = (
        df.dropna(subset=["Open", "High", "Low", "Close"])
        .sort_values("Date", kind="stable")
        .drop_duplicates(subset="Date", keep="first")
    )
    volume = df["Volume"] if "Volume" in df.columns else pd.Series(0, index=df.index)
    return [
        PriceBar(
            date=row.Date.date().isoformat(),
            open=float(row.Open),
            high=float(row.High),
            low=float(row.Low),
            close=float(row.Close),
            volume=int(vol) if pd.notna(vol) else 0,
        )
        for row, vol in zip(df.itertuples(index=False), volume)
    ]


async def _scan(config: Config, markets: Optional[list[str]]) -> str:
    stocks = load_universe(config.universe_path, markets)
    scanner = Scanner(config, MarketDataProvider(config))
    results = await scanner.scan(stocks)
    return format_opportunities(results)


async def _backtest(config: Config, symbol: str, csv_path: Optional[str]) -> str:
    if csv_path:
        bars = load_csv_bars(csv_path)
    else:
        bars = await MarketDataProvider(config).fetch_bars(symbol)

    if not bars:
        logger.warning("No price data for %s", symbol)
        return f"No price data for {symbol}."

    result = analyze_bars(Stock(symbol=symbol, name=symbol), bars, config)
    trades = list(result.completed_trades)
    if result.active_trade is not None:
        trades.append(result.active_trade)
    return format_trades(symbol, trades, calculate_stats(result.completed_trades))


def _run_cli(argv: Optional[list[str]] = None) -> None:
    """Parse CLI arguments and dispatch to the requested command."""
    parser = argparse.ArgumentParser(description="DTI signal scanner and backtester")
    parser.add_argument("--env", help="Path to a .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan a universe for active trades")
    scan.add_argument(
        "--market", action="append", dest="markets",
        help="Universe market to include (repeatable; default: all)",
    )
    scan.add_argument("--universe", help="Path to a universe JSON file")

    bt = sub.add_parser("backtest", help="Backtest one symbol")
    bt.add_argument("symbol")
    bt.add_argument("--csv", help="Read bars from a CSV file instead of the API")

    args = parser.parse_args(argv)

    config = load_config(args.env)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "scan":
        if args.universe:
            config = replace(config, universe_path=args.universe)
        output = asyncio.run(_scan(config, args.markets))
    else:
        output = asyncio.run(_backtest(config, args.symbol, args.csv))

    print(output)


if __name__ == "__main__":
    _run_cli()
