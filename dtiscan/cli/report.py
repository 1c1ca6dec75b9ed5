"""CLI report — plain-text summaries of scan and backtest results."""

from datetime import date
from typing import Optional

from dtiscan.strategy.models import ScanResult, Trade, days_between

_TOP_PER_MARKET = 5


def market_of(symbol: str) -> str:
    """Exchange group from the symbol suffix."""
    if symbol.endswith(".NS"):
        return "NSE"
    if symbol.endswith(".L"):
        return "UK"
    return "US"


def format_opportunities(
    results: list[ScanResult], as_of: Optional[date] = None,
) -> str:
    """Format active trades grouped by market, top five per market.

    Args:
        results: Scan results already sorted by current P/L.
        as_of: Date used for "days held" (defaults to today).

    Returns:
        The formatted report.
    """
    if not results:
        return "DTI scan complete. No active trades found."

    today = (as_of or date.today()).isoformat()
    lines = [
        "──────────────── DTI Active Trades ────────────────",
        f"  {len(results)} symbol(s) currently in a trade",
    ]

    grouped: dict[str, list[ScanResult]] = {"NSE": [], "UK": [], "US": []}
    for result in results:
        grouped[market_of(result.symbol)].append(result)

    for market, items in grouped.items():
        if not items:
            continue
        lines.append("")
        lines.append(f"  {market} ({len(items)}):")
        for result in items[:_TOP_PER_MARKET]:
            trade = result.active_trade
            pl = result.current_pl_percent or 0.0
            dti_str = f"{result.current_dti:.2f}" if result.current_dti is not None else "N/A"
            lines.append(f"    {result.name} ({result.symbol})")
            lines.append(
                f"      Entry {trade.entry_price:.2f} | Now {result.current_price:.2f}"
                f" | P/L {pl:+.2f}% | Days {days_between(trade.entry_date, today)}"
                f" | DTI {dti_str}"
            )
        if len(items) > _TOP_PER_MARKET:
            lines.append(f"    ... and {len(items) - _TOP_PER_MARKET} more")

    lines.append("───────────────────────────────────────────────────")
    return "\n".join(lines)


def format_trades(symbol: str, trades: list[Trade], stats: dict) -> str:
    """One line per trade followed by the summary statistics."""
    lines = [f"──────────────── {symbol} backtest ────────────────"]
    for t in trades:
        if t.is_open:
            lines.append(f"  {t.entry_date}  @ {t.entry_price:.2f}  OPEN")
            continue
        lines.append(
            f"  {t.entry_date} → {t.exit_date}  "
            f"{t.entry_price:.2f} → {t.exit_price:.2f}  "
            f"{t.pl_percent:+.2f}%  {t.exit_reason}"
        )
    lines += [
        "",
        f"  Trades:    {stats['total_trades']}",
        f"  Win rate:  {stats['win_rate']:.2f}%",
        f"  Total:     {stats['total_return']:+.2f}%",
        f"  Average:   {stats['avg_return']:+.2f}%",
        f"  Sharpe:    {stats['sharpe_ratio']:.2f}",
        f"  Max DD:    {stats['max_drawdown']:.2f}%",
    ]
    return "\n".join(lines)
