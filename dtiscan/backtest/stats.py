"""Backtest statistics — pure functions for trade-series analysis."""

import itertools
import math
import statistics
from collections import Counter

from dtiscan.strategy.models import Trade


def calculate_stats(trades: list[Trade]) -> dict:
    """Compute summary statistics from completed backtest trades.

    Open trades (no ``pl_percent``) are ignored.

    Returns:
        Dict with ``total_trades``, ``winning_trades``, ``losing_trades``,
        ``win_rate`` (percent), ``total_return``, ``avg_return``,
        ``sharpe_ratio``, ``max_drawdown`` (all returns in P/L percent)
        and ``exit_reasons`` (count per reason).
    """
    closed = [t for t in trades if t.pl_percent is not None]
    if not closed:
        return {
            "total_trades": 0,
            "winning_trades": 0,
            "losing_trades": 0,
            "win_rate": 0.0,
            "total_return": 0.0,
            "avg_return": 0.0,
            "sharpe_ratio": 0.0,
            "max_drawdown": 0.0,
            "exit_reasons": {},
        }

    returns = [t.pl_percent for t in closed]
    total = len(returns)
    winning = sum(1 for r in returns if r > 0)
    total_return = sum(returns)

    return {
        "total_trades": total,
        "winning_trades": winning,
        "losing_trades": total - winning,
        "win_rate": round(winning / total * 100, 4),
        "total_return": round(total_return, 4),
        "avg_return": round(total_return / total, 4),
        "sharpe_ratio": round(_sharpe(returns), 4),
        "max_drawdown": round(_max_drawdown(returns), 4),
        "exit_reasons": dict(Counter(t.exit_reason for t in closed)),
    }


# ── Helpers ──────────────────────────────────────────────────────────────


def _sharpe(returns: list[float]) -> float:
    """Per-trade P/L percentages scaled to a yearly Sharpe figure.

    Trades are treated as daily observations (252 a year).  A single trade
    or a run of identical outcomes has no spread, which reads as 0.0.
    """
    if len(returns) < 2:
        return 0.0
    spread = statistics.stdev(returns)
    if spread == 0:
        return 0.0
    return statistics.fmean(returns) / spread * math.sqrt(252)


def _max_drawdown(returns: list[float]) -> float:
    """Deepest fall, in percentage points, of the summed trade returns.

    The curve starts at zero, so a losing first trade already counts.
    """
    equity = list(itertools.accumulate(returns, initial=0.0))
    high_water = itertools.accumulate(equity, max)
    return max(peak - level for peak, level in zip(high_water, equity))
