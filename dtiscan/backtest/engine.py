"""Backtest engine — replays DTI signals through a single-position simulator.

Iterates the daily series chronologically.  Each bar first checks the open
trade for an exit, then evaluates a new entry.  No real orders are placed
and an open trade is never force-closed at the end of the data.
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from dtiscan.strategy.models import (
    BacktestParams,
    BacktestResult,
    ExitReason,
    Trade,
    WeeklyDTI,
    days_between,
)

logger = logging.getLogger("dtiscan.backtest")

WARMUP_MONTHS = 6


class BacktestEngine:
    """Simulates long-only DTI trades on one symbol.

    Args:
        params: Entry threshold and exit rules.
    """

    def __init__(self, params: Optional[BacktestParams] = None) -> None:
        self._params = params or BacktestParams()

    @property
    def params(self) -> BacktestParams:
        return self._params

    # ── Public API ───────────────────────────────────────────────────────

    def run(
        self,
        dates: Sequence[str],
        prices: Sequence[float],
        dti: Sequence[Optional[float]],
        weekly: WeeklyDTI,
    ) -> BacktestResult:
        """Execute the simulation.

        Args:
            dates: ISO dates, ascending.
            prices: Closing prices aligned with *dates*.
            dti: Daily DTI series (may be empty when history is short).
            weekly: Weekly DTI bundle for the same bars.

        Returns:
            ``BacktestResult`` with completed trades and the open trade,
            if one remains.
        """
        completed: list[Trade] = []
        active: Optional[Trade] = None

        if not dti:
            return BacktestResult(completed_trades=completed, active_trade=None)

        earliest = warmup_end(dates[0])

        for i in range(1, len(dti)):
            current_date = dates[i]
            if pd.Timestamp(current_date) < earliest:
                continue

            price = prices[i]

            # 1 ── Exit check
            if active is not None:
                reason = self._exit_reason(active, current_date, price)
                if reason is not None:
                    self._close(active, current_date, price, reason)
                    completed.append(active)
                    active = None

            # 2 ── Entry check
            if active is not None:
                continue
            current_dti = dti[i]
            previous_dti = dti[i - 1]
            if current_dti is None or previous_dti is None:
                continue

            if self._should_enter(i, current_dti, previous_dti, weekly):
                active = Trade(
                    entry_date=current_date,
                    entry_price=price,
                    entry_dti=current_dti,
                    entry_weekly_dti=weekly.daily_weekly_dti[i],
                )
                logger.debug(
                    "Entry %s @ %.4f (DTI %.2f, weekly %.2f)",
                    current_date, price, current_dti,
                    active.entry_weekly_dti or 0.0,
                )

        return BacktestResult(completed_trades=completed, active_trade=active)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _should_enter(
        self,
        i: int,
        current_dti: float,
        previous_dti: float,
        weekly: WeeklyDTI,
    ) -> bool:
        """DTI below threshold and rising, weekly DTI above last bucket's."""
        if current_dti >= self._params.entry_threshold:
            return False
        if current_dti <= previous_dti:
            return False

        bucket = weekly.bucket_index(i)
        if bucket <= 0:
            return True
        current_weekly = weekly.daily_weekly_dti[i]
        return current_weekly is not None and current_weekly > weekly.weekly_dti[bucket - 1]

    def _exit_reason(
        self, trade: Trade, current_date: str, price: float,
    ) -> Optional[str]:
        """First matching exit rule: take profit, stop loss, then time."""
        pl_percent = trade.unrealised_pl(price)
        if pl_percent >= self._params.take_profit_pct:
            return ExitReason.TAKE_PROFIT
        if pl_percent <= -self._params.stop_loss_pct:
            return ExitReason.STOP_LOSS
        if days_between(trade.entry_date, current_date) >= self._params.max_holding_days:
            return ExitReason.TIME_EXIT
        return None

    @staticmethod
    def _close(trade: Trade, exit_date: str, price: float, reason: str) -> None:
        trade.exit_date = exit_date
        trade.exit_price = price
        trade.pl_percent = trade.unrealised_pl(price)
        trade.exit_reason = reason
        logger.debug(
            "Exit %s @ %.4f — %s (%.2f%%)",
            exit_date, price, reason, trade.pl_percent,
        )


def warmup_end(first_date: str) -> pd.Timestamp:
    """First date on which trades may be evaluated.

    Six calendar months after *first_date*.  A day past the end of the
    target month rolls into the next one (``2024-08-31`` → ``2025-03-03``).
    """
    start = pd.Timestamp(first_date)
    month_index = start.month - 1 + WARMUP_MONTHS
    target_month = pd.Timestamp(
        year=start.year + month_index // 12, month=month_index % 12 + 1, day=1,
    )
    return target_month + pd.Timedelta(days=start.day - 1)
