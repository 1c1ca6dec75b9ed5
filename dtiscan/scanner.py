"""Scanner — runs the DTI pipeline for every symbol in a universe.

Each symbol is fetched and analysed as its own asyncio task; a semaphore
bounds how many fetches are in flight.  The analysis itself is pure and
shares nothing between symbols.
"""

import asyncio
import logging
from typing import Optional, Sequence

from dtiscan.backtest.engine import BacktestEngine
from dtiscan.config import Config
from dtiscan.data.provider import MarketDataError, MarketDataProvider
from dtiscan.strategy.indicators import calculate_dti
from dtiscan.strategy.models import PriceBar, ScanResult, Stock
from dtiscan.strategy.weekly import calculate_weekly_dti

logger = logging.getLogger("dtiscan.scanner")


def analyze_bars(
    stock: Stock, bars: Sequence[PriceBar], config: Config,
) -> ScanResult:
    """Run ATR → DTI → weekly DTI → backtest over *bars* for one symbol."""
    dates = [b.date for b in bars]
    high = [b.high for b in bars]
    low = [b.low for b in bars]
    closes = [b.close for b in bars]

    dti = calculate_dti(high, low, config.dti_r, config.dti_s, config.dti_u)
    weekly = calculate_weekly_dti(
        dates, high, low, config.dti_r, config.dti_s, config.dti_u,
    )
    result = BacktestEngine(config.backtest_params).run(dates, closes, dti, weekly)

    return ScanResult(
        symbol=stock.symbol,
        name=stock.name,
        active_trade=result.active_trade,
        completed_trades=result.completed_trades,
        current_price=closes[-1],
        current_dti=dti[-1] if dti else None,
    )


def sort_by_current_pl(results: list[ScanResult]) -> list[ScanResult]:
    """Best-performing open trade first; results without one go last."""
    return sorted(
        results,
        key=lambda r: (r.current_pl_percent is None, -(r.current_pl_percent or 0.0)),
    )


class Scanner:
    """Scans a universe for symbols currently holding a simulated trade.

    Args:
        config: Strategy parameters, history window and concurrency limit.
        provider: Source of daily bars.
    """

    def __init__(self, config: Config, provider: MarketDataProvider) -> None:
        self._config = config
        self._provider = provider

    async def scan(self, stocks: Sequence[Stock]) -> list[ScanResult]:
        """Return results with an active trade, sorted by current P/L."""
        semaphore = asyncio.Semaphore(self._config.scan_concurrency)
        logger.info("Scanning %d symbols", len(stocks))

        async def _bounded(stock: Stock) -> Optional[ScanResult]:
            async with semaphore:
                return await self.scan_symbol(stock)

        outcomes = await asyncio.gather(
            *(_bounded(s) for s in stocks), return_exceptions=True,
        )

        active: list[ScanResult] = []
        for stock, outcome in zip(stocks, outcomes):
            if isinstance(outcome, Exception):
                logger.error("Scan failed for %s: %s", stock.symbol, outcome)
            elif outcome is not None and outcome.active_trade is not None:
                active.append(outcome)

        logger.info(
            "Scan complete: %d of %d symbols hold an active trade",
            len(active), len(stocks),
        )
        return sort_by_current_pl(active)

    async def scan_symbol(self, stock: Stock) -> Optional[ScanResult]:
        """Fetch and analyse one symbol; ``None`` if it had to be skipped."""
        try:
            bars = await self._provider.fetch_bars(stock.symbol)
        except MarketDataError as exc:
            logger.warning("Skipping %s: %s", stock.symbol, exc)
            return None

        if len(bars) < self._config.min_bars:
            logger.info(
                "Skipping %s: %d bars (need %d)",
                stock.symbol, len(bars), self._config.min_bars,
            )
            return None

        return analyze_bars(stock, bars, self._config)
