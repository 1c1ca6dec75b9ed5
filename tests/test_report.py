"""Tests for dtiscan.cli.report — plain-text scan and backtest summaries."""

from datetime import date

from dtiscan.backtest.stats import calculate_stats
from dtiscan.cli.report import format_opportunities, format_trades, market_of
from dtiscan.strategy.models import ExitReason, ScanResult, Trade


def _active(symbol: str, now: float, entry_date: str = "2024-07-01") -> ScanResult:
    trade = Trade(
        entry_date=entry_date, entry_price=100.0, entry_dti=-5.0,
        entry_weekly_dti=-20.0,
    )
    return ScanResult(
        symbol=symbol,
        name=f"{symbol} Ltd",
        active_trade=trade,
        completed_trades=[],
        current_price=now,
        current_dti=-1.25,
    )


class TestMarketOf:
    def test_suffixes(self):
        assert market_of("INFY.NS") == "NSE"
        assert market_of("BP.L") == "UK"
        assert market_of("AAPL") == "US"


class TestFormatOpportunities:
    def test_empty(self):
        assert format_opportunities([]) == "DTI scan complete. No active trades found."

    def test_grouped_by_market(self):
        results = [_active("AAPL", 103.0), _active("INFY.NS", 101.0), _active("BP.L", 99.5)]
        text = format_opportunities(results, as_of=date(2024, 7, 11))

        assert "3 symbol(s) currently in a trade" in text
        assert text.index("NSE (1):") < text.index("UK (1):") < text.index("US (1):")
        assert "AAPL Ltd (AAPL)" in text
        assert "P/L +3.00%" in text
        assert "P/L -0.50%" in text
        assert "Days 10" in text
        assert "DTI -1.25" in text

    def test_top_five_per_market(self):
        results = [_active(f"S{i}", 100.0 + i) for i in range(7)]
        text = format_opportunities(results, as_of=date(2024, 7, 2))

        assert "US (7):" in text
        assert "(S4)" in text
        assert "(S5)" not in text
        assert "... and 2 more" in text

    def test_missing_dti(self):
        result = _active("AAPL", 100.0)
        result = ScanResult(
            symbol=result.symbol, name=result.name,
            active_trade=result.active_trade, completed_trades=[],
            current_price=100.0, current_dti=None,
        )
        text = format_opportunities([result], as_of=date(2024, 7, 1))
        assert "DTI N/A" in text


class TestFormatTrades:
    def test_closed_and_open_trades(self):
        closed = Trade(
            entry_date="2024-07-01", entry_price=100.0, entry_dti=-5.0,
            entry_weekly_dti=0.0, exit_date="2024-07-09", exit_price=109.0,
            exit_reason=ExitReason.TAKE_PROFIT, pl_percent=9.0,
        )
        still_open = Trade(
            entry_date="2024-08-01", entry_price=110.0, entry_dti=-3.0,
            entry_weekly_dti=0.0,
        )
        text = format_trades("AAPL", [closed, still_open], calculate_stats([closed]))

        assert "AAPL backtest" in text
        assert "2024-07-01 → 2024-07-09" in text
        assert "+9.00%  Take Profit" in text
        assert "2024-08-01  @ 110.00  OPEN" in text
        assert "Trades:    1" in text
        assert "Win rate:  100.00%" in text

    def test_no_trades(self):
        text = format_trades("FLAT", [], calculate_stats([]))
        assert "Trades:    0" in text
        assert "Win rate:  0.00%" in text
