"""Strategy data models — typed representations for the DTI pipeline."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PriceBar:
    """A single daily bar. ``date`` is an ISO ``YYYY-MM-DD`` string."""

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class Stock:
    """One entry of the scan universe."""

    symbol: str
    name: str
    market: str = ""


# ── Weekly aggregation ───────────────────────────────────────────────────


@dataclass(frozen=True)
class WeeklyBucket:
    """A non-overlapping window of up to seven daily bars."""

    start_date: str
    end_date: str
    start_index: int
    end_index: int
    avg_high: float
    avg_low: float


@dataclass(frozen=True)
class WeeklyDTI:
    """Weekly oscillator bundle.

    ``weekly_dti`` holds one value per bucket (``0.0`` where the weekly
    series had no value).  ``daily_weekly_dti`` repeats each bucket's value
    on every daily index the bucket spans.
    """

    buckets: list[WeeklyBucket]
    weekly_dti: list[float]
    daily_weekly_dti: list[Optional[float]]

    def bucket_index(self, index: int) -> int:
        """Return the position of the bucket containing daily *index*, or -1."""
        for pos, bucket in enumerate(self.buckets):
            if bucket.start_index <= index <= bucket.end_index:
                return pos
        return -1


# ── Trades ───────────────────────────────────────────────────────────────


class ExitReason:
    """Exit reasons recorded on closed trades, in priority order."""

    TAKE_PROFIT = "Take Profit"
    STOP_LOSS = "Stop Loss"
    TIME_EXIT = "Time Exit"


@dataclass(frozen=True)
class BacktestParams:
    """Entry/exit rules for the simulator."""

    entry_threshold: float = 0.0
    take_profit_pct: float = 8.0
    stop_loss_pct: float = 5.0
    max_holding_days: int = 30


@dataclass
class Trade:
    """A simulated long position.

    Created open by the backtest engine; the exit fields are filled in
    once, when the position is closed.
    """

    entry_date: str
    entry_price: float
    entry_dti: float
    entry_weekly_dti: Optional[float]
    exit_date: Optional[str] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[str] = None
    pl_percent: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.exit_date is None

    @property
    def is_win(self) -> bool:
        return self.pl_percent is not None and self.pl_percent > 0

    @property
    def holding_days(self) -> Optional[int]:
        """Calendar days between entry and exit, or ``None`` while open."""
        if self.exit_date is None:
            return None
        return days_between(self.entry_date, self.exit_date)

    def unrealised_pl(self, price: float) -> float:
        """P/L percentage if the trade were marked at *price*."""
        return (price - self.entry_price) / self.entry_price * 100


@dataclass(frozen=True)
class BacktestResult:
    """Simulator output: closed trades plus the position still open, if any."""

    completed_trades: list[Trade] = field(default_factory=list)
    active_trade: Optional[Trade] = None


@dataclass(frozen=True)
class ScanResult:
    """Pipeline output for one symbol."""

    symbol: str
    name: str
    active_trade: Optional[Trade]
    completed_trades: list[Trade]
    current_price: float
    current_dti: Optional[float]

    @property
    def current_pl_percent(self) -> Optional[float]:
        if self.active_trade is None:
            return None
        return self.active_trade.unrealised_pl(self.current_price)


def days_between(start: str, end: str) -> int:
    """Whole days from *start* to *end* (ISO dates), floored."""
    return (date.fromisoformat(end[:10]) - date.fromisoformat(start[:10])).days
