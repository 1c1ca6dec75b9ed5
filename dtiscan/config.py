"""DTI Scan — application configuration.

Loads .env variables into a typed config object.
Validates numeric settings on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from dtiscan.data.universe import DEFAULT_UNIVERSE
from dtiscan.strategy.models import BacktestParams

_POSITIVE_INT_VARS = {
    "DTI_R": "14",
    "DTI_S": "10",
    "DTI_U": "5",
    "MAX_HOLDING_DAYS": "30",
    "HISTORY_MONTHS": "12",
    "RETRY_ATTEMPTS": "3",
    "SCAN_CONCURRENCY": "10",
}


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    dti_r: int
    dti_s: int
    dti_u: int
    entry_threshold: float
    take_profit_pct: float
    stop_loss_pct: float
    max_holding_days: int
    history_months: int
    min_bars: int
    scan_concurrency: int
    data_primary_url: str
    data_fallback_url: str
    http_timeout: float
    retry_attempts: int
    retry_delay: float
    universe_path: str
    log_level: str

    @property
    def backtest_params(self) -> BacktestParams:
        """Entry/exit rules for :class:`~dtiscan.backtest.engine.BacktestEngine`."""
        return BacktestParams(
            entry_threshold=self.entry_threshold,
            take_profit_pct=self.take_profit_pct,
            stop_loss_pct=self.stop_loss_pct,
            max_holding_days=self.max_holding_days,
        )


def _positive_int(name: str) -> int:
    raw = os.environ.get(name, _POSITIVE_INT_VARS[name])
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the variable when a
    period, attempt count or concurrency limit is not a positive integer.
    """
    load_dotenv(dotenv_path=env_path)

    ints = {name: _positive_int(name) for name in _POSITIVE_INT_VARS}

    return Config(
        dti_r=ints["DTI_R"],
        dti_s=ints["DTI_S"],
        dti_u=ints["DTI_U"],
        entry_threshold=float(os.environ.get("ENTRY_THRESHOLD", "0")),
        take_profit_pct=float(os.environ.get("TAKE_PROFIT_PCT", "8")),
        stop_loss_pct=float(os.environ.get("STOP_LOSS_PCT", "5")),
        max_holding_days=ints["MAX_HOLDING_DAYS"],
        history_months=ints["HISTORY_MONTHS"],
        min_bars=int(os.environ.get("MIN_BARS", "30")),
        scan_concurrency=ints["SCAN_CONCURRENCY"],
        data_primary_url=os.environ.get(
            "DATA_PRIMARY_URL", "https://query1.finance.yahoo.com"
        ),
        data_fallback_url=os.environ.get(
            "DATA_FALLBACK_URL", "https://query2.finance.yahoo.com"
        ),
        http_timeout=float(os.environ.get("HTTP_TIMEOUT", "10.0")),
        retry_attempts=ints["RETRY_ATTEMPTS"],
        retry_delay=float(os.environ.get("RETRY_DELAY", "1.0")),
        universe_path=os.environ.get("UNIVERSE_PATH", str(DEFAULT_UNIVERSE)),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
