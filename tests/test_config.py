"""Tests for dtiscan.config — environment variable loading and validation."""

import pytest

from dtiscan.config import load_config
from dtiscan.data.universe import DEFAULT_UNIVERSE
from dtiscan.strategy.models import BacktestParams


_VARS = [
    "DTI_R",
    "DTI_S",
    "DTI_U",
    "ENTRY_THRESHOLD",
    "TAKE_PROFIT_PCT",
    "STOP_LOSS_PCT",
    "MAX_HOLDING_DAYS",
    "HISTORY_MONTHS",
    "MIN_BARS",
    "SCAN_CONCURRENCY",
    "DATA_PRIMARY_URL",
    "DATA_FALLBACK_URL",
    "HTTP_TIMEOUT",
    "RETRY_ATTEMPTS",
    "RETRY_DELAY",
    "UNIVERSE_PATH",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure config env vars are cleared between tests."""
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


def _load(tmp_path):
    # Non-existent env_path so load_dotenv doesn't pick up a real .env file
    return load_config(env_path=str(tmp_path / "nonexistent.env"))


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        cfg = _load(tmp_path)
        assert (cfg.dti_r, cfg.dti_s, cfg.dti_u) == (14, 10, 5)
        assert cfg.entry_threshold == 0.0
        assert cfg.take_profit_pct == 8.0
        assert cfg.stop_loss_pct == 5.0
        assert cfg.max_holding_days == 30
        assert cfg.history_months == 12
        assert cfg.min_bars == 30
        assert cfg.scan_concurrency == 10
        assert cfg.data_primary_url == "https://query1.finance.yahoo.com"
        assert cfg.data_fallback_url == "https://query2.finance.yahoo.com"
        assert cfg.http_timeout == 10.0
        assert cfg.retry_attempts == 3
        assert cfg.retry_delay == 1.0
        assert cfg.universe_path == str(DEFAULT_UNIVERSE)
        assert cfg.log_level == "INFO"

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DTI_R", "21")
        monkeypatch.setenv("ENTRY_THRESHOLD", "-40")
        monkeypatch.setenv("SCAN_CONCURRENCY", "4")
        cfg = _load(tmp_path)
        assert cfg.dti_r == 21
        assert cfg.entry_threshold == -40.0
        assert cfg.scan_concurrency == 4

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TAKE_PROFIT_PCT=12\nLOG_LEVEL=DEBUG\n")
        cfg = load_config(env_path=str(env_file))
        assert cfg.take_profit_pct == 12.0
        assert cfg.log_level == "DEBUG"

    def test_backtest_params(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOP_LOSS_PCT", "3.5")
        cfg = _load(tmp_path)
        assert cfg.backtest_params == BacktestParams(
            entry_threshold=0.0,
            take_profit_pct=8.0,
            stop_loss_pct=3.5,
            max_holding_days=30,
        )

    def test_non_positive_period_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DTI_S", "0")
        with pytest.raises(ValueError, match="DTI_S"):
            _load(tmp_path)

    def test_non_integer_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RETRY_ATTEMPTS", "three")
        with pytest.raises(ValueError, match="RETRY_ATTEMPTS"):
            _load(tmp_path)
