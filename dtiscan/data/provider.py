"""Market-data provider — async daily bar fetch from the Yahoo chart API.

Each attempt tries the primary host, then the fallback host.  Transient
failures are retried under a :class:`RetryPolicy` with linear backoff.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

from dtiscan.config import Config
from dtiscan.strategy.models import PriceBar

logger = logging.getLogger("dtiscan.data")

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_SECONDS_PER_MONTH = 31 * 24 * 60 * 60
_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; dti-scan)"}


class MarketDataError(Exception):
    """Raised when bars for a symbol cannot be fetched."""


@dataclass(frozen=True)
class RetryPolicy:
    """How many rounds to try and how long to wait between them."""

    max_attempts: int = 3
    base_delay: float = 1.0

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the *attempt*-th failed round (1-based)."""
        return self.base_delay * attempt


class MarketDataProvider:
    """Fetches daily price bars for a symbol.

    Args:
        config: Hosts, timeout and default history window.
        retry_policy: Overrides the policy built from *config*.
    """

    def __init__(
        self, config: Config, retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self._config = config
        self._hosts = [config.data_primary_url, config.data_fallback_url]
        self._retry = retry_policy or RetryPolicy(
            max_attempts=config.retry_attempts,
            base_delay=config.retry_delay,
        )

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def fetch_bars(
        self, symbol: str, months: Optional[int] = None,
    ) -> list[PriceBar]:
        """Fetch roughly *months* of daily bars, oldest first.

        Raises ``MarketDataError`` once every host has failed on every
        attempt, or immediately on a non-retryable HTTP status.
        """
        months = months or self._config.history_months
        end = int(time.time())
        params = {
            "period1": end - months * _SECONDS_PER_MONTH,
            "period2": end,
            "interval": "1d",
        }

        last_exc: Optional[Exception] = None
        for attempt in range(1, self._retry.max_attempts + 1):
            for host in self._hosts:
                url = f"{host}/v8/finance/chart/{symbol}"
                try:
                    async with httpx.AsyncClient() as client:
                        resp = await client.get(
                            url,
                            headers=_HEADERS,
                            params=params,
                            timeout=self._config.http_timeout,
                        )
                except httpx.TransportError as exc:
                    logger.warning("%s transport error from %s: %s", symbol, host, exc)
                    last_exc = exc
                    continue

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    logger.warning(
                        "%s: %s returned %d", symbol, host, resp.status_code,
                    )
                    last_exc = MarketDataError(
                        f"{host} returned {resp.status_code} for {symbol}"
                    )
                    continue

                try:
                    resp.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    raise MarketDataError(f"{symbol}: {exc}") from exc

                try:
                    payload = resp.json()
                except ValueError as exc:
                    raise MarketDataError(
                        f"{symbol}: {host} returned a non-JSON body"
                    ) from exc
                return parse_chart(symbol, payload)

            if attempt < self._retry.max_attempts:
                delay = self._retry.delay(attempt)
                logger.info(
                    "%s: retry %d/%d in %.1fs",
                    symbol, attempt, self._retry.max_attempts - 1, delay,
                )
                await asyncio.sleep(delay)

        raise MarketDataError(
            f"{symbol}: all {self._retry.max_attempts} attempts failed"
        ) from last_exc


def parse_chart(symbol: str, payload: dict) -> list[PriceBar]:
    """Convert a chart API payload into ascending, de-duplicated bars.

    Bars with any missing OHLC value are dropped.
    """
    try:
        result = payload["chart"]["result"][0]
        timestamps = result.get("timestamp") or []
        quote = result["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise MarketDataError(f"{symbol}: unexpected chart payload") from exc

    columns = {
        key: quote.get(key) or []
        for key in ("open", "high", "low", "close", "volume")
    }

    def _at(key: str, i: int):
        col = columns[key]
        return col[i] if i < len(col) else None

    by_date: dict[str, PriceBar] = {}
    for i, ts in enumerate(timestamps):
        values = [_at(k, i) for k in ("open", "high", "low", "close")]
        if any(v is None for v in values):
            continue
        day = datetime.fromtimestamp(ts, tz=timezone.utc).date().isoformat()
        if day in by_date:
            continue
        volume = _at("volume", i) or 0
        o, h, l, c = (float(v) for v in values)
        by_date[day] = PriceBar(
            date=day, open=o, high=h, low=l, close=c, volume=int(volume),
        )

    return [by_date[d] for d in sorted(by_date)]
