"""Weekly DTI — the daily oscillator re-run on seven-bar averages.

Bars are grouped by position, not by calendar week: bucket *k* covers
daily indices ``7k .. 7k + 6`` (the last bucket may be shorter).
"""

import math
from typing import Optional, Sequence

from dtiscan.strategy.indicators import calculate_dti
from dtiscan.strategy.models import WeeklyBucket, WeeklyDTI

BUCKET_SIZE = 7


def aggregate_weekly(
    dates: Sequence[str],
    high: Sequence[float],
    low: Sequence[float],
) -> list[WeeklyBucket]:
    """Split the daily series into seven-bar buckets with mean high/low."""
    n = len(dates)
    buckets: list[WeeklyBucket] = []
    for start in range(0, n, BUCKET_SIZE):
        end = min(start + BUCKET_SIZE - 1, n - 1)
        span_high = high[start : end + 1]
        span_low = low[start : end + 1]
        buckets.append(
            WeeklyBucket(
                start_date=dates[start],
                end_date=dates[end],
                start_index=start,
                end_index=end,
                avg_high=sum(span_high) / len(span_high),
                avg_low=sum(span_low) / len(span_low),
            )
        )
    return buckets


def calculate_weekly_dti(
    dates: Sequence[str],
    high: Sequence[float],
    low: Sequence[float],
    r: int = 14,
    s: int = 10,
    u: int = 5,
) -> WeeklyDTI:
    """Compute the weekly DTI and broadcast it onto the daily bars.

    The DTI periods are scaled to ``ceil(p / 7)`` for the coarser series.
    A bucket whose weekly value is undefined (or the weekly series is too
    short to produce any values) carries ``0.0``.
    """
    buckets = aggregate_weekly(dates, high, low)
    raw = calculate_dti(
        [b.avg_high for b in buckets],
        [b.avg_low for b in buckets],
        math.ceil(r / BUCKET_SIZE),
        math.ceil(s / BUCKET_SIZE),
        math.ceil(u / BUCKET_SIZE),
    )

    weekly_dti: list[float] = []
    daily: list[Optional[float]] = [None] * len(dates)
    for pos, bucket in enumerate(buckets):
        value = raw[pos] if pos < len(raw) and raw[pos] is not None else 0.0
        weekly_dti.append(value)
        for j in range(bucket.start_index, bucket.end_index + 1):
            daily[j] = value

    return WeeklyDTI(buckets=buckets, weekly_dti=weekly_dti, daily_weekly_dti=daily)
