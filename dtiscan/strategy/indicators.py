"""Technical indicators — ATR and DTI. Pure functions, no I/O.

Series are plain lists aligned index-for-index with the input bars.
``None`` marks entries that are not yet defined; it is never conflated
with ``0.0``.
"""

from typing import Optional, Sequence


def calculate_true_range(
    high: Sequence[float],
    low: Sequence[float],
    close: Sequence[float],
) -> list[float]:
    """True Range per bar.

    The first bar has no previous close, so its TR is ``high - low``.
    Afterwards:
        TR = max(high - low, |high - prev_close|, |low - prev_close|)
    """
    true_ranges: list[float] = []
    for i in range(len(high)):
        if i == 0:
            true_ranges.append(high[0] - low[0])
            continue
        prev_close = close[i - 1]
        true_ranges.append(
            max(
                high[i] - low[i],
                abs(high[i] - prev_close),
                abs(low[i] - prev_close),
            )
        )
    return true_ranges


def calculate_atr(
    high: Sequence[float],
    low: Sequence[float],
    close: Sequence[float],
    period: int = 14,
) -> list[Optional[float]]:
    """Calculate a Wilder-smoothed Average True Range series.

    Algorithm:
        1. TR per bar (see :func:`calculate_true_range`).
        2. Seed ATR at index ``period - 1`` with the SMA of the first
           *period* true ranges.
        3. Subsequent: ``ATR = (prev_ATR × (period-1) + TR) / period``

    Returns a list the same length as *high*.  Entries before the seed are
    ``None``; an input shorter than *period* is ``None`` throughout.
    """
    true_ranges = calculate_true_range(high, low, close)
    atr: list[Optional[float]] = [None] * len(true_ranges)

    if len(true_ranges) < period:
        return atr

    prev = sum(true_ranges[:period]) / period
    atr[period - 1] = prev

    for i in range(period, len(true_ranges)):
        prev = (prev * (period - 1) + true_ranges[i]) / period
        atr[i] = prev

    return atr


# ── DTI ──────────────────────────────────────────────────────────────────


def calculate_dti(
    high: Sequence[float],
    low: Sequence[float],
    r: int = 14,
    s: int = 10,
    u: int = 5,
) -> list[Optional[float]]:
    """Calculate the Directional Trend Index.

    Each bar looks back over an *s*-bar window and sums the direction of the
    high (``+1`` when ``high >= prev_high``, else ``-1``) weighted by the
    ATR(*r*) lagged ``s - 1`` bars.  The weighted direction over the total
    weight, ×100, is the raw value; from index ``r + s + u - 1`` onwards it
    is replaced by the mean of the defined values among the previous
    *u* - 1 emitted slots (the raw value when there are none, as with
    ``u == 1``).

    The ATR is fed the high series in place of closes.

    Returns an empty list when ``len(high) < r + s + u``.  Entries before
    index ``r + s - 1`` are ``None``; a window with zero total weight
    yields exactly ``0.0``.
    """
    n = len(high)
    if n < r + s + u:
        return []

    atr = calculate_atr(high, low, high, r)
    first_valid = r + s - 1
    smooth_start = r + s + u - 1
    dti: list[Optional[float]] = []

    for i in range(n):
        if i < first_valid or atr[i - s + 1] is None:
            dti.append(None)
            continue

        sum_direction = 0.0
        sum_volatility = 0.0
        for idx in range(i - s + 1, i + 1):
            if idx < 1:
                continue
            direction = 1 if high[idx] - high[idx - 1] >= 0 else -1
            lagged = idx - s + 1
            weight = (atr[lagged] or 0.0) if lagged >= 0 else 0.0
            sum_direction += direction * weight
            sum_volatility += weight

        if sum_volatility <= 0:
            dti.append(0.0)
            continue

        raw = (sum_direction / sum_volatility) * 100
        if i < smooth_start:
            dti.append(raw)
            continue

        # Slot i is not written yet, so only the u - 1 slots before it count
        window = [
            dti[k]
            for k in range(i - u + 1, i)
            if k >= first_valid and dti[k] is not None
        ]
        dti.append(sum(window) / len(window) if window else raw)

    return dti
