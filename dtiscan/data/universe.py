"""Scan universe — symbol lists loaded from a versioned JSON asset.

File layout::

    {"version": "2024.1",
     "markets": {"nifty50": [{"symbol": "INFY.NS", "name": "Infosys"}, ...]}}
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from dtiscan.strategy.models import Stock

logger = logging.getLogger("dtiscan.data")

DEFAULT_UNIVERSE = Path(__file__).resolve().parent / "universe.json"


def load_universe(
    path: Optional[str] = None,
    markets: Optional[Iterable[str]] = None,
) -> list[Stock]:
    """Load the stocks of *markets* (all markets when ``None``).

    Symbols listed in more than one market are kept once, under the first
    market they appear in.

    Raises ``ValueError`` if the file is malformed or names an unknown
    market.
    """
    source = Path(path) if path else DEFAULT_UNIVERSE
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
        available: dict = data["markets"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise ValueError(f"Malformed universe file {source}: {exc}") from exc

    wanted = list(markets) if markets else list(available)
    unknown = [m for m in wanted if m not in available]
    if unknown:
        raise ValueError(
            f"Unknown market(s) {', '.join(unknown)}. "
            f"Available: {', '.join(available)}"
        )

    stocks: dict[str, Stock] = {}
    for market in wanted:
        for entry in available[market]:
            try:
                symbol = entry["symbol"]
                name = entry.get("name", symbol)
            except (KeyError, TypeError, AttributeError) as exc:
                raise ValueError(
                    f"Malformed entry in market {market!r}: {entry!r}"
                ) from exc
            if symbol not in stocks:
                stocks[symbol] = Stock(symbol=symbol, name=name, market=market)

    logger.info(
        "Loaded %d symbols from %s (version %s)",
        len(stocks), source.name, data.get("version", "unknown"),
    )
    return list(stocks.values())
