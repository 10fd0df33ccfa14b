"""
Latest stock batch -> per-unit price map.

A product's stock at an outlet is recorded in batches; each stock line carries
the unit it is counted in and its price per quantity. The "latest unit price
data" written onto delivery history rows is the price of every unit of the
product as found in the most recently created batch, 0 for units that batch
does not carry.

Bad timestamps sort as instant 0 and bad prices read as 0; nothing here raises
for a malformed entry.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from schemas.stock import PriceEntry, StockEntry, Unit

logger = logging.getLogger(__name__)

STRATEGY_BATCH = "batch"
STRATEGY_TIMESTAMP = "timestamp"
STRATEGY_LATEST_PER_UNIT = "latest_per_unit"
STRATEGIES = (STRATEGY_BATCH, STRATEGY_TIMESTAMP, STRATEGY_LATEST_PER_UNIT)


def validate_strategy(name: Optional[str]) -> str:
    s = (name or "").strip().lower()
    if s not in STRATEGIES:
        raise ValueError(f"unknown price strategy {name!r} (expected one of: {', '.join(STRATEGIES)})")
    return s


def to_instant(value) -> float:
    """Epoch seconds for a batch timestamp; 0.0 when it cannot be read.

    Naive datetimes and bare dates are taken as UTC.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.timestamp()
        except (OverflowError, OSError, ValueError):
            return 0.0
    if isinstance(value, date):
        return to_instant(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float, Decimal)):
        try:
            f = float(value)
        except (OverflowError, ValueError):
            return 0.0
        return f if math.isfinite(f) else 0.0
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return 0.0
        if s[-1] in ("Z", "z"):
            s = s[:-1] + "+00:00"
        try:
            return to_instant(datetime.fromisoformat(s))
        except ValueError:
            return 0.0
    return 0.0


def coerce_price(value) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def _latest_index(instants: Sequence[float]) -> int:
    # strict ">" keeps the first entry on ties
    best = 0
    for i, t in enumerate(instants):
        if t > instants[best]:
            best = i
    return best


def _prices_from(entries: Iterable[StockEntry]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for s in entries:
        if s.unit_id is None:
            continue
        # last write wins within the batch
        out[s.unit_id] = coerce_price(s.price_per_quantity)
    return out


def _by_batch(stocks: Sequence[StockEntry], instants: Sequence[float], ref: int) -> Dict[str, float]:
    batch_id = stocks[ref].stock_batch_id
    if batch_id is None:
        return _by_timestamp(stocks, instants, ref)
    return _prices_from(s for s in stocks if s.stock_batch_id == batch_id)


def _by_timestamp(stocks: Sequence[StockEntry], instants: Sequence[float], ref: int) -> Dict[str, float]:
    latest = instants[ref]
    return _prices_from(s for s, t in zip(stocks, instants) if t == latest)


def _latest_per_unit(stocks: Sequence[StockEntry], instants: Sequence[float], ref: int) -> Dict[str, float]:
    best: Dict[str, int] = {}
    for i, s in enumerate(stocks):
        if s.unit_id is None:
            continue
        j = best.get(s.unit_id)
        if j is None or instants[i] > instants[j]:
            best[s.unit_id] = i
    return {uid: coerce_price(stocks[i].price_per_quantity) for uid, i in best.items()}


_BUILDERS: Dict[str, Callable[[Sequence[StockEntry], Sequence[float], int], Dict[str, float]]] = {
    STRATEGY_BATCH: _by_batch,
    STRATEGY_TIMESTAMP: _by_timestamp,
    STRATEGY_LATEST_PER_UNIT: _latest_per_unit,
}


def resolve_latest_unit_prices(
    stocks: Optional[Sequence[StockEntry]],
    units: Optional[Sequence[Unit]],
    strategy: str = STRATEGY_BATCH,
) -> List[PriceEntry]:
    """One PriceEntry per unit, in unit order, priced from the latest stock batch.

    - no units -> []
    - no stocks -> every unit at 0
    - units missing from the latest batch -> 0, even if an older batch priced them
    """
    build = _BUILDERS[validate_strategy(strategy)]
    if not units:
        return []
    unit_ids = [u.id for u in units]
    stocks = list(stocks or [])
    if not stocks:
        return [PriceEntry(unit_id=uid, price_per_quantity=0.0) for uid in unit_ids]

    instants = [to_instant(s.stock_batch_created_at) for s in stocks]
    ref = _latest_index(instants)
    prices = build(stocks, instants, ref)
    logger.debug(
        "latest batch ref=%s batch_id=%s instant=%s units_priced=%d/%d",
        ref,
        stocks[ref].stock_batch_id,
        instants[ref],
        sum(1 for uid in unit_ids if uid in prices),
        len(unit_ids),
    )
    return [PriceEntry(unit_id=uid, price_per_quantity=prices.get(uid, 0.0)) for uid in unit_ids]


class LatestBatchPriceResolver:
    """Strategy-bound resolver, for callers that resolve many products the same way."""

    def __init__(self, strategy: str = STRATEGY_BATCH):
        self.strategy = validate_strategy(strategy)

    def resolve(self, stocks: Optional[Sequence[StockEntry]], units: Optional[Sequence[Unit]]) -> List[PriceEntry]:
        return resolve_latest_unit_prices(stocks, units, self.strategy)
