from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Tuple
from zoneinfo import ZoneInfo

from core.pricing import coerce_price

BEFORE = "before"
DURING = "during"
AFTER = "after"


@dataclass
class StockDayRow:
    created_at: datetime
    quantity: float
    price_per_quantity: float
    value: float
    cumulative_quantity: float
    cumulative_value: float
    position: str


@dataclass
class StockDaySummary:
    day_start: datetime
    day_end: datetime
    rows: List[StockDayRow] = field(default_factory=list)
    previous_count: int = 0
    previous_quantity: float = 0.0
    previous_value: float = 0.0
    day_count: int = 0
    day_quantity: float = 0.0
    day_value: float = 0.0

    @property
    def end_of_day_quantity(self) -> float:
        return self.previous_quantity + self.day_quantity


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_window(day: date, tz: str) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day."""
    zone = ZoneInfo(tz)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def summarize_stock_day(records: Iterable, day_start: datetime, day_end: datetime) -> StockDaySummary:
    """Walk daily stock records in time order, splitting them around [day_start, day_end).

    Records need `created_at`, `quantity` and `price_per_quantity` attributes.
    """
    start, end = _utc(day_start), _utc(day_end)
    summary = StockDaySummary(day_start=start, day_end=end)

    ordered = sorted(records, key=lambda r: _utc(r.created_at))
    cum_qty = 0.0
    cum_value = 0.0
    for r in ordered:
        created = _utc(r.created_at)
        qty = coerce_price(r.quantity)
        price = coerce_price(r.price_per_quantity)
        value = qty * price
        cum_qty += qty
        cum_value += value

        if created < start:
            position = BEFORE
            summary.previous_count += 1
            summary.previous_quantity += qty
            summary.previous_value += value
        elif created < end:
            position = DURING
            summary.day_count += 1
            summary.day_quantity += qty
            summary.day_value += value
        else:
            position = AFTER

        summary.rows.append(
            StockDayRow(
                created_at=created,
                quantity=qty,
                price_per_quantity=price,
                value=value,
                cumulative_quantity=cum_qty,
                cumulative_value=cum_value,
                position=position,
            )
        )
    return summary
