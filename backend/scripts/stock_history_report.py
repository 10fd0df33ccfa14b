"""
Chronological daily stock records of one product at one outlet, split around a local calendar day.

Prints every record with running totals, then what the "previous stock" (before
the day starts) and the stock added during the day add up to.

Run inside docker:
  docker exec -i stock-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/stock_history_report.py \
      --maintains-id <uuid> --product-id <uuid> --date 2025-10-30"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select  # noqa: E402

from core.config import settings  # noqa: E402
from core.stock_history import BEFORE, DURING, StockDaySummary, day_window, summarize_stock_day  # noqa: E402
from db.database import async_session_maker, DailyStockRecord  # noqa: E402

_POSITION_NOTE = {
    BEFORE: "before the day -> counted in previous stock",
    DURING: "during the day -> not in previous stock",
}


def print_summary(summary: StockDaySummary, tz: str) -> None:
    zone = ZoneInfo(tz)
    print(f"Total records found: {len(summary.rows)}")
    for i, row in enumerate(summary.rows, start=1):
        print(f"\n{i}. Record created: {row.created_at.astimezone(zone):%Y-%m-%d %H:%M:%S} ({tz})")
        print(f"   UTC: {row.created_at.isoformat()}")
        print(f"   Quantity: {row.quantity:g}")
        print(f"   Price per unit: {row.price_per_quantity:g}")
        print(f"   Record value: {row.value:g}")
        print(f"   Cumulative quantity: {row.cumulative_quantity:g}")
        print(f"   Cumulative value: {row.cumulative_value:g}")
        print(f"   {_POSITION_NOTE.get(row.position, 'after the day -> future record')}")

    print("\nPrevious stock:")
    print(f"   Records before the day: {summary.previous_count}")
    print(f"   Previous stock quantity: {summary.previous_quantity:g}")
    print(f"   Previous stock value: {summary.previous_value:g}")
    print("\nDuring the day:")
    print(f"   Records: {summary.day_count}")
    print(f"   Quantity added: {summary.day_quantity:g}")
    print(f"   Value added: {summary.day_value:g}")
    print(f"\nStock at end of day: {summary.end_of_day_quantity:g}")


async def report(maintains_id: UUID, product_id: UUID, day: date, tz: str, session_maker=async_session_maker) -> StockDaySummary:
    start, end = day_window(day, tz)
    print(f"Product {product_id} at {maintains_id}, {day.isoformat()} ({tz}) = [{start.isoformat()}, {end.isoformat()})")
    print("=" * 60)

    async with session_maker() as db:
        res = await db.execute(
            select(DailyStockRecord)
            .where(DailyStockRecord.maintains_id == maintains_id)
            .where(DailyStockRecord.product_id == product_id)
            .order_by(DailyStockRecord.created_at.asc())
        )
        records = res.scalars().all()

    summary = summarize_stock_day(records, start, end)
    if not summary.rows:
        print("No stock records found for this product!")
        return summary
    print_summary(summary, tz)
    return summary


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--maintains-id", required=True, type=UUID)
    p.add_argument("--product-id", required=True, type=UUID)
    p.add_argument("--date", required=True, type=date.fromisoformat, help="Local calendar day, YYYY-MM-DD")
    p.add_argument("--tz", default=settings.report_timezone)
    args = p.parse_args()

    try:
        ZoneInfo(args.tz)
    except (ZoneInfoNotFoundError, ValueError):
        p.error(f"unknown time zone: {args.tz}")

    try:
        asyncio.run(report(args.maintains_id, args.product_id, args.date, args.tz))
    except Exception as e:
        print(f"Analysis failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
