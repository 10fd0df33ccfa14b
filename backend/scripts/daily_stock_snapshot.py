"""
Copy the current stock table into daily_stock_record (one snapshot row per stock row).

Stock rows without a product are skipped. Meant to run once a day from cron:
  0 23 * * * cd /app && PYTHONPATH=/app uv run python scripts/daily_stock_snapshot.py >> logs/daily-stock-snapshot.log 2>&1
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select  # noqa: E402

from db.database import async_session_maker, DailyStockRecord, Stock  # noqa: E402


async def create_daily_stock_snapshot(session_maker=async_session_maker) -> int:
    print("Starting daily stock snapshot...")
    now = datetime.now(timezone.utc)

    async with session_maker() as db:
        res = await db.execute(
            select(
                Stock.maintains_id,
                Stock.product_id,
                Stock.unit_id,
                Stock.quantity,
                Stock.price_per_quantity,
            ).where(Stock.product_id.is_not(None))
        )
        rows = res.all()

        db.add_all(
            [
                DailyStockRecord(
                    maintains_id=r.maintains_id,
                    product_id=r.product_id,
                    unit_id=r.unit_id,
                    quantity=r.quantity,
                    price_per_quantity=r.price_per_quantity,
                    created_at=now,
                    updated_at=now,
                )
                for r in rows
            ]
        )
        await db.commit()

    print(f"Inserted {len(rows)} records into daily_stock_record")
    return len(rows)


def main():
    try:
        asyncio.run(create_daily_stock_snapshot())
    except Exception as e:
        print(f"Error during daily stock snapshot: {e}")
        sys.exit(1)
    print("Daily stock snapshot completed successfully!")


if __name__ == "__main__":
    main()
