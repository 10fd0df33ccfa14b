"""
Verify the main_unit_price backfill: how many sales have it, and a sample of each side.

Run inside docker:
  docker exec -i stock-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/verify_main_unit_price.py --sample 5"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select  # noqa: E402

from db.database import async_session_maker, Product, Sale  # noqa: E402


async def verify(sample: int = 5, session_maker=async_session_maker) -> dict:
    async with session_maker() as db:
        total = int((await db.execute(select(func.count()).select_from(Sale))).scalar() or 0)
        filled = int(
            (await db.execute(select(func.count()).select_from(Sale).where(Sale.main_unit_price.is_not(None)))).scalar() or 0
        )
        null_count = total - filled
        rate = (filled / total * 100) if total else 0.0

        print("Migration Results:")
        print(f"   Total sales: {total}")
        print(f"   Sales with main_unit_price: {filled}")
        print(f"   Sales with NULL main_unit_price: {null_count}")
        print(f"   Success rate: {rate:.2f}%")

        if null_count > 0:
            print("\nSample of records with NULL main_unit_price:")
            res = await db.execute(
                select(Sale.id, Sale.product_id, Sale.maintains_id, Product.main_unit_id)
                .outerjoin(Product, Sale.product_id == Product.id)
                .where(Sale.main_unit_price.is_(None))
                .limit(sample)
            )
            for i, row in enumerate(res.all(), start=1):
                print(f"   {i}. Sale ID: {row.id}")
                print(f"      Product ID: {row.product_id}")
                print(f"      Maintains ID: {row.maintains_id}")
                print(f"      Main Unit ID: {row.main_unit_id}")

        print("\nSample of records with main_unit_price filled:")
        res = await db.execute(
            select(Sale.id, Sale.product_id, Sale.main_unit_price)
            .where(Sale.main_unit_price.is_not(None))
            .limit(sample)
        )
        for i, row in enumerate(res.all(), start=1):
            print(f"   {i}. Sale ID: {row.id}")
            print(f"      Product ID: {row.product_id}")
            print(f"      Main Unit Price: {row.main_unit_price}")

    return {"total": total, "filled": filled, "null": null_count, "rate": rate}


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--sample", type=int, default=5, help="Rows to show per sample")
    args = p.parse_args()

    try:
        asyncio.run(verify(sample=args.sample))
    except Exception as e:
        print(f"Verification failed: {e}")
        sys.exit(1)
    print("\nVerification completed successfully!")


if __name__ == "__main__":
    main()
