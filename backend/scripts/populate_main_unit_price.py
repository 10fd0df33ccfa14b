"""
Populate sale.main_unit_price for existing sales.

For each sale with main_unit_price IS NULL:
1. Find the product's main unit.
2. Look up the most recent stock price_per_quantity for (product, outlet, main unit).
3. Write it onto the sale.

Sales whose product is gone, whose product has no main unit, or that have no
stock price are skipped and counted as errors.

Run inside docker:
  docker exec -i stock-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/populate_main_unit_price.py"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select, update  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from core.logging_setup import setup_logging  # noqa: E402
from db.database import async_session_maker, Product, Sale  # noqa: E402
from db.repository import latest_main_unit_price  # noqa: E402

logger = logging.getLogger("scripts.populate_main_unit_price")

PROGRESS_EVERY = 100


async def populate(dry_run: bool = False, session_maker=async_session_maker) -> dict:
    counts = {"total": 0, "processed": 0, "errors": 0}

    async with session_maker() as db:
        res = await db.execute(
            select(Sale.id, Sale.product_id, Sale.maintains_id)
            .where(Sale.main_unit_price.is_(None))
            .order_by(Sale.created_at.asc(), Sale.id.asc())
        )
        sales = res.all()
        counts["total"] = len(sales)
        print(f"Found {len(sales)} sales to process")

        if not sales:
            print("No sales to process. Migration completed.")
            return counts

        main_unit_by_product: dict = {}
        for sale_id, product_id, maintains_id in sales:
            try:
                if product_id not in main_unit_by_product:
                    p_res = await db.execute(select(Product.id, Product.main_unit_id).where(Product.id == product_id))
                    found = p_res.first()
                    main_unit_by_product[product_id] = (found is not None, found.main_unit_id if found else None)

                exists, main_unit_id = main_unit_by_product[product_id]
                if not exists:
                    logger.warning("Product not found for sale %s, skipping", sale_id)
                    counts["errors"] += 1
                    continue
                if main_unit_id is None:
                    logger.warning("Product %s has no main unit, skipping sale %s", product_id, sale_id)
                    counts["errors"] += 1
                    continue

                price = await latest_main_unit_price(db, product_id, maintains_id, main_unit_id)
                if price is None:
                    logger.warning(
                        "No stock price found for sale %s (product: %s, maintains: %s, main unit: %s), skipping",
                        sale_id, product_id, maintains_id, main_unit_id,
                    )
                    counts["errors"] += 1
                    continue

                if not dry_run:
                    # one transaction per sale
                    await db.execute(update(Sale).where(Sale.id == sale_id).values(main_unit_price=price))
                    await db.commit()
                counts["processed"] += 1

                if counts["processed"] % PROGRESS_EVERY == 0:
                    print(f"Processed {counts['processed']} sales so far...")
            except SQLAlchemyError:
                logger.exception("Error processing sale %s", sale_id)
                counts["errors"] += 1
                await db.rollback()

    rate = (counts["processed"] / counts["total"]) * 100
    print("Migration completed!" if not dry_run else "DRY RUN completed, nothing written.")
    print(f"Total sales processed: {counts['processed']}")
    print(f"Total errors: {counts['errors']}")
    print(f"Success rate: {rate:.2f}%")
    return counts


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--dry-run", action="store_true", help="Do not commit, just count what would change")
    args = p.parse_args()

    setup_logging()
    try:
        asyncio.run(populate(dry_run=args.dry_run))
    except Exception as e:
        print(f"Migration script failed: {e}")
        sys.exit(1)
    print("Migration script completed successfully")


if __name__ == "__main__":
    main()
