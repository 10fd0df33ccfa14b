import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

"""
Backfill delivery_history.latest_unit_price_data for one outlet.

For every delivery history row with the given status at the outlet, the
product's stock at that outlet is resolved to its latest-batch unit prices and
written back onto the row (updated_at = now).

Run inside the api container:
  docker compose exec -T api uv run python scripts/backfill_latest_unit_prices.py --maintains-name "Zirabo Outlet"
  docker compose exec -T api uv run python scripts/backfill_latest_unit_prices.py --maintains-id <uuid> --dry-run
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from core.config import settings  # noqa: E402
from core.logging_setup import setup_logging  # noqa: E402
from core.pricing import STRATEGIES, validate_strategy  # noqa: E402
from db.database import async_session_maker, DeliveryHistory, DELIVERY_STATUSES  # noqa: E402
from db.repository import compute_latest_unit_prices, find_maintains_by_name, save_latest_unit_prices  # noqa: E402

logger = logging.getLogger("scripts.backfill_latest_unit_prices")


async def backfill(
    maintains_id,
    maintains_name,
    status: str,
    strategy: str,
    limit,
    dry_run: bool,
    session_maker=async_session_maker,
) -> dict:
    counts = {"rows": 0, "updated": 0, "errors": 0}

    async with session_maker() as db:
        if maintains_id is None:
            outlet = await find_maintains_by_name(db, maintains_name)
            if outlet is None:
                raise ValueError(f"no outlet named {maintains_name!r}")
            maintains_id = outlet.id

        q = (
            select(DeliveryHistory.id, DeliveryHistory.product_id)
            .where(DeliveryHistory.status == status)
            .where(DeliveryHistory.maintains_id == maintains_id)
            .order_by(DeliveryHistory.created_at.asc(), DeliveryHistory.id.asc())
        )
        if limit:
            q = q.limit(limit)
        rows = (await db.execute(q)).all()
        counts["rows"] = len(rows)
        print(f"[backfill_latest_unit_prices] {len(rows)} rows (status={status}, maintains={maintains_id}, strategy={strategy})")

        for row_id, product_id in rows:
            if product_id is None:
                print(f"  skip {row_id}: no product")
                continue
            try:
                prices = await compute_latest_unit_prices(db, product_id, maintains_id, strategy)
                data = [p.to_json() for p in prices]
                if dry_run:
                    print(f"  would update {row_id}: {data}")
                    counts["updated"] += 1
                    continue
                await save_latest_unit_prices(db, row_id, prices, datetime.now(timezone.utc))
                await db.commit()
                counts["updated"] += 1
                print(f"  updated latestUnitPriceData for delivery_history id={row_id} {data}")
            except SQLAlchemyError:
                logger.exception("Failed to backfill delivery_history id=%s", row_id)
                counts["errors"] += 1
                await db.rollback()

    if dry_run:
        print(f"[backfill_latest_unit_prices] DRY RUN: would update {counts['updated']} rows")
    else:
        print(f"[backfill_latest_unit_prices] Updated {counts['updated']} rows, errors: {counts['errors']}")
    return counts


def main():
    p = argparse.ArgumentParser()
    outlet = p.add_mutually_exclusive_group(required=True)
    outlet.add_argument("--maintains-id", help="Outlet (maintains) id")
    outlet.add_argument("--maintains-name", help="Outlet (maintains) name, case-insensitive")
    p.add_argument("--status", default="Order-Placed", choices=DELIVERY_STATUSES)
    p.add_argument("--strategy", default=settings.price_strategy, help=f"One of: {', '.join(STRATEGIES)}")
    p.add_argument("--limit", type=int, default=None, help="Process at most this many rows")
    p.add_argument("--dry-run", action="store_true", help="Do not write, just print what would change")
    args = p.parse_args()

    try:
        strategy = validate_strategy(args.strategy)
    except ValueError as e:
        p.error(str(e))

    maintains_id = None
    if args.maintains_id:
        try:
            maintains_id = UUID(args.maintains_id)
        except ValueError:
            p.error(f"invalid --maintains-id: {args.maintains_id}")

    setup_logging()
    try:
        asyncio.run(
            backfill(
                maintains_id=maintains_id,
                maintains_name=args.maintains_name,
                status=args.status,
                strategy=strategy,
                limit=args.limit,
                dry_run=args.dry_run,
            )
        )
    except Exception as e:
        print(f"[backfill_latest_unit_prices] FAILED: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
