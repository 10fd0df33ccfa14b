import argparse
import asyncio
import sys
from pathlib import Path
from uuid import UUID

"""
Show a product's latest unit prices at an outlet under every resolution strategy.

Useful when checking which variant matches what the app shows: units where the
strategies disagree are flagged with "*".

Run inside the api container:
  docker compose exec -T api uv run python scripts/latest_prices_report.py --product-id <uuid> --maintains-id <uuid>
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.pricing import STRATEGIES, resolve_latest_unit_prices, to_instant  # noqa: E402
from db.database import async_session_maker  # noqa: E402
from db.repository import fetch_stocks_for_product, fetch_units_for_product  # noqa: E402


def compare_strategies(stocks, units) -> dict:
    """unit_id -> {strategy: price}"""
    table = {u.id: {} for u in units}
    for strategy in STRATEGIES:
        for entry in resolve_latest_unit_prices(stocks, units, strategy):
            table[entry.unit_id][strategy] = entry.price_per_quantity
    return table


async def report(product_id: UUID, maintains_id, session_maker=async_session_maker) -> dict:
    async with session_maker() as db:
        stocks = await fetch_stocks_for_product(db, product_id, maintains_id)
        units = await fetch_units_for_product(db, product_id)

    print(f"[latest_prices_report] product={product_id} maintains={maintains_id}")
    print(f"  stock lines: {len(stocks)}, units: {len(units)}")
    bad_ts = sum(1 for s in stocks if to_instant(s.stock_batch_created_at) == 0.0)
    if bad_ts:
        print(f"  WARNING: {bad_ts} stock lines have no readable batch timestamp")

    table = compare_strategies(stocks, units)
    names = {u.id: (u.name or u.id) for u in units}
    print("\n  " + "unit".ljust(24) + "".join(s.rjust(18) for s in STRATEGIES))
    for unit_id, by_strategy in table.items():
        values = [by_strategy[s] for s in STRATEGIES]
        flag = "*" if len(set(values)) > 1 else " "
        print(f"{flag} " + str(names[unit_id])[:24].ljust(24) + "".join(f"{v:18.2f}" for v in values))
    return table


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--product-id", required=True, type=UUID)
    p.add_argument("--maintains-id", type=UUID, default=None, help="Limit to one outlet (default: all outlets)")
    args = p.parse_args()

    try:
        asyncio.run(report(args.product_id, args.maintains_id))
    except Exception as e:
        print(f"[latest_prices_report] FAILED: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
