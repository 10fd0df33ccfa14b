"""
Reads and writes around the latest price resolver.

Rows are turned into `schemas.stock` types here, once, so the resolver only
ever sees normalized StockEntry/Unit values.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.pricing import LatestBatchPriceResolver
from db.database import DeliveryHistory, Maintains, Stock, StockBatch, Unit as UnitModel, UnitInProduct
from schemas.stock import PriceEntry, StockEntry, Unit

logger = logging.getLogger(__name__)


async def fetch_stocks_for_product(
    db: AsyncSession,
    product_id: UUID,
    maintains_id: Optional[UUID] = None,
) -> List[StockEntry]:
    """Stock lines of a product (optionally at one outlet), in database insertion order.

    Lines of deleted batches are skipped. Lines recorded before batches existed
    have no batch and use their own created_at as the batch instant.
    """
    stmt = (
        select(
            Stock.unit_id,
            Stock.price_per_quantity,
            Stock.stock_batch_id,
            Stock.created_at,
            StockBatch.created_at.label("batch_created_at"),
        )
        .select_from(Stock)
        .outerjoin(StockBatch, Stock.stock_batch_id == StockBatch.id)
        .where(Stock.product_id == product_id)
        .where(or_(Stock.stock_batch_id.is_(None), StockBatch.deleted == False))  # noqa: E712
        .order_by(Stock.created_at.asc(), Stock.id.asc())
    )
    if maintains_id is not None:
        stmt = stmt.where(Stock.maintains_id == maintains_id)

    res = await db.execute(stmt)
    out = []
    for row in res.all():
        out.append(
            StockEntry.model_validate(
                {
                    "unitId": row.unit_id,
                    "pricePerQuantity": row.price_per_quantity,
                    "stockBatchId": row.stock_batch_id,
                    "stockBatchCreatedAt": row.batch_created_at if row.batch_created_at is not None else row.created_at,
                }
            )
        )
    return out


async def fetch_units_for_product(db: AsyncSession, product_id: UUID) -> List[Unit]:
    res = await db.execute(
        select(UnitModel)
        .join(UnitInProduct, UnitInProduct.unit_id == UnitModel.id)
        .where(UnitInProduct.product_id == product_id)
        .order_by(func.lower(UnitModel.name).asc())
    )
    return [Unit(**u.to_schema) for u in res.scalars().all()]


async def save_latest_unit_prices(
    db: AsyncSession,
    delivery_history_id: UUID,
    prices: Sequence[PriceEntry],
    modified_at: datetime,
) -> bool:
    """Write the price snapshot onto one delivery history row. Caller commits."""
    res = await db.execute(
        update(DeliveryHistory)
        .where(DeliveryHistory.id == delivery_history_id)
        .values(
            latest_unit_price_data=[p.to_json() for p in prices],
            updated_at=modified_at,
        )
    )
    return int(getattr(res, "rowcount", 0) or 0) > 0


async def find_maintains_by_name(db: AsyncSession, name: str) -> Optional[Maintains]:
    name = (name or "").strip()
    if not name:
        return None
    res = await db.execute(
        select(Maintains)
        .where(func.lower(Maintains.name) == name.lower())
        .order_by(Maintains.created_at.asc())
    )
    return res.scalars().first()


async def compute_latest_unit_prices(
    db: AsyncSession,
    product_id: UUID,
    maintains_id: Optional[UUID],
    strategy: Optional[str] = None,
) -> List[PriceEntry]:
    resolver = LatestBatchPriceResolver(strategy or settings.price_strategy)
    stocks = await fetch_stocks_for_product(db, product_id, maintains_id)
    units = await fetch_units_for_product(db, product_id)
    prices = resolver.resolve(stocks, units)
    logger.debug(
        "product=%s maintains=%s stocks=%d units=%d strategy=%s",
        product_id,
        maintains_id,
        len(stocks),
        len(units),
        resolver.strategy,
    )
    return prices


async def latest_main_unit_price(
    db: AsyncSession,
    product_id: UUID,
    maintains_id: UUID,
    unit_id: UUID,
):
    """Most recent stock price for a unit of a product at an outlet, or None.

    Lines of deleted batches are ignored, as in fetch_stocks_for_product.
    """
    res = await db.execute(
        select(Stock.price_per_quantity)
        .select_from(Stock)
        .outerjoin(StockBatch, Stock.stock_batch_id == StockBatch.id)
        .where(or_(Stock.stock_batch_id.is_(None), StockBatch.deleted == False))  # noqa: E712
        .where(Stock.product_id == product_id)
        .where(Stock.maintains_id == maintains_id)
        .where(Stock.unit_id == unit_id)
        .order_by(Stock.created_at.desc(), Stock.id.desc())
        .limit(1)
    )
    return res.scalar_one_or_none()
