from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.pricing import validate_strategy
from db.database import get_async_session, DeliveryHistory as DeliveryHistoryModel
from db.repository import compute_latest_unit_prices, save_latest_unit_prices
from schemas.stock import DeliveryLatestPricesOut, PriceEntry

router = APIRouter()


def _strategy_or_422(strategy: Optional[str]) -> Optional[str]:
    if strategy is None:
        return None
    try:
        return validate_strategy(strategy)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/products/{product_id}/latest-prices", response_model=List[PriceEntry])
async def get_latest_prices(
    product_id: UUID,
    maintains_id: Optional[UUID] = Query(default=None),
    strategy: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_async_session),
):
    strategy = _strategy_or_422(strategy)
    return await compute_latest_unit_prices(db, product_id, maintains_id, strategy)


@router.post("/delivery-history/{delivery_history_id}/latest-prices", response_model=DeliveryLatestPricesOut)
async def refresh_delivery_latest_prices(
    delivery_history_id: UUID,
    strategy: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_async_session),
):
    strategy = _strategy_or_422(strategy)

    res = await db.execute(select(DeliveryHistoryModel).where(DeliveryHistoryModel.id == delivery_history_id))
    row = res.scalar_one_or_none()
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Delivery history not found")
    if row.product_id is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Delivery history has no product")

    prices = await compute_latest_unit_prices(db, row.product_id, row.maintains_id, strategy)
    now = datetime.now(timezone.utc)
    await save_latest_unit_prices(db, row.id, prices, now)
    await db.commit()

    return DeliveryLatestPricesOut(id=row.id, updated_at=now, latest_unit_price_data=prices)
