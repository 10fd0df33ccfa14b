from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db.database import (
    Base,
    DeliveryHistory,
    Maintains,
    Product,
    Stock,
    StockBatch,
    Unit,
    UnitInProduct,
)

JAN = datetime(2025, 1, 1, 8, 0)
FEB = datetime(2025, 2, 1, 8, 0)
MAR = datetime(2025, 3, 1, 8, 0)
APR = datetime(2025, 4, 1, 8, 0)


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seeded(session_maker):
    """
    Ghee 500 gm, tracked in bag / kg / piece.

    Zirabo Outlet: Jan batch (kg 10, piece 2), Feb batch (kg 15),
    Mar batch marked deleted (kg 99).
    Savar Outlet: Apr batch (kg 50).
    """
    async with session_maker() as s:
        kg = Unit(name="kg")
        piece = Unit(name="piece")
        bag = Unit(name="bag")
        s.add_all([kg, piece, bag])
        await s.flush()

        product = Product(name="Ghee 500 gm", sku="GHEE-500", main_unit_id=kg.id)
        outlet = Maintains(name="Zirabo Outlet", type="Outlet")
        other = Maintains(name="Savar Outlet", type="Outlet")
        s.add_all([product, outlet, other])
        await s.flush()

        s.add_all([UnitInProduct(product_id=product.id, unit_id=u.id) for u in (kg, piece, bag)])

        jan = StockBatch(product_id=product.id, maintains_id=outlet.id, batch_number="B-1", created_at=JAN)
        feb = StockBatch(product_id=product.id, maintains_id=outlet.id, batch_number="B-2", created_at=FEB)
        mar = StockBatch(product_id=product.id, maintains_id=outlet.id, batch_number="B-3", created_at=MAR, deleted=True)
        apr = StockBatch(product_id=product.id, maintains_id=other.id, batch_number="B-4", created_at=APR)
        s.add_all([jan, feb, mar, apr])
        await s.flush()

        def line(batch, maintains, unit, price, qty, at):
            return Stock(
                stock_batch_id=batch.id if batch is not None else None,
                product_id=product.id,
                maintains_id=maintains.id,
                unit_id=unit.id,
                price_per_quantity=price,
                quantity=qty,
                created_at=at,
                updated_at=at,
            )

        s.add_all(
            [
                line(jan, outlet, kg, 10, 5, JAN),
                line(jan, outlet, piece, 2, 20, JAN.replace(minute=1)),
                line(feb, outlet, kg, 15, 3, FEB),
                line(mar, outlet, kg, 99, 1, MAR),
                line(apr, other, kg, 50, 1, APR),
            ]
        )

        placed = DeliveryHistory(
            status="Order-Placed",
            maintains_id=outlet.id,
            product_id=product.id,
            unit_id=kg.id,
            price_per_quantity=15,
            created_at=FEB,
            updated_at=FEB,
        )
        shipped = DeliveryHistory(
            status="Order-Shipped",
            maintains_id=outlet.id,
            product_id=product.id,
            unit_id=kg.id,
            price_per_quantity=15,
            created_at=FEB,
            updated_at=FEB,
        )
        elsewhere = DeliveryHistory(
            status="Order-Placed",
            maintains_id=other.id,
            product_id=product.id,
            unit_id=kg.id,
            price_per_quantity=50,
            created_at=APR,
            updated_at=APR,
        )
        s.add_all([placed, shipped, elsewhere])
        await s.commit()

        return SimpleNamespace(
            product_id=product.id,
            outlet_id=outlet.id,
            other_outlet_id=other.id,
            kg_id=kg.id,
            piece_id=piece.id,
            bag_id=bag.id,
            placed_id=placed.id,
            shipped_id=shipped.id,
            elsewhere_id=elsewhere.id,
            line=line,
            outlet=outlet,
            kg=kg,
        )
