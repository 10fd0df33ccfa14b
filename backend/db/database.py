from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings

DATABASE_URL = settings.database_url


class Base(DeclarativeBase):
    pass


engine = create_async_engine(DATABASE_URL, echo=settings.database_echo)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


# Register every mapped table on Base.metadata and re-export the models.
from db.unit import Unit  # noqa: E402,F401
from db.product import Product, UnitInProduct  # noqa: E402,F401
from db.maintains import Maintains  # noqa: E402,F401
from db.stock import StockBatch, Stock, DailyStockRecord  # noqa: E402,F401
from db.delivery_history import DeliveryHistory, DELIVERY_STATUSES  # noqa: E402,F401
from db.sale import Sale  # noqa: E402,F401
