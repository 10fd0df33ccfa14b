import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class StockBatch(Base):
    __tablename__ = "stock_batch"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id", ondelete="SET NULL"), nullable=True, index=True)
    maintains_id = Column(UUID(as_uuid=True), ForeignKey("maintains.id"), nullable=False, index=True)
    batch_number = Column(String, nullable=False)
    production_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    stocks = relationship("Stock", back_populates="stock_batch")


class Stock(Base):
    """One unit line of a batch: quantity on hand and its price per quantity."""

    __tablename__ = "stock"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # NULL for stock recorded before batches existed
    stock_batch_id = Column(UUID(as_uuid=True), ForeignKey("stock_batch.id"), nullable=True, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id"), nullable=False, index=True)
    maintains_id = Column(UUID(as_uuid=True), ForeignKey("maintains.id"), nullable=False, index=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id"), nullable=False)

    price_per_quantity = Column(Numeric(scale=2), nullable=False)
    quantity = Column(Numeric(scale=3), nullable=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now())

    stock_batch = relationship("StockBatch", back_populates="stocks")


class DailyStockRecord(Base):
    """End-of-day copy of a stock row."""

    __tablename__ = "daily_stock_record"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    maintains_id = Column(UUID(as_uuid=True), ForeignKey("maintains.id"), nullable=False, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id"), nullable=False, index=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id"), nullable=False)

    quantity = Column(Numeric(scale=3), nullable=False)
    price_per_quantity = Column(Numeric(scale=2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
