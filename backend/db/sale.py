import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Numeric
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base


class Sale(Base):
    __tablename__ = "sale"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id"), nullable=True, index=True)
    maintains_id = Column(UUID(as_uuid=True), ForeignKey("maintains.id"), nullable=False, index=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id"), nullable=True)

    sale_quantity = Column(Numeric(scale=3), nullable=True)
    # price of the product's main unit at sale time, backfilled for old rows
    main_unit_price = Column(Numeric, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
