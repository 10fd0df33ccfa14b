import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class UnitInProduct(Base):
    """Association between a product and each unit it can be tracked in."""

    __tablename__ = "unit_in_product"

    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id"), primary_key=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id", ondelete="CASCADE"), primary_key=True)


class Product(Base):
    __tablename__ = "product"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=True, unique=True)
    main_unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    main_unit = relationship("Unit", foreign_keys=[main_unit_id])
    units = relationship("Unit", secondary="unit_in_product", viewonly=True)
