import uuid
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

DELIVERY_STATUSES = (
    "Order-Placed",
    "Order-Shipped",
    "Order-Completed",
    "Order-Cancelled",
    "Return-Placed",
    "Return-Completed",
    "Return-Cancelled",
    "Reset-Requested",
    "Reset-Completed",
)


class DeliveryHistory(Base):
    """A tracked order/delivery of a product to an outlet."""

    __tablename__ = "delivery_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(Text, nullable=True, default="Order-Shipped", index=True)

    maintains_id = Column(UUID(as_uuid=True), ForeignKey("maintains.id"), nullable=False, index=True)
    product_id = Column(UUID(as_uuid=True), ForeignKey("product.id", ondelete="SET NULL"), nullable=True, index=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey("units.id"), nullable=False)

    price_per_quantity = Column(Numeric(scale=2), nullable=False, default=0)
    sent_quantity = Column(Numeric(scale=3), nullable=False, default=0)
    received_quantity = Column(Numeric(scale=3), nullable=False, default=0)
    ordered_quantity = Column(Numeric(scale=3), nullable=False, default=0)

    # [{"unitId": ..., "pricePerQuantity": ...}, ...] snapshot of the latest batch prices
    latest_unit_price_data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    maintains = relationship("Maintains")
    product = relationship("Product")
