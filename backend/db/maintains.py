import uuid
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base


class Maintains(Base):
    """A location holding its own stock: an outlet or a production house."""

    __tablename__ = "maintains"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True, default="")
    type = Column(Text, nullable=False, default="Outlet")  # 'Outlet' | 'Production'
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
