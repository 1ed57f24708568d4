import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from database.base import Base

CASCADE_PENDING = "pending"
CASCADE_COMPLETED = "completed"

class ProductCascade(Base):
    """A product deactivation owed to a soft-deleted shop that has not landed yet."""
    __tablename__ = "product_cascades"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    shop_id = Column(String, ForeignKey("shops.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=CASCADE_PENDING, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<ProductCascade(shop_id={self.shop_id}, status={self.status}, attempts={self.attempts})>"
