import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from database.base import Base

class Review(Base):
    __tablename__ = "reviews"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    shop_id = Column(String, ForeignKey("shops.id"), nullable=False, index=True)
    author_id = Column(String, nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=True)
    response = Column(Text, nullable=True)  # Set by the shop owner
    responded_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)  # False once soft-deleted
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    shop = relationship("Shop", back_populates="reviews")

    def __repr__(self):
        return f"<Review(id={self.id}, author_id={self.author_id}, shop_id={self.shop_id}, rating={self.rating})>"
