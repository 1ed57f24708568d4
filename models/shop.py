import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, Integer, JSON, Index, case, cast
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship
from database.base import Base


def derive_average(rating_sum, rating_count) -> float:
    """Average rating from the ledger pair; 0 when nothing is counted."""
    if not rating_count:
        return 0.0
    return rating_sum / rating_count


class Shop(Base):
    __tablename__ = "shops"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(String, nullable=True, index=True)
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)
    address = Column(String, nullable=True)
    contact = Column(JSON, nullable=True)  # phone, email, website
    business_hours = Column(JSON, nullable=True)
    logo_url = Column(String, nullable=True)
    # Ledger state, only written through RatingLedger.adjust
    rating_sum = Column(Integer, nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reviews = relationship("Review", back_populates="shop")
    products = relationship("Product", back_populates="shop")

    __table_args__ = (
        Index("ix_shops_coordinates", "latitude", "longitude"),
    )

    def __repr__(self):
        return f"<Shop(id={self.id}, name={self.name}, is_active={self.is_active})>"

    @property
    def location(self):
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    @hybrid_property
    def average_rating(self) -> float:
        return derive_average(self.rating_sum, self.rating_count)

    @average_rating.inplace.expression
    @classmethod
    def _average_rating_expression(cls):
        return case(
            (cls.rating_count > 0, cast(cls.rating_sum, Float) / cls.rating_count),
            else_=0.0
        )
