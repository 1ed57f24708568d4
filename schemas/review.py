from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

# Review Schemas
class ReviewCreate(BaseModel):
    shop_id: str
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, max_length=500, description="Optional review text")

class ReviewRespond(BaseModel):
    response: str = Field(..., min_length=1, max_length=500, description="Shop owner's reply")

class ReviewResponse(BaseModel):
    id: str
    shop_id: str
    author_id: str
    rating: int
    comment: Optional[str]
    response: Optional[str]
    responded_at: Optional[datetime]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# Paginated responses
class PaginatedReviews(BaseModel):
    reviews: List[ReviewResponse]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool
