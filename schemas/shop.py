from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from schemas.review import PaginatedReviews
from schemas.product import ProductResponse

# Geographic point, GeoJSON style: [longitude, latitude]
class GeoPoint(BaseModel):
    type: str = "Point"
    coordinates: List[float]

class ShopContact(BaseModel):
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=200)

# Base Shop Schema
class ShopBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=200)
    contact: Optional[ShopContact] = None
    business_hours: Optional[Dict[str, Any]] = None

# Shop Creation Schema
class ShopCreate(ShopBase):
    category_id: Optional[str] = None
    # Checked by the shop service, which owns the coordinate rules
    location: Optional[GeoPoint] = None
    logo_url: Optional[str] = Field(None, max_length=500)

# Shop Update Schema
class ShopUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=200)
    contact: Optional[ShopContact] = None
    business_hours: Optional[Dict[str, Any]] = None
    logo_url: Optional[str] = Field(None, max_length=500)

    class Config:
        # Fields outside the update allow-list are accepted and dropped by the service
        extra = "allow"

# Shop Response Schema
class ShopResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    description: Optional[str]
    category_id: Optional[str]
    location: GeoPoint
    address: Optional[str]
    contact: Optional[Dict[str, Any]]
    business_hours: Optional[Dict[str, Any]]
    logo_url: Optional[str]
    average_rating: float
    rating_count: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True

# Discovery results
class ShopSearchResponse(BaseModel):
    results: List[ShopResponse]
    total_count: int
    current_page: int
    total_pages: int

# Shop with its catalogue and reviews
class ShopDetails(BaseModel):
    shop: ShopResponse
    products: List[ProductResponse]
    reviews: PaginatedReviews
