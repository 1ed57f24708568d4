from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal

class ProductResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    description: Optional[str]
    price: Optional[Decimal]
    stock_quantity: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class ProductCascadeResponse(BaseModel):
    id: str
    shop_id: str
    status: str
    attempts: int
    last_error: Optional[str]
    created_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True

class CascadeReconcileReport(BaseModel):
    attempted: int
    completed: int
    failed: int
