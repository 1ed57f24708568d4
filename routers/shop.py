from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.connection import get_db
from core.identity import Caller, CallerRole, get_current_caller, require_roles
from services.discovery import search_shops
from services.shop import (
    create_shop,
    get_shops_by_owner_id,
    get_shop_details,
    update_shop,
    soft_delete_shop
)
from services.spatial import optional_center
from schemas.shop import ShopCreate, ShopUpdate, ShopResponse, ShopSearchResponse, ShopDetails
from schemas.product import ProductResponse

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/search", response_model=ShopSearchResponse)
def search(
    lat: Optional[float] = Query(None, description="Latitude of the search center"),
    lng: Optional[float] = Query(None, description="Longitude of the search center"),
    radius: Optional[float] = Query(None, description="Search radius in kilometers"),
    category: Optional[str] = Query(None, description="Category identifier"),
    min_rating: float = Query(0, description="Minimum average rating"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Search active shops by location, category and rating (public endpoint)
    """
    result = search_shops(
        db=db,
        center=optional_center(lng, lat),
        radius_km=radius,
        category_id=category,
        min_rating=min_rating,
        page=page,
        limit=limit
    )
    return ShopSearchResponse(
        results=[ShopResponse.model_validate(shop) for shop in result.results],
        total_count=result.total_count,
        current_page=result.current_page,
        total_pages=result.total_pages
    )

@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
def create(
    shop_data: ShopCreate,
    caller: Caller = Depends(require_roles(CallerRole.SHOP_OWNER, CallerRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """
    Create a new shop owned by the caller
    """
    shop = create_shop(db=db, shop_data=shop_data, owner_id=caller.id)
    return ShopResponse.model_validate(shop)

@router.get("/mine", response_model=List[ShopResponse])
def get_my_shops(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """
    Get all active shops owned by the caller
    """
    shops = get_shops_by_owner_id(db=db, owner_id=caller.id)
    return [ShopResponse.model_validate(shop) for shop in shops]

@router.get("/{shop_id}", response_model=ShopDetails)
def get_shop(
    shop_id: str,
    page: int = Query(1, description="Review page"),
    limit: int = Query(10, description="Reviews per page"),
    db: Session = Depends(get_db)
):
    """
    Get a shop with its products and reviews (public endpoint)
    """
    details = get_shop_details(db=db, shop_id=shop_id, review_page=page, review_limit=limit)
    return ShopDetails(
        shop=ShopResponse.model_validate(details["shop"]),
        products=[ProductResponse.model_validate(product) for product in details["products"]],
        reviews=details["reviews"]
    )

@router.put("/{shop_id}", response_model=ShopResponse)
def update(
    shop_id: str,
    shop_data: ShopUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """
    Update the caller's own shop
    """
    shop = update_shop(
        db=db,
        shop_id=shop_id,
        caller_id=caller.id,
        fields=shop_data.model_dump(exclude_unset=True)
    )
    return ShopResponse.model_validate(shop)

@router.delete("/{shop_id}")
def delete(
    shop_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """
    Delete the caller's own shop (soft delete) and deactivate its products
    """
    soft_delete_shop(db=db, shop_id=shop_id, caller_id=caller.id)
    logger.info(f"Shop {shop_id} deleted by {caller.id}")
    return {"message": "Shop deleted successfully"}
