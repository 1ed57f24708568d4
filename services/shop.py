from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Callable, Dict, List
from datetime import datetime
import logging
import uuid

from core.exceptions import NotFoundError, ValidationError
from models.shop import Shop
from schemas.shop import ShopCreate
from services.product import deactivate_all_for_shop, get_active_products_for_shop, queue_cascade
from services.review import ReviewService
from services.spatial import validate_coordinates

logger = logging.getLogger(__name__)

# Owners may change only these fields; anything else in an update is dropped
UPDATABLE_FIELDS = ("name", "description", "address", "contact", "business_hours", "logo_url")

def parse_location(location: Any):
    """Turn a GeoPoint (or dict / sequence) into a validated (longitude, latitude)."""
    if location is None:
        raise ValidationError("Valid location coordinates are required", field="location")

    if hasattr(location, "coordinates"):
        coordinates = location.coordinates
    elif isinstance(location, dict):
        coordinates = location.get("coordinates")
    else:
        coordinates = location

    if coordinates is None or isinstance(coordinates, (str, bytes)) or len(coordinates) != 2:
        raise ValidationError("Location needs exactly two coordinates [longitude, latitude]", field="location")

    return validate_coordinates(coordinates[0], coordinates[1])

def create_shop(db: Session, shop_data: ShopCreate, owner_id: str) -> Shop:
    """Create a new shop with an empty rating ledger."""
    longitude, latitude = parse_location(shop_data.location)

    try:
        now = datetime.utcnow()
        db_shop = Shop(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=shop_data.name,
            description=shop_data.description,
            category_id=shop_data.category_id,
            longitude=longitude,
            latitude=latitude,
            address=shop_data.address,
            contact=shop_data.contact.model_dump(exclude_none=True) if shop_data.contact else None,
            business_hours=shop_data.business_hours,
            logo_url=shop_data.logo_url,
            rating_sum=0,
            rating_count=0,
            is_active=True,
            created_at=now,
            updated_at=now
        )
        
        db.add(db_shop)
        db.commit()
        db.refresh(db_shop)
        
        logger.info(f"Shop created successfully: {db_shop.id} ({db_shop.name}) by owner {owner_id}")
        return db_shop
        
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error creating shop for owner {owner_id}: {str(e)}")
        raise

def get_shop(db: Session, shop_id: str) -> Shop:
    """Get an active shop by ID."""
    shop = db.query(Shop).filter(Shop.id == shop_id, Shop.is_active == True).first()
    if not shop:
        raise NotFoundError("Shop", shop_id)
    return shop

def get_shops_by_owner_id(db: Session, owner_id: str) -> List[Shop]:
    """All active shops of an owner, newest first."""
    return db.query(Shop).filter(
        Shop.owner_id == owner_id,
        Shop.is_active == True
    ).order_by(Shop.created_at.desc(), Shop.id).all()

def _get_owned_shop(db: Session, shop_id: str, caller_id: str) -> Shop:
    # Missing, inactive and foreign shops all fail the same way
    shop = db.query(Shop).filter(
        Shop.id == shop_id,
        Shop.owner_id == caller_id,
        Shop.is_active == True
    ).first()
    if not shop:
        logger.warning(f"Caller {caller_id} has no active shop {shop_id}")
        raise NotFoundError("Shop", shop_id)
    return shop

def update_shop(db: Session, shop_id: str, caller_id: str, fields: Dict[str, Any]) -> Shop:
    """Update the allow-listed fields of a caller's own shop."""
    db_shop = _get_owned_shop(db, shop_id, caller_id)

    update_data = {field: value for field, value in fields.items() if field in UPDATABLE_FIELDS}
    ignored = sorted(set(fields) - set(update_data))
    if ignored:
        logger.info(f"Ignoring non-updatable shop fields {ignored} for shop {shop_id}")

    if "name" in update_data and not update_data["name"]:
        raise ValidationError("Shop name cannot be empty", field="name")

    try:
        for field, value in update_data.items():
            setattr(db_shop, field, value)
        
        db_shop.updated_at = datetime.utcnow()
        
        db.commit()
        db.refresh(db_shop)
        
        logger.info(f"Shop updated successfully: {shop_id}")
        return db_shop
        
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating shop {shop_id}: {str(e)}")
        raise

def soft_delete_shop(
    db: Session,
    shop_id: str,
    caller_id: str,
    deactivate_products: Callable[[Session, str], int] = deactivate_all_for_shop
) -> Shop:
    """
    Soft delete a caller's own shop, then deactivate its products.

    The shop flip is committed first and is authoritative. A failed product
    cascade does not fail the deletion; it is queued for reconciliation.
    The rating ledger is left untouched so past reviews stay auditable.
    """
    db_shop = _get_owned_shop(db, shop_id, caller_id)

    try:
        db_shop.is_active = False
        db_shop.updated_at = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting shop {shop_id}: {str(e)}")
        raise

    logger.info(f"Shop deleted successfully: {shop_id}")

    try:
        deactivate_products(db, shop_id)
    except SQLAlchemyError as e:
        db.rollback()
        queue_cascade(db, shop_id, e)

    db.refresh(db_shop)
    return db_shop

def get_shop_details(
    db: Session,
    shop_id: str,
    review_page: int = 1,
    review_limit: int = 10
) -> Dict[str, Any]:
    """An active shop with its active products and a page of its reviews."""
    shop = get_shop(db, shop_id)
    return {
        "shop": shop,
        "products": get_active_products_for_shop(db, shop_id),
        "reviews": ReviewService.get_shop_reviews(db, shop_id, page=review_page, limit=review_limit)
    }
