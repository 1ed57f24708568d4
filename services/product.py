from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import Callable, Dict, List
import logging

from models.product import Product
from models.cascade import ProductCascade, CASCADE_PENDING, CASCADE_COMPLETED

logger = logging.getLogger(__name__)

def deactivate_all_for_shop(db: Session, shop_id: str) -> int:
    """Deactivate every product of a shop. Idempotent; returns rows changed."""
    try:
        changed = db.query(Product).filter(
            Product.shop_id == shop_id,
            Product.is_active == True
        ).update(
            {"is_active": False, "updated_at": datetime.utcnow()},
            synchronize_session=False
        )
        db.commit()
        logger.info(f"Deactivated {changed} products for shop {shop_id}")
        return changed
    except SQLAlchemyError:
        db.rollback()
        raise

def get_active_products_for_shop(db: Session, shop_id: str) -> List[Product]:
    """Active products of a shop, newest first"""
    return db.query(Product).filter(
        Product.shop_id == shop_id,
        Product.is_active == True
    ).order_by(Product.created_at.desc(), Product.id).all()

def queue_cascade(db: Session, shop_id: str, error: Exception) -> ProductCascade:
    """Record a product cascade that still has to be applied."""
    cascade = db.query(ProductCascade).filter(
        ProductCascade.shop_id == shop_id,
        ProductCascade.status == CASCADE_PENDING
    ).first()
    if not cascade:
        cascade = ProductCascade(shop_id=shop_id, status=CASCADE_PENDING, attempts=0)
        db.add(cascade)

    cascade.attempts += 1
    cascade.last_error = str(error)
    db.commit()
    db.refresh(cascade)

    logger.error(f"Product cascade for shop {shop_id} queued for reconciliation: {str(error)}")
    return cascade

def get_pending_cascades(db: Session) -> List[ProductCascade]:
    return db.query(ProductCascade).filter(
        ProductCascade.status == CASCADE_PENDING
    ).order_by(ProductCascade.created_at).all()

def reconcile_pending_cascades(
    db: Session,
    deactivate: Callable[[Session, str], int] = deactivate_all_for_shop
) -> Dict[str, int]:
    """Retry every pending product cascade once."""
    report = {"attempted": 0, "completed": 0, "failed": 0}

    for cascade in get_pending_cascades(db):
        report["attempted"] += 1
        try:
            deactivate(db, cascade.shop_id)
        except SQLAlchemyError as e:
            db.rollback()
            cascade.attempts += 1
            cascade.last_error = str(e)
            db.commit()
            report["failed"] += 1
            logger.error(f"Cascade retry failed for shop {cascade.shop_id}: {str(e)}")
            continue

        cascade.attempts += 1
        cascade.status = CASCADE_COMPLETED
        cascade.last_error = None
        cascade.completed_at = datetime.utcnow()
        db.commit()
        report["completed"] += 1

    logger.info(
        f"Cascade reconciliation: {report['attempted']} attempted, "
        f"{report['completed']} completed, {report['failed']} failed"
    )
    return report
