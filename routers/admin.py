from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database.connection import get_db
from core.identity import Caller, CallerRole, require_roles
from services.product import get_pending_cascades, reconcile_pending_cascades
from schemas.product import ProductCascadeResponse, CascadeReconcileReport

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_roles(CallerRole.ADMIN)

@router.get("/cascades", response_model=List[ProductCascadeResponse])
def list_pending_cascades(
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List product cascades still waiting to be applied"""
    return get_pending_cascades(db)

@router.post("/cascades/reconcile", response_model=CascadeReconcileReport)
def reconcile_cascades(
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Retry every pending product cascade"""
    logger.info(f"Cascade reconciliation requested by admin {caller.id}")
    return reconcile_pending_cascades(db)
