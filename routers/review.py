from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from core.identity import Caller, get_current_caller
from services.review import ReviewService
from schemas.review import ReviewCreate, ReviewRespond, ReviewResponse, PaginatedReviews

router = APIRouter()

# Public endpoints
@router.get("/shop/{shop_id}", response_model=PaginatedReviews)
def get_shop_reviews(
    shop_id: str,
    page: int = Query(1),
    limit: int = Query(10),
    db: Session = Depends(get_db)
):
    """Get paginated reviews for a shop"""
    return ReviewService.get_shop_reviews(db=db, shop_id=shop_id, page=page, limit=limit)

# Authenticated endpoints
@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: ReviewCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Submit a review for a shop"""
    return ReviewService.create_review(
        db=db,
        shop_id=review_data.shop_id,
        author_id=caller.id,
        rating=review_data.rating,
        comment=review_data.comment
    )

@router.get("/my-reviews", response_model=PaginatedReviews)
def get_my_reviews(
    page: int = Query(1),
    limit: int = Query(10),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Get the caller's review history"""
    return ReviewService.get_author_reviews(db=db, author_id=caller.id, page=page, limit=limit)

@router.put("/{review_id}/respond", response_model=ReviewResponse)
def respond_to_review(
    review_id: str,
    response_data: ReviewRespond,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Respond to a review on your shop"""
    return ReviewService.respond(db=db, review_id=review_id, caller_id=caller.id, text=response_data.response)

@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Delete a review (author or administrator)"""
    ReviewService.delete_review(db=db, review_id=review_id, caller_id=caller.id, is_admin=caller.is_admin)
