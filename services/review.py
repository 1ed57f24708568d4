from typing import Optional
from datetime import datetime
import logging

from sqlalchemy import desc
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.response import page_count
from models.review import Review
from models.shop import Shop
from schemas.review import PaginatedReviews, ReviewResponse
from services.ledger import LedgerDelta, RatingLedger

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """
    Review lifecycle: NONE -> ACTIVE -> DELETED.

    Creation and soft deletion each commit together with their rating
    ledger delta, so a shop's rating_sum / rating_count always match its
    active reviews.
    """

    ledger = RatingLedger()

    @staticmethod
    def create_review(
        db: Session,
        shop_id: str,
        author_id: str,
        rating: int,
        comment: Optional[str] = None
    ) -> Review:
        """Create an active review and count it in the shop's ledger"""

        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(
                f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}",
                field="rating"
            )

        def unit_of_work() -> Review:
            shop = db.query(Shop).filter(Shop.id == shop_id, Shop.is_active == True).first()
            if not shop:
                raise NotFoundError("Shop", shop_id)
            if shop.owner_id == author_id:
                logger.warning(f"Owner {author_id} attempted to review own shop {shop_id}")
                raise AuthorizationError("You cannot review your own shop")

            review = Review(
                shop_id=shop_id,
                author_id=author_id,
                rating=rating,
                comment=comment,
                is_active=True
            )
            db.add(review)
            db.flush()

            ReviewService.ledger.adjust(db, shop_id, LedgerDelta.review_created(rating))
            return review

        review = ReviewService.ledger.run(db, unit_of_work, description=f"review creation on shop {shop_id}")
        db.refresh(review)

        logger.info(f"Review {review.id} ({rating} stars) created on shop {shop_id} by {author_id}")
        return review

    @staticmethod
    def respond(db: Session, review_id: str, caller_id: str, text: str) -> Review:
        """Set or overwrite the shop owner's response to a review"""

        review = db.query(Review).join(Shop, Review.shop_id == Shop.id).filter(
            Review.id == review_id,
            Review.is_active == True,
            Shop.is_active == True
        ).first()

        if not review:
            raise NotFoundError("Review", review_id)

        if review.shop.owner_id != caller_id:
            logger.warning(f"Caller {caller_id} attempted to respond to review {review_id} on a foreign shop")
            raise AuthorizationError("Only the shop owner can respond to this review")

        review.response = text
        review.responded_at = datetime.utcnow()
        review.updated_at = datetime.utcnow()

        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(review)

        logger.info(f"Owner {caller_id} responded to review {review_id}")
        return review

    @staticmethod
    def delete_review(db: Session, review_id: str, caller_id: str, is_admin: bool = False) -> Review:
        """Soft delete a review and reverse its ledger contribution"""

        def unit_of_work() -> Review:
            review = db.query(Review).filter(
                Review.id == review_id,
                Review.is_active == True
            ).first()

            if not review:
                raise NotFoundError("Review", review_id)

            if review.author_id != caller_id and not is_admin:
                logger.warning(f"Caller {caller_id} attempted to delete review {review_id} by {review.author_id}")
                raise AuthorizationError("Only the author or an administrator can delete this review")

            # Conditional flip: of two racing deletes only one may reverse the rating
            flipped = db.query(Review).filter(
                Review.id == review_id,
                Review.is_active == True
            ).update(
                {"is_active": False, "updated_at": datetime.utcnow()},
                synchronize_session=False
            )
            if flipped == 0:
                raise NotFoundError("Review", review_id)

            ReviewService.ledger.adjust(db, review.shop_id, LedgerDelta.review_removed(review.rating))
            return review

        review = ReviewService.ledger.run(db, unit_of_work, description=f"deletion of review {review_id}")
        db.refresh(review)

        logger.info(f"Review {review_id} deleted by {caller_id}")
        return review

    @staticmethod
    def get_shop_reviews(db: Session, shop_id: str, page: int = 1, limit: int = 10) -> PaginatedReviews:
        """Get paginated active reviews for an active shop"""

        ReviewService._check_paging(page, limit)

        shop_exists = db.query(Shop.id).filter(Shop.id == shop_id, Shop.is_active == True).first()
        if not shop_exists:
            raise NotFoundError("Shop", shop_id)

        query = db.query(Review).filter(Review.shop_id == shop_id, Review.is_active == True)
        return ReviewService._paginate(query, page, limit)

    @staticmethod
    def get_author_reviews(db: Session, author_id: str, page: int = 1, limit: int = 10) -> PaginatedReviews:
        """Get the caller's own active reviews"""

        ReviewService._check_paging(page, limit)
        query = db.query(Review).filter(Review.author_id == author_id, Review.is_active == True)
        return ReviewService._paginate(query, page, limit)

    @staticmethod
    def _check_paging(page: int, limit: int):
        if page < 1:
            raise ValidationError("Page must be a positive integer", field="page")
        if not 1 <= limit <= settings.REVIEW_PAGE_MAX_LIMIT:
            raise ValidationError(
                f"Limit must be between 1 and {settings.REVIEW_PAGE_MAX_LIMIT}",
                field="limit"
            )

    @staticmethod
    def _paginate(query, page: int, limit: int) -> PaginatedReviews:
        total = query.count()
        offset = (page - 1) * limit
        reviews = []
        if offset < total:
            reviews = query.order_by(
                desc(Review.created_at), Review.id
            ).offset(offset).limit(limit).all()

        pages = page_count(total, limit)
        return PaginatedReviews(
            reviews=[ReviewResponse.model_validate(review) for review in reviews],
            total=total,
            page=page,
            limit=limit,
            total_pages=pages,
            has_next=page < pages,
            has_prev=page > 1
        )
