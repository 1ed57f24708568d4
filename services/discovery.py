"""
Discovery queries over active shops.

Filters are conjunctive: active, within the search radius (when a center
is given), in the category (when given) and at or above the minimum
average rating (when positive). Results are ordered by average rating,
then newest first, then id so repeated queries paginate identically.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ValidationError
from core.response import page_count
from models.shop import Shop
from services.spatial import find_within_radius

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    results: List[Shop] = field(default_factory=list)
    total_count: int = 0
    current_page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return page_count(self.total_count, self.limit)


def _validate_search(radius_km: float, min_rating: float, page: int, limit: int):
    if radius_km is None or not math.isfinite(radius_km) or radius_km < 0:
        raise ValidationError("Radius must be a non-negative number of kilometers", field="radius")
    if min_rating is None or not math.isfinite(min_rating) or not 0 <= min_rating <= 5:
        raise ValidationError("Minimum rating must be between 0 and 5", field="min_rating")
    if page < 1:
        raise ValidationError("Page must be a positive integer", field="page")
    if not 1 <= limit <= settings.SEARCH_MAX_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {settings.SEARCH_MAX_LIMIT}", field="limit")


def search_shops(
    db: Session,
    center: Optional[Sequence[float]] = None,
    radius_km: Optional[float] = None,
    category_id: Optional[str] = None,
    min_rating: float = 0,
    page: int = 1,
    limit: Optional[int] = None
) -> SearchResult:
    """Find active shops, optionally within radius_km of center (lon, lat)."""
    if radius_km is None:
        radius_km = settings.DEFAULT_SEARCH_RADIUS_KM
    if limit is None:
        limit = settings.SEARCH_DEFAULT_LIMIT
    _validate_search(radius_km, min_rating, page, limit)

    query = db.query(Shop).filter(Shop.is_active == True)

    if category_id:
        query = query.filter(Shop.category_id == category_id)

    if min_rating > 0:
        query = query.filter(Shop.average_rating >= min_rating)

    query = query.order_by(
        Shop.average_rating.desc(),
        Shop.created_at.desc(),
        Shop.id
    )

    offset = (page - 1) * limit

    if center is None:
        total = query.count()
        # Pages past the end never reach the windowed query
        results = query.offset(offset).limit(limit).all() if offset < total else []
    else:
        predicate = find_within_radius(center, radius_km)
        prefilter = predicate.sql_prefilter(Shop.longitude, Shop.latitude)
        if prefilter is not None:
            query = query.filter(prefilter)

        # The box only narrows; the exact cap test decides membership
        matched = [
            shop for shop in query.all()
            if predicate.contains(shop.longitude, shop.latitude)
        ]
        total = len(matched)
        results = matched[offset:offset + limit]

    logger.debug(
        f"Shop search center={center} radius={radius_km}km category={category_id} "
        f"min_rating={min_rating} page={page} limit={limit}: {total} matches"
    )

    return SearchResult(results=results, total_count=total, current_page=page, limit=limit)
