"""
Unit Tests - Discovery Query Engine
"""
import math
from datetime import datetime

import pytest

from core.exceptions import ValidationError
from services.discovery import search_shops
from services.ledger import LedgerDelta, RatingLedger
from services.shop import soft_delete_shop


def _rate(db, shop, rating_sum, rating_count):
    RatingLedger().adjust(db, shop.id, LedgerDelta(sum=rating_sum, count=rating_count))
    db.commit()
    db.refresh(shop)


class TestSpatialSearch:
    """Tests for radius filtering"""

    def test_bangalore_radius(self, db, make_shop):
        """Test a Bangalore shop is inside 10 km and outside 10 m"""
        shop = make_shop(coordinates=(77.5946, 12.9716))

        near = search_shops(db, center=(77.60, 12.97), radius_km=10)
        tiny = search_shops(db, center=(77.60, 12.97), radius_km=0.01)

        assert [found.id for found in near.results] == [shop.id]
        assert near.total_count == 1
        assert tiny.results == []
        assert tiny.total_count == 0

    def test_default_radius_is_ten_km(self, db, make_shop):
        """Test omitting the radius searches 10 km"""
        inside = make_shop(coordinates=(77.60, 13.05))   # ~8.9 km north
        make_shop(coordinates=(77.60, 13.08))            # ~12.2 km north

        result = search_shops(db, center=(77.60, 12.97))

        assert [found.id for found in result.results] == [inside.id]

    def test_no_center_is_global(self, db, make_shop):
        """Test a search without a center ignores distance"""
        make_shop(coordinates=(77.5946, 12.9716))
        make_shop(coordinates=(-0.1276, 51.5072))

        result = search_shops(db)

        assert result.total_count == 2

    def test_across_antimeridian(self, db, make_shop):
        """Test shops on the other side of the date line are found"""
        shop = make_shop(coordinates=(179.99, 0.0))

        result = search_shops(db, center=(-179.99, 0.0), radius_km=5)

        assert [found.id for found in result.results] == [shop.id]

    def test_near_pole(self, db, make_shop):
        """Test a cap over the pole matches across longitudes"""
        shop = make_shop(coordinates=(180.0, 89.99))

        result = search_shops(db, center=(0.0, 89.99), radius_km=5)

        assert [found.id for found in result.results] == [shop.id]

    def test_corner_of_bounding_box_excluded(self, db, make_shop):
        """Test a point inside the box but outside the cap is excluded"""
        make_shop(coordinates=(0.085, 0.085))   # ~13.4 km diagonal

        result = search_shops(db, center=(0.0, 0.0), radius_km=10)

        assert result.total_count == 0


class TestFilters:
    """Tests for category, rating and active filters"""

    def test_min_rating_boundary(self, db, make_shop):
        """Test 3.99 is excluded and exactly 4.0 is included"""
        below = make_shop(name="Below")
        exact = make_shop(name="Exact")
        _rate(db, below, 399, 100)
        _rate(db, exact, 8, 2)

        result = search_shops(db, min_rating=4.0)

        assert below.average_rating == pytest.approx(3.99)
        assert [found.id for found in result.results] == [exact.id]

    def test_min_rating_zero_keeps_unrated(self, db, make_shop):
        """Test shops without reviews appear when no minimum is set"""
        make_shop()

        assert search_shops(db, min_rating=0).total_count == 1

    def test_category_filter(self, db, make_shop):
        """Test category narrows results"""
        books = make_shop(category_id="books")
        make_shop(category_id="food")

        result = search_shops(db, category_id="books")

        assert [found.id for found in result.results] == [books.id]

    def test_inactive_shops_hidden(self, db, make_shop):
        """Test soft-deleted shops never appear"""
        shop = make_shop(owner_id="owner-1")
        soft_delete_shop(db, shop.id, "owner-1")

        assert search_shops(db, center=(77.60, 12.97), radius_km=10).total_count == 0
        assert search_shops(db).total_count == 0

    @pytest.mark.parametrize("kwargs", [
        {"page": 0},
        {"limit": 0},
        {"limit": 1000},
        {"radius_km": -5, "center": (0.0, 0.0)},
        {"min_rating": 6},
        {"min_rating": -1},
    ])
    def test_invalid_arguments(self, db, kwargs):
        """Test out-of-range paging and filters are validation errors"""
        with pytest.raises(ValidationError):
            search_shops(db, **kwargs)


class TestOrdering:
    """Tests for result ordering"""

    def test_rating_then_newest(self, db, make_shop):
        """Test higher averages first, newer first among ties"""
        old_top = make_shop(name="Old top")
        new_top = make_shop(name="New top")
        low = make_shop(name="Low")
        _rate(db, old_top, 5, 1)
        _rate(db, new_top, 10, 2)
        _rate(db, low, 2, 1)

        result = search_shops(db)

        assert [found.id for found in result.results] == [new_top.id, old_top.id, low.id]

    def test_id_breaks_full_ties(self, db, make_shop):
        """Test equal rating and timestamp fall back to id order"""
        same_time = datetime(2024, 6, 1)
        shops = [make_shop(created_at=same_time) for _ in range(5)]

        result = search_shops(db)

        assert [found.id for found in result.results] == sorted(shop.id for shop in shops)


class TestPagination:
    """Tests for windows and totals"""

    def test_page_beyond_end(self, db, make_shop):
        """Test page 3 of 10 results at limit 20 is empty with correct totals"""
        for _ in range(10):
            make_shop()

        result = search_shops(db, page=3, limit=20)

        assert result.results == []
        assert result.total_count == 10
        assert result.total_pages == 1
        assert result.current_page == 3

    def test_page_beyond_end_with_center(self, db, make_shop):
        """Test the spatial path reports the same totals"""
        for _ in range(10):
            make_shop()

        result = search_shops(db, center=(77.60, 12.97), radius_km=10, page=3, limit=20)

        assert result.results == []
        assert result.total_count == 10
        assert result.total_pages == 1

    @pytest.mark.parametrize("center", [None, (77.60, 12.97)])
    def test_far_page_is_empty(self, db, make_shop, center):
        """Test a page far past the end returns no results instead of failing"""
        make_shop()

        result = search_shops(db, center=center, radius_km=10, page=10**17, limit=100)

        assert result.results == []
        assert result.total_count == 1
        assert result.current_page == 10**17

    @pytest.mark.parametrize("center", [None, (77.60, 12.97)])
    @pytest.mark.parametrize("limit", [1, 3, 4, 13])
    def test_pages_concatenate_to_full_result(self, db, make_shop, center, limit):
        """Test walking every page yields each match exactly once, in order"""
        same_time = datetime(2024, 6, 1)
        shops = [make_shop(created_at=same_time if n % 2 else None) for n in range(13)]
        for n, shop in enumerate(shops):
            if n % 3 == 0:
                _rate(db, shop, 4, 1)

        full = search_shops(db, center=center, radius_km=10, limit=100)
        walked = []
        page = 1
        while True:
            window = search_shops(db, center=center, radius_km=10, page=page, limit=limit)
            if not window.results:
                break
            walked.extend(found.id for found in window.results)
            page += 1

        assert walked == [found.id for found in full.results]
        assert len(set(walked)) == 13
        assert page - 1 == math.ceil(13 / limit)
