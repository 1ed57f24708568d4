"""
Test Suite Configuration
"""
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.connection import create_tables, get_db
from main import app
from models.product import Product
from schemas.shop import ShopCreate, GeoPoint
from services.shop import create_shop

BANGALORE = (77.5946, 12.9716)


@pytest.fixture
def engine():
    """In-memory database shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_shop(db):
    """Create active shops; created_at steps forward one second per shop"""
    sequence = count()
    base_time = datetime(2024, 1, 1, 12, 0, 0)

    def factory(
        owner_id="owner-1",
        name=None,
        coordinates=BANGALORE,
        category_id=None,
        created_at=None,
    ):
        n = next(sequence)
        shop = create_shop(
            db=db,
            shop_data=ShopCreate(
                name=name or f"Shop {n}",
                category_id=category_id,
                location=GeoPoint(coordinates=list(coordinates)),
            ),
            owner_id=owner_id,
        )
        shop.created_at = created_at or base_time + timedelta(seconds=n)
        db.commit()
        db.refresh(shop)
        return shop

    return factory


@pytest.fixture
def make_product(db):
    def factory(shop_id, name="Widget"):
        product = Product(shop_id=shop_id, name=name, is_active=True)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return factory


@pytest.fixture
def client(session_factory):
    """API client wired to the test database"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_caller():
    """Identity headers the gateway would forward"""
    def headers(user_id, role="CUSTOMER"):
        return {"X-User-Id": user_id, "X-User-Role": role}

    return headers
