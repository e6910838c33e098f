"""
Shared fixtures for the cart service tests.

Tests run against a real SQLAlchemy schema on in-memory SQLite (StaticPool,
so every session shares one connection) and an in-memory stand-in for the
Redis cart lock.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from emporium.api.routers.carts import get_lock_service
from emporium.data.database import Base, get_db, init_db
from emporium.data.models.product import ProductModel
from emporium.main import create_app
from emporium.repos.product_repo import ProductRepo
from emporium.services.cart_service import CartService
from emporium.services.lock_service import cart_lock_key


class InMemoryLockService:
    """Same contract as LockService, without Redis."""

    def __init__(self):
        self.locks = {}

    def acquire_cart_lock(self, user_id, token: str, ttl: int) -> bool:
        key = cart_lock_key(user_id)
        if key in self.locks:
            return False
        self.locks[key] = token
        return True

    def release_cart_lock(self, user_id, token: str) -> bool:
        key = cart_lock_key(user_id)
        if self.locks.get(key) != token:
            return False
        del self.locks[key]
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def service(db, lock_service):
    return CartService(db=db, lock_service=lock_service)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def make_product(db):
    """Factory inserting a committed product; returns its id."""

    def _make(available=10, total=None, price="100.00", title="Test Product", image_url=None):
        product = ProductRepo(db).create(
            ProductModel(
                title=title,
                price=Decimal(price),
                image_url=image_url,
                category="electronics",
                inventory_total=available if total is None else total,
                inventory_available=available,
            )
        )
        db.commit()
        return product.id

    return _make


@pytest.fixture
def stock(db):
    """Fresh (inventory_available, inventory_total) read for a product."""

    def _stock(product_id):
        db.expire_all()
        product = db.get(ProductModel, product_id)
        return product.inventory_available, product.inventory_total

    return _stock


@pytest.fixture
def test_client(session_factory, lock_service):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    # no context manager, so the lifespan hook (init_db on the real database) never runs
    return TestClient(app)
