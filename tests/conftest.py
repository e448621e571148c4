"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. External collaborators
(product-service, Redis checkout lock, Celery push) are replaced with
in-process fakes injected through the service constructors or FastAPI
dependency overrides.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret"

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.data.database import Base, get_db
from app.data import models  # noqa: F401
from app.data.models.order import OrderModel
from app.domain.schemas import ProductOut
from app.main import create_app


class FakeProductClient:
    """Catalog held in memory; prices can be changed between calls."""

    def __init__(self):
        self.products = {
            1: {"id": 1, "name": "Margherita Pizza", "price": "5.00", "stock": 50, "description": "Classic"},
            2: {"id": 2, "name": "Caesar Salad", "price": "20.00", "stock": 10},
            3: {"id": 3, "name": "Lemonade", "price": "3.25"},
        }
        self.down = False
        self.retries = []

    def set_price(self, product_id, price):
        self.products[product_id]["price"] = price

    def fetch_product(self, product_id, retry=True):
        self.retries.append(retry)
        if self.down:
            raise requests.ConnectionError("product-service unreachable")
        product = self.products.get(product_id)
        return ProductOut.model_validate(product) if product else None


class FakeLockService:
    def __init__(self):
        self.held = {}
        self.redis_down = False
        self.release_fails = False

    def acquire_checkout_lock(self, user_id, ttl=30):
        if self.redis_down:
            raise RedisConnectionError("redis unreachable")
        if user_id in self.held:
            return None
        self.held[user_id] = f"token-{user_id}"
        return self.held[user_id]

    def release_checkout_lock(self, user_id, token):
        if self.release_fails:
            raise RedisConnectionError("redis unreachable")
        return self.held.pop(user_id, None) == token


class RecordingEvents:
    def __init__(self):
        self.events = []

    def emit(self, event, data):
        self.events.append((event, data))
        return True

    def named(self, event):
        return [data for name, data in self.events if name == event]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
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
def product_client():
    return FakeProductClient()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def app(session_factory, product_client, lock_service, events):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_product_client] = lambda: product_client
    app.dependency_overrides[deps.get_lock_service] = lambda: lock_service
    app.dependency_overrides[deps.get_event_dispatcher] = lambda: events
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def make_token(user_id, role="user"):
    return jwt.encode({"id": user_id, "role": role}, "test-secret", algorithm="HS256")


def auth(user_id, role="user"):
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def headers_for():
    return auth


@pytest.fixture
def user_headers():
    return auth(1)


@pytest.fixture
def other_user_headers():
    return auth(2)


@pytest.fixture
def admin_headers():
    return auth(99, role="admin")


@pytest.fixture
def make_order(db):
    """Insert an order row directly, bypassing checkout."""

    def _make(total, status="pending", user_id=1, order_date=None):
        total = Decimal(str(total))
        order = OrderModel(
            user_id=user_id,
            status=status,
            subtotal=total,
            tax=Decimal("0.00"),
            shipping=Decimal("0.00"),
            discount=Decimal("0.00"),
            total=total,
            order_date=order_date or datetime.now(timezone.utc),
            delivery_address="1 Main St",
            notes="",
            payment_method="cash",
            order_action="none",
            lines=[],
        )
        db.add(order)
        db.commit()
        return order

    return _make
