"""Pytest configuration shared by the promotional code tests."""

import os

# Must be set before the app package reads its configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOCAL_TIMEZONE"] = "Africa/Algiers"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "compucar-test-secret-key-with-enough-length"
os.environ.pop("ADMIN_PASSWORD", None)

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401
from app import create_app
from app.auth.auth import AuthRouter
from app.core.security.password import hash_password
from app.database.connection import get_session
from app.enums.discount_type import DiscountType
from app.models.company.promocode import PromoCode
from app.models.order.order import Order
from app.models.user.user import User
from app.schemas.company.promocode import CartItemSnapshot


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def customer(session):
    user = User(name="Amine", username="amine", password_hash=hash_password("secret123"), email="amine@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_customer(session):
    user = User(name="Sara", username="sara", email="sara@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session):
    user = User(name="Admin", username="admin", password_hash=hash_password("admin123"), role="admin", is_admin=True)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {AuthRouter().generate_jwt(user.id)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_promocode(session, now):
    def _make(code="SAVE10", **overrides):
        data = {
            "code": code,
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": 10,
            "is_active": True,
            "valid_from": now - timedelta(days=1),
        }
        data.update(overrides)
        promo = PromoCode(**data)
        session.add(promo)
        session.commit()
        session.refresh(promo)
        return promo

    return _make


@pytest.fixture
def make_order(session):
    def _make(user: User, total: float = 200.0):
        order = Order(user_id=user.id, total_amount=total, total_amount_with_discount=total)
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make


@pytest.fixture
def cart_items():
    return [
        CartItemSnapshot(product_id="prod1", category_id="cat1", price=100, quantity=1),
        CartItemSnapshot(product_id="prod2", category_id="cat2", price=50, quantity=2),
    ]
