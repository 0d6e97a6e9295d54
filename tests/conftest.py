"""Pytest fixtures for the order service tests."""

import os

# must be set before anything imports marketplace.utils.settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import marketplace.data.models  # noqa: F401
from marketplace.data.database import Base, SessionLocal, engine, make_engine
from marketplace.data.models import OrderModel, ProductModel, UserModel
from marketplace.domain.statuses import OrderStatus, ProductStatus, Role


@pytest.fixture
def db():
    """Fresh schema on the shared in-memory database, one session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed database, safe to use from several threads."""
    file_engine = make_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)
    file_engine.dispose()


def _add_users(session):
    session.add_all(
        [
            UserModel(id=1, name="Customer", role=Role.CUSTOMER.value),
            UserModel(id=2, name="Vendor", role=Role.VENDOR.value),
            UserModel(id=3, name="Admin", role=Role.ADMIN.value),
            UserModel(id=4, name="Courier A", role=Role.DELIVERY_PERSON.value),
            UserModel(id=5, name="Courier B", role=Role.DELIVERY_PERSON.value),
            UserModel(id=6, name="Other Vendor", role=Role.VENDOR.value),
            UserModel(id=7, name="Other Customer", role=Role.CUSTOMER.value),
        ]
    )
    session.commit()


@pytest.fixture
def users(db):
    _add_users(db)


@pytest.fixture
def make_product(db, users):
    def factory(price="10.00", stock=5, status=ProductStatus.ACTIVE, vendor_id=2, name=None):
        product = ProductModel(
            vendor_id=vendor_id,
            name=name or f"Product {price}",
            price=Decimal(price),
            stock_quantity=stock,
            status=status.value,
            images=["https://img.example/main.jpg"],
        )
        db.add(product)
        db.commit()
        return product

    return factory


@pytest.fixture
def make_order(db, users):
    """Order row placed directly in a given status, bypassing checkout."""

    def factory(status=OrderStatus.PENDING_PAYMENT, user_id=1, delivery_person_id=None, **kwargs):
        order = OrderModel(
            user_id=user_id,
            total_amount=Decimal("20.00"),
            currency="USD",
            shipping_address={"street": "1 Main St", "city": "Springfield", "postal_code": "12345", "country": "US"},
            shipping_cost=Decimal("0.00"),
            status=status.value,
            delivery_person_id=delivery_person_id,
            **kwargs,
        )
        db.add(order)
        db.commit()
        return order

    return factory


@pytest.fixture
def seeded_file_db(file_session_factory):
    session = file_session_factory()
    try:
        _add_users(session)
    finally:
        session.close()
    return file_session_factory


@pytest.fixture
def client(db):
    from marketplace.main import app

    return TestClient(app)
