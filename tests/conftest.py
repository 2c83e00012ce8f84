"""Shared pytest fixtures for storefront tests."""

import os

# Настройки читаются при импорте storefront — задаём окружение до него
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["STRICT_STATUS_TRANSITIONS"] = "true"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.core.security import create_access_token
from storefront.db.base import Base
from storefront.db.session import SessionLocal, engine
from storefront.main import app
from storefront.models.product import Product
from storefront.models.user import RoleEnum, User
from storefront.services.authz import Principal


@pytest.fixture(autouse=True)
def schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _create_user(db, email, role=RoleEnum.client):
    user = User(email=email, full_name=email.split("@")[0].title(), role=role)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def customer(db):
    return _create_user(db, "buyer@example.com")


@pytest.fixture
def other_customer(db):
    return _create_user(db, "other@example.com")


@pytest.fixture
def admin_user(db):
    return _create_user(db, "admin@example.com", role=RoleEnum.admin)


@pytest.fixture
def shopper(customer):
    return Principal(user_id=customer.id, is_admin=False)


@pytest.fixture
def other_shopper(other_customer):
    return Principal(user_id=other_customer.id, is_admin=False)


@pytest.fixture
def admin(admin_user):
    return Principal(user_id=admin_user.id, is_admin=True)


@pytest.fixture
def make_product(db):
    """Factory for catalog products."""

    def _make(name="Widget", price="10.00", stock=50, category=None):
        product = Product(name=name, price=Decimal(price), stock=stock, category=category)
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def product_a(make_product):
    return make_product(name="Product A", price="10.00", category="tools")


@pytest.fixture
def product_b(make_product):
    return make_product(name="Product B", price="5.50", category="garden")


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)
