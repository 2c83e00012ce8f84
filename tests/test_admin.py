"""Tests for the admin mutation surface."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.core.errors import ForbiddenError, NotFoundError, ValidationError
from storefront.models.order import Order, OrderStatus
from storefront.models.product import Product
from storefront.services import admin as admin_service
from storefront.services import cart
from storefront.services import catalog
from storefront.services import checkout as checkout_service
from storefront.services import order_status

NEW_PRODUCT = {
    "name": "Garden Hose",
    "description": "25m",
    "price": "24.90",
    "stock": 12,
    "category": "garden",
    "image_url": "https://cdn.example.com/hose.jpg",
}


def _products(db):
    return db.scalar(select(func.count(Product.id)))


def test_admin_creates_product(db, admin):
    product = admin_service.create_product(db, admin, NEW_PRODUCT)

    assert product.id is not None
    assert product.price == Decimal("24.90")
    assert catalog.get_product(db, product.id).name == "Garden Hose"


def test_create_rejects_invalid_product(db, admin):
    with pytest.raises(ValidationError) as exc:
        admin_service.create_product(db, admin, {**NEW_PRODUCT, "price": "0"})
    assert exc.value.field == "price"
    assert _products(db) == 0


def test_update_is_partial_and_validated(db, admin, product_a):
    admin_service.update_product(db, admin, product_a.id, {"stock": 7, "category": "sale"})
    product = catalog.get_product(db, product_a.id)
    assert (product.name, product.stock, product.category) == ("Product A", 7, "sale")

    with pytest.raises(ValidationError) as exc:
        admin_service.update_product(db, admin, product_a.id, {"name": "X"})
    assert exc.value.field == "name"
    db.expire_all()
    assert catalog.get_product(db, product_a.id).name == "Product A"


def test_update_missing_product(db, admin):
    with pytest.raises(NotFoundError):
        admin_service.update_product(db, admin, 404, {"stock": 1})


def test_delete_product_keeps_order_snapshot(db, admin, shopper, other_shopper, product_a, product_b):
    cart.add_or_increment(db, shopper, product_a.id)
    order_id = checkout_service.checkout(db, shopper, "12 Baker Street, London").order_id
    cart.add_or_increment(db, other_shopper, product_a.id)
    cart.add_or_increment(db, other_shopper, product_b.id)

    admin_service.delete_product(db, admin, product_a.id)
    db.expire_all()

    with pytest.raises(NotFoundError):
        catalog.get_product(db, product_a.id)
    order = order_status.get_order(db, shopper, order_id)
    assert order.total_amount == Decimal("10.00")
    assert order.items[0].price == Decimal("10.00")
    assert order.items[0].product_name is None
    assert [p.id for _, p in cart.snapshot(db, other_shopper)] == [product_b.id]


def test_delete_missing_product(db, admin):
    with pytest.raises(NotFoundError):
        admin_service.delete_product(db, admin, 404)


def test_unknown_status_is_a_validation_error(db, admin, shopper, product_a):
    cart.add_or_increment(db, shopper, product_a.id)
    order_id = checkout_service.checkout(db, shopper, "12 Baker Street, London").order_id
    with pytest.raises(ValidationError) as exc:
        admin_service.update_order_status(db, admin, order_id, "teleported")
    assert exc.value.field == "status"


def test_list_all_orders(db, admin, shopper, other_shopper, product_a):
    for principal in (shopper, other_shopper):
        cart.add_or_increment(db, principal, product_a.id)
        checkout_service.checkout(db, principal, "12 Baker Street, London")

    orders = admin_service.list_all_orders(db, admin)
    assert {o.user_id for o in orders} == {shopper.user_id, other_shopper.user_id}


def test_non_admin_is_forbidden_everywhere(db, shopper, product_a):
    cart.add_or_increment(db, shopper, product_a.id)
    order_id = checkout_service.checkout(db, shopper, "12 Baker Street, London").order_id

    calls = [
        lambda: admin_service.create_product(db, shopper, NEW_PRODUCT),
        lambda: admin_service.update_product(db, shopper, product_a.id, {"price": "1.00"}),
        lambda: admin_service.delete_product(db, shopper, product_a.id),
        lambda: admin_service.update_order_status(db, shopper, order_id, "processing"),
        lambda: admin_service.list_all_orders(db, shopper),
        lambda: admin_service.create_product(db, None, NEW_PRODUCT),
    ]
    for call in calls:
        with pytest.raises(ForbiddenError):
            call()

    db.expire_all()
    assert _products(db) == 1
    assert catalog.get_product(db, product_a.id).price == Decimal("10.00")
    assert db.get(Order, order_id).status == OrderStatus.pending
