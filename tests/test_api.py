"""HTTP-level tests: routing, auth and error mapping."""

from decimal import Decimal

import pytest

from storefront.services.checkout import CheckoutSaga
from storefront.core.errors import BackendUnavailable


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_register_login_and_me(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "New.User@Example.com", "password": "s3cret-pass", "full_name": "New User"},
    )
    assert resp.status_code == 201
    assert resp.json()["is_admin"] is False

    resp = client.post("/api/auth/token", data={"username": "new.user@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "new.user@example.com"


def test_register_duplicate_email(client, customer):
    resp = client.post("/api/auth/register", json={"email": customer.email, "password": "whatever1"})
    assert resp.status_code == 400


def test_login_with_wrong_password(client, customer):
    resp = client.post("/api/auth/token", data={"username": customer.email, "password": "nope-nope"})
    assert resp.status_code == 400


def test_catalog_is_public(client, product_a, product_b):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Product B", "Product A"]

    resp = client.get(f"/api/products/{product_a.id}")
    assert Decimal(resp.json()["price"]) == Decimal("10.00")

    assert client.get("/api/products/categories").json() == ["garden", "tools"]
    assert client.get("/api/products/999").status_code == 404


def test_cart_requires_authentication(client):
    assert client.get("/api/cart").status_code == 401


def test_cart_flow(client, customer_headers, product_a, product_b):
    client.post("/api/cart/items", json={"product_id": product_a.id}, headers=customer_headers)
    client.post("/api/cart/items", json={"product_id": product_a.id}, headers=customer_headers)
    resp = client.post("/api/cart/items", json={"product_id": product_b.id}, headers=customer_headers)

    assert resp.status_code == 201
    body = resp.json()
    assert body["item_count"] == 2
    assert Decimal(body["total"]) == Decimal("25.50")
    line_a = next(i for i in body["items"] if i["product_id"] == product_a.id)
    assert line_a["quantity"] == 2
    assert Decimal(line_a["line_total"]) == Decimal("20.00")

    resp = client.patch(f"/api/cart/items/{line_a['id']}", json={"quantity": 0}, headers=customer_headers)
    assert [i["product_id"] for i in resp.json()["items"]] == [product_b.id]

    resp = client.patch(f"/api/cart/items/{line_a['id']}", json={"quantity": -2}, headers=customer_headers)
    assert resp.status_code == 422
    assert resp.json()["field"] == "quantity"

    assert client.delete(f"/api/cart/items/{line_a['id']}", headers=customer_headers).status_code == 204
    assert client.delete("/api/cart", headers=customer_headers).status_code == 204
    assert client.get("/api/cart", headers=customer_headers).json()["items"] == []


def _fill(client, headers, *products):
    for product in products:
        client.post("/api/cart/items", json={"product_id": product.id}, headers=headers)


def test_checkout_flow(client, customer_headers, product_a, product_b):
    _fill(client, customer_headers, product_a, product_a, product_b)

    resp = client.post("/api/orders/checkout", json={"shipping_address": "123 Main Street"}, headers=customer_headers)

    assert resp.status_code == 201
    assert Decimal(resp.json()["total_amount"]) == Decimal("25.50")
    order_id = resp.json()["order_id"]

    orders = client.get("/api/orders", headers=customer_headers).json()
    assert [o["id"] for o in orders] == [order_id]
    assert orders[0]["status"] == "pending"
    assert len(orders[0]["items"]) == 2
    assert client.get("/api/cart", headers=customer_headers).json()["item_count"] == 0


def test_checkout_errors(client, customer_headers, product_a):
    resp = client.post("/api/orders/checkout", json={"shipping_address": "123 Main Street"}, headers=customer_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "empty_cart"

    _fill(client, customer_headers, product_a)
    resp = client.post("/api/orders/checkout", json={"shipping_address": "tiny"}, headers=customer_headers)
    assert resp.status_code == 422
    assert resp.json()["field"] == "shipping_address"


def test_partial_failure_is_resumable_over_http(client, customer_headers, product_a, monkeypatch):
    _fill(client, customer_headers, product_a)

    def broken(*args, **kwargs):
        raise BackendUnavailable()

    monkeypatch.setattr(CheckoutSaga, "_clear_cart", broken)
    resp = client.post("/api/orders/checkout", json={"shipping_address": "123 Main Street"}, headers=customer_headers)
    monkeypatch.undo()

    assert resp.status_code == 409
    body = resp.json()
    assert body["resumable"] is True
    assert body["stage"] == "items_written"

    resp = client.post(f"/api/orders/{body['order_id']}/resume", headers=customer_headers)
    assert resp.status_code == 200
    assert client.get("/api/cart", headers=customer_headers).json()["item_count"] == 0


def test_admin_endpoints_are_forbidden_for_customers(client, customer_headers, product_a):
    resp = client.post("/api/admin/products", json={"name": "Thing", "price": "1.00", "stock": 1}, headers=customer_headers)
    assert resp.status_code == 403
    assert client.delete(f"/api/admin/products/{product_a.id}", headers=customer_headers).status_code == 403
    assert client.get("/api/admin/orders", headers=customer_headers).status_code == 403
    assert client.get(f"/api/products/{product_a.id}").status_code == 200


def test_admin_product_and_status_management(client, admin_headers, customer_headers, product_a):
    resp = client.post(
        "/api/admin/products",
        json={"name": "Thing", "price": "3.25", "stock": "4", "image_url": ""},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    product_id = resp.json()["id"]

    resp = client.patch(f"/api/admin/products/{product_id}", json={"price": "-3"}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["field"] == "price"

    _fill(client, customer_headers, product_a)
    order_id = client.post(
        "/api/orders/checkout", json={"shipping_address": "123 Main Street"}, headers=customer_headers
    ).json()["order_id"]

    orders = client.get("/api/admin/orders", headers=admin_headers).json()
    assert orders[0]["customer_email"] == "buyer@example.com"

    url = f"/api/admin/orders/{order_id}/status"
    assert client.patch(url, json={"status": "processing"}, headers=admin_headers).json()["status"] == "processing"
    resp = client.patch(url, json={"status": "delivered"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "invalid_transition"

    assert client.delete(f"/api/admin/products/{product_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/products/{product_id}").status_code == 404
