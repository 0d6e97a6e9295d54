"""Tests for the HTTP API."""

from decimal import Decimal

import pytest

from helpers import address, headers
from marketplace.data.models import ProductModel
from marketplace.domain.statuses import OrderStatus, ProductStatus, Role

CUSTOMER = headers(1, Role.CUSTOMER)
VENDOR = headers(2, Role.VENDOR)
ADMIN = headers(3, Role.ADMIN)
COURIER = headers(4, Role.DELIVERY_PERSON)
OTHER_COURIER = headers(5, Role.DELIVERY_PERSON)
OTHER_VENDOR = headers(6, Role.VENDOR)


def checkout(client, *lines, **extra):
    body = {
        "items": [{"product_id": pid, "quantity": qty} for pid, qty in lines],
        "shipping_address": address(),
        **extra,
    }
    return client.post("/orders/", json=body, headers=CUSTOMER)


class TestHealthCheck:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "up"}


class TestIdentity:
    def test_missing_headers(self, client):
        response = client.get("/orders/")
        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"

    def test_unknown_role(self, client):
        response = client.get("/orders/", headers={"X-User-Id": "1", "X-User-Role": "wizard"})
        assert response.status_code == 401

    def test_wrong_role_for_router(self, client):
        response = client.get("/delivery/available", headers=CUSTOMER)
        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"


class TestCreateOrder:
    def test_checkout(self, client, db, make_product):
        product = make_product(price="10.00", stock=5)

        response = checkout(client, (product.id, 3), shipping_cost="2.00")

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["order"]["total_amount"]) == Decimal("32.00")
        assert data["order"]["status"] == "pending_payment"
        assert data["order"]["user_id"] == 1
        assert data["items"][0]["quantity"] == 3
        assert db.get(ProductModel, product.id, populate_existing=True).stock_quantity == 2

    def test_insufficient_stock(self, client, db, make_product):
        product = make_product(stock=4)

        response = checkout(client, (product.id, 10))

        assert response.status_code == 400
        assert response.json()["kind"] == "insufficient_stock"
        assert db.get(ProductModel, product.id, populate_existing=True).stock_quantity == 4

    def test_inactive_product(self, client, make_product):
        product = make_product(status=ProductStatus.INACTIVE)

        response = checkout(client, (product.id, 1))

        assert response.status_code == 400
        assert response.json()["kind"] == "product_unavailable"

    def test_unknown_product(self, client, users):
        response = checkout(client, (999, 1))

        assert response.status_code == 400
        assert response.json()["kind"] == "product_not_found"

    @pytest.mark.parametrize(
        "body",
        [
            {"items": [], "shipping_address": address()},
            {"items": [{"product_id": 1, "quantity": 0}], "shipping_address": address()},
            {"items": [{"product_id": 1, "quantity": 1}]},
            {"items": [{"product_id": 1, "quantity": 1}], "shipping_address": address(), "currency": "usd"},
        ],
    )
    def test_malformed_body(self, client, users, body):
        response = client.post("/orders/", json=body, headers=CUSTOMER)

        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "validation_error"
        assert data["message"]

    def test_buyer_unknown_to_the_users_table(self, client, make_product):
        product = make_product(stock=5)
        body = {
            "items": [{"product_id": product.id, "quantity": 1}],
            "shipping_address": address(),
            "transaction_id": "tx-new",
        }

        response = client.post("/orders/", json=body, headers=headers(99, Role.CUSTOMER))

        assert response.status_code == 201
        assert response.json()["order"]["transaction_id"] == "tx-new"

    def test_duplicate_transaction_id(self, client, make_product):
        product = make_product(stock=5)
        assert checkout(client, (product.id, 1), transaction_id="tx-1").status_code == 201

        response = checkout(client, (product.id, 1), transaction_id="tx-1")

        assert response.status_code == 409
        assert response.json()["kind"] == "duplicate_transaction_id"


class TestReadOrders:
    def test_list_my_orders(self, client, make_product):
        product = make_product(stock=5)
        checkout(client, (product.id, 1))
        checkout(client, (product.id, 1))

        response = client.get("/orders/?page=1&limit=1", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["results"] == 1

    def test_get_order_as_owner_and_stranger(self, client, make_product):
        product = make_product(stock=5)
        order_id = checkout(client, (product.id, 1)).json()["order"]["id"]

        assert client.get(f"/orders/{order_id}", headers=CUSTOMER).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=VENDOR).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=OTHER_VENDOR).status_code == 403

    def test_missing_order(self, client, users):
        response = client.get("/orders/12345", headers=ADMIN)

        assert response.status_code == 404
        assert response.json() == {"kind": "order_not_found", "message": "Order 12345 not found."}


class TestOrderLifecycle:
    def test_from_checkout_to_delivered(self, client, make_product):
        product = make_product(stock=5)
        order_id = checkout(client, (product.id, 1)).json()["order"]["id"]

        response = client.patch(
            f"/admin/orders/{order_id}/status",
            json={"status": "processing", "payment_status": "paid"},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"

        response = client.patch(
            f"/vendor/orders/{order_id}/status", json={"status": "ready_for_delivery"}, headers=VENDOR
        )
        assert response.status_code == 200

        available = client.get("/delivery/available", headers=COURIER).json()
        assert [o["id"] for o in available["orders"]] == [order_id]

        response = client.patch(f"/delivery/orders/{order_id}/claim", headers=COURIER)
        assert response.status_code == 200
        assert response.json()["status"] == "awaiting_pickup"

        response = client.patch(f"/delivery/orders/{order_id}/claim", headers=OTHER_COURIER)
        assert response.status_code == 409
        assert response.json()["kind"] == "order_not_claimable"

        response = client.patch(
            f"/delivery/orders/{order_id}/status", json={"status": "delivered"}, headers=COURIER
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_transition"

        for status in ("out_for_delivery", "delivered"):
            response = client.patch(
                f"/delivery/orders/{order_id}/status", json={"status": status}, headers=COURIER
            )
            assert response.status_code == 200

        data = response.json()
        assert data["status"] == "delivered"
        assert data["delivered_at"] is not None

    def test_my_orders_status_filter(self, client, make_order):
        make_order(status=OrderStatus.OUT_FOR_DELIVERY, delivery_person_id=4)
        done = make_order(status=OrderStatus.DELIVERED, delivery_person_id=4)

        response = client.get("/delivery/my-orders?status=delivered,completed", headers=COURIER)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == [done.id]

    def test_my_orders_bad_status_filter(self, client, users):
        response = client.get("/delivery/my-orders?status=lost", headers=COURIER)

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_admin_empty_body(self, client, make_order):
        order = make_order()

        response = client.patch(f"/admin/orders/{order.id}/status", json={}, headers=ADMIN)

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_admin_null_status(self, client, make_order):
        order = make_order()

        response = client.patch(f"/admin/orders/{order.id}/status", json={"status": None}, headers=ADMIN)

        assert response.status_code == 400

    def test_admin_clears_tracking_number(self, client, make_order):
        order = make_order(tracking_number="TRK-1")

        response = client.patch(f"/admin/orders/{order.id}/status", json={"tracking_number": None}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["tracking_number"] is None

    def test_vendor_route_is_vendor_only(self, client, make_order):
        order = make_order(status=OrderStatus.PROCESSING)

        response = client.patch(f"/vendor/orders/{order.id}/status", json={"status": "cancelled"}, headers=ADMIN)

        assert response.status_code == 403


class TestStock:
    def test_vendor_sets_own_stock(self, client, make_product):
        product = make_product(stock=5)

        response = client.put(f"/products/{product.id}/stock", json={"stock_quantity": 12}, headers=VENDOR)

        assert response.status_code == 200
        assert response.json() == {"product_id": product.id, "stock_quantity": 12}

    def test_other_vendor_is_refused(self, client, make_product):
        product = make_product(stock=5)

        response = client.put(f"/products/{product.id}/stock", json={"stock_quantity": 12}, headers=OTHER_VENDOR)

        assert response.status_code == 403

    def test_negative_stock(self, client, make_product):
        product = make_product(stock=5)

        response = client.put(f"/products/{product.id}/stock", json={"stock_quantity": -1}, headers=ADMIN)

        assert response.status_code == 400

    def test_customer_is_refused(self, client, make_product):
        product = make_product(stock=5)

        response = client.put(f"/products/{product.id}/stock", json={"stock_quantity": 1}, headers=CUSTOMER)

        assert response.status_code == 403

    def test_missing_product(self, client, users):
        response = client.put("/products/999/stock", json={"stock_quantity": 1}, headers=ADMIN)

        assert response.status_code == 404
