"""Tests for stock checks and conditional stock decrements."""

import pytest

from marketplace.data.models import ProductModel
from marketplace.domain.errors import InsufficientStock, ProductNotFound, ProductUnavailable
from marketplace.domain.statuses import ProductStatus
from marketplace.services.inventory_guard import InventoryGuard


def stock_of(db, product_id):
    return db.get(ProductModel, product_id, populate_existing=True).stock_quantity


class TestCheck:
    def test_returns_product_when_enough_stock(self, db, make_product):
        product = make_product(stock=5)

        checked = InventoryGuard(db).check(product.id, 5)

        assert checked.id == product.id

    def test_unknown_product(self, db, users):
        with pytest.raises(ProductNotFound) as exc:
            InventoryGuard(db).check(999, 1)

        assert exc.value.kind == "product_not_found"
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("status", [ProductStatus.INACTIVE, ProductStatus.PENDING_APPROVAL, ProductStatus.REJECTED])
    def test_product_not_active(self, db, make_product, status):
        product = make_product(status=status)

        with pytest.raises(ProductUnavailable):
            InventoryGuard(db).check(product.id, 1)

    def test_insufficient_stock_reports_available_and_requested(self, db, make_product):
        product = make_product(stock=4, name="Kettle")

        with pytest.raises(InsufficientStock) as exc:
            InventoryGuard(db).check(product.id, 10)

        assert exc.value.available == 4
        assert exc.value.requested == 10
        assert "Kettle" in exc.value.message


class TestDecrement:
    def test_decrements_by_quantity(self, db, make_product):
        product = make_product(stock=5)

        InventoryGuard(db).decrement(product.id, 3)
        db.commit()

        assert stock_of(db, product.id) == 2

    def test_can_take_the_last_unit(self, db, make_product):
        product = make_product(stock=1)

        InventoryGuard(db).decrement(product.id, 1)
        db.commit()

        assert stock_of(db, product.id) == 0

    def test_refuses_to_go_negative(self, db, make_product):
        product = make_product(stock=2)

        with pytest.raises(InsufficientStock):
            InventoryGuard(db).decrement(product.id, 3)
        db.rollback()

        assert stock_of(db, product.id) == 2

    def test_refuses_inactive_product(self, db, make_product):
        product = make_product(stock=5, status=ProductStatus.INACTIVE)

        with pytest.raises(ProductUnavailable):
            InventoryGuard(db).decrement(product.id, 1)
        db.rollback()

        assert stock_of(db, product.id) == 5
