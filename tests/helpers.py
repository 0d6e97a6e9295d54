from decimal import Decimal

from marketplace.data.models import ProductModel
from marketplace.domain.schemas import AddressIn, CartLineIn, OrderCreate
from marketplace.domain.statuses import ProductStatus


def headers(user_id, role):
    return {"X-User-Id": str(user_id), "X-User-Role": role.value}


def address():
    return {"street": "1 Main St", "city": "Springfield", "postal_code": "12345", "country": "US"}


def cart(*lines, **kwargs):
    """OrderCreate from (product_id, quantity) pairs."""
    return OrderCreate(
        items=[CartLineIn(product_id=pid, quantity=qty) for pid, qty in lines],
        shipping_address=AddressIn(**address()),
        **kwargs,
    )


def add_product(session, price="10.00", stock=5, vendor_id=2):
    product = ProductModel(
        vendor_id=vendor_id,
        name="Race Product",
        price=Decimal(price),
        stock_quantity=stock,
        status=ProductStatus.ACTIVE.value,
    )
    session.add(product)
    session.commit()
    return product.id
