# marketplace/domain/schemas.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.domain.statuses import OrderStatus, PaymentStatus, Role
from marketplace.utils.settings import DEFAULT_CURRENCY


class Actor(BaseModel):
    """Caller identity handed over by the identity provider."""

    user_id: int = Field(..., gt=0)
    role: Role

    model_config = ConfigDict(frozen=True)


class AddressIn(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class CartLineIn(BaseModel):
    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")


class OrderCreate(BaseModel):
    """Cart submitted for checkout."""

    items: List[CartLineIn] = Field(..., min_length=1)
    shipping_address: AddressIn
    billing_address: Optional[AddressIn] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    shipping_method: Optional[str] = Field(None, max_length=50)
    shipping_cost: Decimal = Field(Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)
    currency: str = Field(DEFAULT_CURRENCY, pattern=r"^[A-Z]{3}$")
    notes_to_vendor: Optional[str] = Field(None, max_length=2000)
    transaction_id: Optional[str] = Field(None, min_length=1, max_length=255)
    estimated_delivery_date: Optional[date] = None


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    vendor_id: int
    quantity: int
    price_at_purchase: Decimal
    product_name: str
    product_sku: Optional[str] = None
    product_image_url: Optional[str] = None
    item_status: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    currency: str
    shipping_address: dict
    billing_address: Optional[dict] = None
    payment_method: Optional[str] = None
    payment_status: PaymentStatus
    transaction_id: Optional[str] = None
    shipping_method: Optional[str] = None
    shipping_cost: Decimal
    notes_to_vendor: Optional[str] = None
    delivery_person_id: Optional[int] = None
    tracking_number: Optional[str] = None
    estimated_delivery_date: Optional[date] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(BaseModel):
    order: OrderOut
    items: List[OrderItemOut]


class OrderListOut(BaseModel):
    results: int
    orders: List[OrderOut]


class AdminOrderUpdate(BaseModel):
    """Fields an administrator may change; omitted fields stay untouched, null clears."""

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = Field(None, max_length=255)
    tracking_number: Optional[str] = Field(None, max_length=255)
    delivered_at: Optional[datetime] = None


class VendorOrderUpdate(BaseModel):
    status: OrderStatus


class DeliveryStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=2000)


class StockUpdate(BaseModel):
    stock_quantity: int = Field(..., ge=0)


class ProductStockOut(BaseModel):
    product_id: int
    stock_quantity: int
