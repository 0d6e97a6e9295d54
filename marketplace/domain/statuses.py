"""Closed status enumerations and the per-actor order transition tables.

State machine:
    pending_payment → processing → ready_for_delivery → awaiting_pickup →
    out_for_delivery ⇄ delivery_attempted → delivered → completed
    side branches: delivery_failed, cancelled, refunded, failed
"""

from enum import Enum
from types import MappingProxyType


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PROCESSING = "processing"
    READY_FOR_DELIVERY = "ready_for_delivery"
    AWAITING_PICKUP = "awaiting_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERY_ATTEMPTED = "delivery_attempted"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    DELIVERY_FAILED = "delivery_failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    PENDING_APPROVAL = "pending_approval"
    REJECTED = "rejected"
    INACTIVE = "inactive"


class ItemStatus(str, Enum):
    PENDING = "pending"


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"
    DELIVERY_PERSON = "delivery_person"


TERMINAL_STATES = frozenset(
    {
        OrderStatus.DELIVERED,
        OrderStatus.COMPLETED,
        OrderStatus.DELIVERY_FAILED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
        OrderStatus.FAILED,
    }
)

ACTIVE_DELIVERY_STATES = (
    OrderStatus.AWAITING_PICKUP,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERY_ATTEMPTED,
)

_S = OrderStatus

_ADMIN_TRANSITIONS = {
    _S.PENDING_PAYMENT: {_S.PROCESSING, _S.CANCELLED, _S.FAILED},
    _S.PROCESSING: {_S.READY_FOR_DELIVERY, _S.CANCELLED, _S.REFUNDED, _S.FAILED},
    _S.READY_FOR_DELIVERY: {_S.PROCESSING, _S.CANCELLED, _S.REFUNDED},
    _S.AWAITING_PICKUP: {_S.CANCELLED, _S.DELIVERY_FAILED},
    _S.OUT_FOR_DELIVERY: {_S.DELIVERED, _S.DELIVERY_ATTEMPTED, _S.DELIVERY_FAILED},
    _S.DELIVERY_ATTEMPTED: {_S.OUT_FOR_DELIVERY, _S.DELIVERED, _S.DELIVERY_FAILED},
    _S.DELIVERED: {_S.COMPLETED, _S.REFUNDED},
    _S.DELIVERY_FAILED: {_S.CANCELLED, _S.REFUNDED},
    _S.COMPLETED: {_S.REFUNDED},
    _S.CANCELLED: {_S.REFUNDED},
    _S.FAILED: set(),
    _S.REFUNDED: set(),
}

_VENDOR_TRANSITIONS = {
    _S.PROCESSING: {_S.READY_FOR_DELIVERY, _S.CANCELLED},
}

_DELIVERY_TRANSITIONS = {
    # can fail before even going out
    _S.AWAITING_PICKUP: {_S.OUT_FOR_DELIVERY, _S.DELIVERY_FAILED},
    _S.OUT_FOR_DELIVERY: {_S.DELIVERED, _S.DELIVERY_FAILED, _S.DELIVERY_ATTEMPTED},
    _S.DELIVERY_ATTEMPTED: {_S.OUT_FOR_DELIVERY, _S.DELIVERED, _S.DELIVERY_FAILED},
}


def _freeze(table):
    return MappingProxyType({source: frozenset(targets) for source, targets in table.items()})


TRANSITIONS = MappingProxyType(
    {
        Role.ADMIN: _freeze(_ADMIN_TRANSITIONS),
        Role.VENDOR: _freeze(_VENDOR_TRANSITIONS),
        Role.DELIVERY_PERSON: _freeze(_DELIVERY_TRANSITIONS),
        Role.CUSTOMER: _freeze({}),
    }
)


def allowed_targets(role: Role, source: OrderStatus) -> frozenset:
    return TRANSITIONS[role].get(source, frozenset())


def can_transition(role: Role, source: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_targets(role, source)
