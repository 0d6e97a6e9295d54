# marketplace/services/order_state_machine.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.errors import (
    Conflict,
    DuplicateTransactionId,
    Forbidden,
    InvalidTransition,
    OrderNotFound,
    ValidationError,
)
from marketplace.domain.schemas import Actor
from marketplace.domain.statuses import OrderStatus, PaymentStatus, Role, can_transition
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.common import atomic
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN_FIELDS = frozenset({"payment_status", "transaction_id", "tracking_number", "delivered_at"})
DELIVERY_FIELDS = frozenset({"notes"})


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label} value '{value}'. Must be one of: {allowed}.") from None


class OrderStateMachine:
    """
    The single write path for order status and the fields that travel with it.

    Who may take which edge is decided by the transition tables in
    ``marketplace.domain.statuses``. Every write is an UPDATE conditioned on
    the status that was read (and, for delivery agents, on the assignee), so a
    concurrent change makes the write miss instead of overwriting it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def transition(
        self,
        order_id: int,
        actor: Actor,
        new_status: OrderStatus | str | None = None,
        extra_fields: dict[str, Any] | None = None,
    ) -> OrderModel:
        extra_fields = dict(extra_fields or {})

        if actor.role == Role.ADMIN:
            return self._admin_transition(order_id, new_status, extra_fields)
        if actor.role == Role.VENDOR:
            return self._vendor_transition(order_id, actor.user_id, new_status, extra_fields)
        if actor.role == Role.DELIVERY_PERSON:
            return self._delivery_transition(order_id, actor.user_id, new_status, extra_fields)

        raise Forbidden(f"Role '{actor.role.value}' is not allowed to change order status.")

    def _admin_transition(self, order_id: int, new_status, extra_fields: dict[str, Any]) -> OrderModel:
        unknown = set(extra_fields) - ADMIN_FIELDS
        if unknown:
            raise ValidationError(f"Fields not updatable: {', '.join(sorted(unknown))}.")

        if new_status is None and not extra_fields:
            raise ValidationError(
                "No valid fields provided for update. Please provide at least an order status "
                "or other updatable order fields."
            )

        target = _coerce(OrderStatus, new_status, "order status") if new_status is not None else None

        values: dict[str, Any] = {}
        if "payment_status" in extra_fields:
            if extra_fields["payment_status"] is None:
                raise ValidationError("payment_status cannot be cleared.")
            values["payment_status"] = _coerce(PaymentStatus, extra_fields["payment_status"], "payment status").value
        for field in ("transaction_id", "tracking_number", "delivered_at"):
            if field in extra_fields:
                # None clears the field
                values[field] = extra_fields[field]

        with atomic(self.db, "update order status"):
            order = self._load(order_id)
            current = OrderStatus(order.status)
            target = target or current

            if target != current:
                self._assert_can_transition(Role.ADMIN, current, target)

            if target == OrderStatus.DELIVERED:
                if "delivered_at" in values and values["delivered_at"] is None:
                    raise ValidationError("delivered_at cannot be cleared on a delivered order.")
                if target != current and "delivered_at" not in values:
                    values["delivered_at"] = datetime.now(timezone.utc)

            changed = {field for field, value in values.items() if getattr(order, field) != value}
            if target == current and not changed:
                raise ValidationError("Nothing to update, every provided field already has that value.")

            values["status"] = target.value
            updated = self._apply(order_id, current, values, transaction_id=values.get("transaction_id"))

        logger.info(f"Order {order_id} updated by admin: {current.value} -> {target.value}", fields=sorted(values))
        return updated

    def _vendor_transition(self, order_id: int, vendor_id: int, new_status, extra_fields: dict[str, Any]) -> OrderModel:
        if extra_fields:
            raise ValidationError(f"Fields not updatable by a vendor: {', '.join(sorted(extra_fields))}.")
        if new_status is None:
            raise ValidationError("status is required.")
        target = _coerce(OrderStatus, new_status, "order status")

        with atomic(self.db, "update order status"):
            order = self._load(order_id)

            if not self.repo.has_vendor_items(order_id, vendor_id):
                raise Forbidden("You are not authorized to update this order. It has none of your products.")

            current = OrderStatus(order.status)
            self._assert_can_transition(Role.VENDOR, current, target)
            updated = self._apply(order_id, current, {"status": target.value})

        logger.info(f"Order {order_id} updated by vendor {vendor_id}: {current.value} -> {target.value}")
        return updated

    def _delivery_transition(self, order_id: int, agent_id: int, new_status, extra_fields: dict[str, Any]) -> OrderModel:
        unknown = set(extra_fields) - DELIVERY_FIELDS
        if unknown:
            raise ValidationError(f"Fields not updatable by a delivery person: {', '.join(sorted(unknown))}.")
        if new_status is None:
            raise ValidationError("status is required.")
        target = _coerce(OrderStatus, new_status, "order status")

        with atomic(self.db, "update order status"):
            order = self._load(order_id)

            if order.delivery_person_id != agent_id:
                raise Forbidden("You are not authorized to update this order. It is not assigned to you.")

            current = OrderStatus(order.status)
            self._assert_can_transition(Role.DELIVERY_PERSON, current, target)

            values: dict[str, Any] = {"status": target.value}
            if target == OrderStatus.DELIVERED:
                values["delivered_at"] = datetime.now(timezone.utc)

            updated = self._apply(order_id, current, values, delivery_person_id=agent_id)

        logger.info(
            f"Order {order_id} updated by delivery person {agent_id}: {current.value} -> {target.value}",
            notes=extra_fields.get("notes"),
        )
        return updated

    def _load(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    @staticmethod
    def _assert_can_transition(role: Role, current: OrderStatus, target: OrderStatus) -> None:
        if not can_transition(role, current, target):
            raise InvalidTransition(current.value, target.value)

    def _apply(
        self,
        order_id: int,
        expected_status: OrderStatus,
        values: dict[str, Any],
        delivery_person_id: int | None = None,
        transaction_id: str | None = None,
    ) -> OrderModel:
        try:
            rowcount = self.repo.update_status(order_id, expected_status, values, delivery_person_id)
        except IntegrityError as e:
            # transaction_id is the only unique column this update can touch
            if transaction_id is not None:
                raise DuplicateTransactionId(transaction_id) from e
            raise

        if rowcount == 0:
            self._raise_lost_update(order_id, expected_status, delivery_person_id)

        return self._load(order_id)

    def _raise_lost_update(self, order_id: int, expected_status: OrderStatus, delivery_person_id: int | None) -> None:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)
        if delivery_person_id is not None and order.delivery_person_id != delivery_person_id:
            raise Forbidden("You are not authorized to update this order. It is not assigned to you.")

        logger.warning(f"Order {order_id} changed from '{expected_status.value}' to '{order.status}' during update")
        raise Conflict(f"Order {order_id} was modified by another operation, current status is '{order.status}'.")
