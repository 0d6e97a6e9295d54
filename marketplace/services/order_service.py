# marketplace/services/order_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.errors import DuplicateTransactionId, Forbidden, OrderNotFound, ValidationError
from marketplace.domain.schemas import Actor, OrderCreate
from marketplace.domain.statuses import ItemStatus, OrderStatus, PaymentStatus, Role
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.common import atomic, page_window
from marketplace.services.inventory_guard import InventoryGuard
from marketplace.utils.logging import get_logger
from marketplace.utils.settings import DEFAULT_PAGE_SIZE

logger = get_logger(__name__)


class OrderService:
    """
    Order assembly and order reads.

    create_order turns a cart into an order, its lines and the matching stock
    decrements in one transaction: either all of it is committed or none of it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.inventory = InventoryGuard(db)

    def create_order(self, user_id: int, payload: OrderCreate) -> tuple[OrderModel, list[OrderItemModel]]:
        """
        Use Case: place an order from a cart.

        1. Checks every line against the current product (exists, active, enough stock)
        2. Computes total = sum(price * quantity) + shipping_cost
        3. Inserts the order (pending_payment / pending)
        4. Inserts all order lines
        5. Decrements stock for every line
        """
        self._validate_cart(payload)

        with atomic(self.db, "create order"):
            products = [self.inventory.check(line.product_id, line.quantity) for line in payload.items]

            total = sum(
                (product.price * line.quantity for product, line in zip(products, payload.items)),
                Decimal("0.00"),
            )
            total += payload.shipping_cost

            order = OrderModel(
                user_id=user_id,
                total_amount=total,
                currency=payload.currency,
                shipping_address=payload.shipping_address.model_dump(),
                billing_address=payload.billing_address.model_dump() if payload.billing_address else None,
                payment_method=payload.payment_method,
                payment_status=PaymentStatus.PENDING.value,
                transaction_id=payload.transaction_id,
                shipping_method=payload.shipping_method,
                shipping_cost=payload.shipping_cost,
                notes_to_vendor=payload.notes_to_vendor,
                estimated_delivery_date=payload.estimated_delivery_date,
                status=OrderStatus.PENDING_PAYMENT.value,
            )
            self._insert_order(order)

            items = self.repo.create_order_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=product.id,
                        vendor_id=product.vendor_id,
                        quantity=line.quantity,
                        price_at_purchase=product.price,
                        product_name=product.name,
                        product_sku=product.sku,
                        product_image_url=product.main_image,
                        item_status=ItemStatus.PENDING.value,
                    )
                    for product, line in zip(products, payload.items)
                ]
            )

            for line in payload.items:
                self.inventory.decrement(line.product_id, line.quantity)

        logger.info(
            f"Order {order.id} created for user {user_id}",
            lines=len(items),
            total_amount=str(order.total_amount),
        )
        return order, list(items)

    def get_order(self, order_id: int) -> tuple[OrderModel, list[OrderItemModel]]:
        """
        Use Case: order with its lines (Query).
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)

        return order, self.repo.get_order_items(order_id)

    def get_order_for(self, actor: Actor, order_id: int) -> tuple[OrderModel, list[OrderItemModel]]:
        order, items = self.get_order(order_id)

        if actor.role == Role.ADMIN or order.user_id == actor.user_id:
            return order, items
        if actor.role == Role.DELIVERY_PERSON and order.delivery_person_id == actor.user_id:
            return order, items
        if actor.role == Role.VENDOR and any(i.vendor_id == actor.user_id for i in items):
            return order, items

        raise Forbidden("You are not authorized to view this order.")

    def list_orders_for_user(self, user_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> list[OrderModel]:
        limit, offset = page_window(page, limit)
        return self.repo.list_by_user(user_id, limit, offset)

    def _validate_cart(self, payload: OrderCreate) -> None:
        if not payload.items:
            raise ValidationError("Order must contain at least one item.")

        seen = set()
        for index, line in enumerate(payload.items, start=1):
            if line.quantity <= 0:
                raise ValidationError(f"Item {index}: quantity must be a positive integer.")
            if line.product_id in seen:
                raise ValidationError(
                    f"Item {index}: product {line.product_id} appears more than once, adjust the quantity instead."
                )
            seen.add(line.product_id)

    def _insert_order(self, order: OrderModel) -> None:
        # transaction_id is the only unique column written here besides the PK
        try:
            self.repo.create_order(order)
        except IntegrityError as e:
            if order.transaction_id is not None:
                raise DuplicateTransactionId(order.transaction_id) from e
            raise
