# marketplace/repos/order_repo.py
from typing import Any, Iterable, Sequence

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.statuses import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    # writes are flushed, never committed, the caller owns the transaction
    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def create_order_items(self, items: Sequence[OrderItemModel]) -> Sequence[OrderItemModel]:
        self.db.add_all(items)
        self.db.flush()
        return items

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_order_items(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def list_by_user(self, user_id: int, limit: int, offset: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .limit(limit)
                .offset(offset)
            ).scalars()
        )

    def list_available_for_pickup(self, limit: int, offset: int) -> list[OrderModel]:
        # oldest first
        return list(
            self.db.execute(
                select(OrderModel)
                .where(
                    OrderModel.status == OrderStatus.READY_FOR_DELIVERY.value,
                    OrderModel.delivery_person_id.is_(None),
                )
                .order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
                .limit(limit)
                .offset(offset)
            ).scalars()
        )

    def list_by_delivery_person(
        self,
        delivery_person_id: int,
        statuses: Iterable[OrderStatus],
        limit: int,
        offset: int,
    ) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(
                    OrderModel.delivery_person_id == delivery_person_id,
                    OrderModel.status.in_([s.value for s in statuses]),
                )
                .order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
                .limit(limit)
                .offset(offset)
            ).scalars()
        )

    def has_vendor_items(self, order_id: int, vendor_id: int) -> bool:
        return bool(
            self.db.execute(
                select(
                    exists().where(
                        OrderItemModel.order_id == order_id,
                        OrderItemModel.vendor_id == vendor_id,
                    )
                )
            ).scalar()
        )

    def assign_delivery_person(self, order_id: int, delivery_person_id: int) -> int:
        # compare-and-swap on delivery_person_id IS NULL, at most one caller gets rowcount 1
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == OrderStatus.READY_FOR_DELIVERY.value,
                OrderModel.delivery_person_id.is_(None),
            )
            .values(
                delivery_person_id=delivery_person_id,
                status=OrderStatus.AWAITING_PICKUP.value,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_status(
        self,
        order_id: int,
        expected_status: OrderStatus,
        new_data: dict[str, Any],
        delivery_person_id: int | None = None,
    ) -> int:
        # same idea as a version check: only applies if the row still looks like what we read
        conditions = [
            OrderModel.id == order_id,
            OrderModel.status == expected_status.value,
        ]
        if delivery_person_id is not None:
            conditions.append(OrderModel.delivery_person_id == delivery_person_id)

        result = self.db.execute(
            update(OrderModel)
            .where(*conditions)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
