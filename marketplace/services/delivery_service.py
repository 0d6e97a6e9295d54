# marketplace/services/delivery_service.py
from typing import Iterable

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.errors import OrderNotClaimable, OrderNotFound
from marketplace.domain.schemas import Actor
from marketplace.domain.statuses import ACTIVE_DELIVERY_STATES, OrderStatus, Role
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.common import atomic, page_window
from marketplace.services.order_state_machine import OrderStateMachine
from marketplace.utils.logging import get_logger
from marketplace.utils.settings import DEFAULT_PAGE_SIZE

logger = get_logger(__name__)


class DeliveryService:
    """
    Hand-off of delivery-ready orders to delivery agents.

    claim_order is a single compare-and-swap on ``delivery_person_id IS NULL``:
    when several agents claim the same order at once, exactly one UPDATE
    matches the row and every other caller gets ``OrderNotClaimable``.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.state_machine = OrderStateMachine(db)

    def list_claimable_orders(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> list[OrderModel]:
        limit, offset = page_window(page, limit)
        return self.repo.list_available_for_pickup(limit, offset)

    def list_assigned_orders(
        self,
        agent_id: int,
        statuses: Iterable[OrderStatus | str] | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[OrderModel]:
        limit, offset = page_window(page, limit)
        filters = [OrderStatus(s) for s in statuses] if statuses else list(ACTIVE_DELIVERY_STATES)
        return self.repo.list_by_delivery_person(agent_id, filters, limit, offset)

    def claim_order(self, order_id: int, agent_id: int) -> OrderModel:
        with atomic(self.db, "claim order"):
            rowcount = self.repo.assign_delivery_person(order_id, agent_id)

            if rowcount == 0:
                if self.repo.get_order(order_id) is None:
                    raise OrderNotFound(order_id)
                logger.info(f"Delivery person {agent_id} lost or was refused claim on order {order_id}")
                raise OrderNotClaimable(order_id)

            order = self.repo.get_order(order_id)

        logger.info(f"Order {order_id} claimed by delivery person {agent_id}")
        return order

    def update_delivery_status(
        self,
        order_id: int,
        agent_id: int,
        status: OrderStatus | str,
        notes: str | None = None,
    ) -> OrderModel:
        actor = Actor(user_id=agent_id, role=Role.DELIVERY_PERSON)
        extra = {"notes": notes} if notes else None
        return self.state_machine.transition(order_id, actor, status, extra)
