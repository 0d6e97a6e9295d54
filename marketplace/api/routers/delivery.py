# marketplace/api/routers/delivery.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import require_role
from marketplace.data.database import get_db
from marketplace.domain.errors import ValidationError
from marketplace.domain.schemas import Actor, DeliveryStatusUpdate, OrderListOut, OrderOut
from marketplace.domain.statuses import OrderStatus, Role
from marketplace.services.delivery_service import DeliveryService
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/delivery", tags=["delivery"])

delivery_person = require_role(Role.DELIVERY_PERSON)


def get_service(db: Session):
    return DeliveryService(db)


def parse_status_filter(status: Optional[str]) -> list[OrderStatus] | None:
    if not status:
        return None
    try:
        return [OrderStatus(s.strip()) for s in status.split(",") if s.strip()]
    except ValueError:
        raise ValidationError(f"Invalid status filter '{status}'.") from None


@router.get("/available", response_model=OrderListOut)
def available_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(delivery_person),
    db: Session = Depends(get_db),
):
    """
    Orders ready for delivery that nobody has claimed yet, oldest first.
    """
    orders = get_service(db).list_claimable_orders(page, limit)
    return OrderListOut(results=len(orders), orders=[OrderOut.model_validate(o) for o in orders])


@router.get("/my-orders", response_model=OrderListOut)
def my_orders(
    status: Optional[str] = Query(None, description="Comma separated statuses"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(delivery_person),
    db: Session = Depends(get_db),
):
    orders = get_service(db).list_assigned_orders(actor.user_id, parse_status_filter(status), page, limit)
    return OrderListOut(results=len(orders), orders=[OrderOut.model_validate(o) for o in orders])


@router.patch("/orders/{order_id}/claim", response_model=OrderOut)
def claim_order(
    order_id: int,
    actor: Actor = Depends(delivery_person),
    db: Session = Depends(get_db),
):
    order = get_service(db).claim_order(order_id, actor.user_id)
    return OrderOut.model_validate(order)


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: DeliveryStatusUpdate,
    actor: Actor = Depends(delivery_person),
    db: Session = Depends(get_db),
):
    order = get_service(db).update_delivery_status(order_id, actor.user_id, payload.status, payload.notes)
    return OrderOut.model_validate(order)
