# marketplace/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_actor
from marketplace.data.database import get_db
from marketplace.domain.schemas import Actor, OrderCreate, OrderDetailOut, OrderItemOut, OrderListOut, OrderOut
from marketplace.services.order_service import OrderService
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


def to_detail(order, items) -> OrderDetailOut:
    return OrderDetailOut(
        order=OrderOut.model_validate(order),
        items=[OrderItemOut.model_validate(i) for i in items],
    )


@router.post("/", response_model=OrderDetailOut, status_code=201)
def create_order(
    payload: OrderCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Places an order for the caller: checks stock, snapshots prices and
    decrements stock in one transaction.
    """
    svc = get_service(db)
    order, items = svc.create_order(actor.user_id, payload)
    return to_detail(order, items)


@router.get("/", response_model=OrderListOut)
def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    orders = get_service(db).list_orders_for_user(actor.user_id, page, limit)
    return OrderListOut(results=len(orders), orders=[OrderOut.model_validate(o) for o in orders])


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Owner, admin, the assigned delivery person or a vendor with a line in the order.
    """
    order, items = get_service(db).get_order_for(actor, order_id)
    return to_detail(order, items)
