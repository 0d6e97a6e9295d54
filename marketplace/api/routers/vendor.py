# marketplace/api/routers/vendor.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import require_role
from marketplace.data.database import get_db
from marketplace.domain.schemas import Actor, OrderOut, VendorOrderUpdate
from marketplace.domain.statuses import Role
from marketplace.services.order_state_machine import OrderStateMachine

router = APIRouter(prefix="/vendor", tags=["vendor"])


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: VendorOrderUpdate,
    actor: Actor = Depends(require_role(Role.VENDOR)),
    db: Session = Depends(get_db),
):
    order = OrderStateMachine(db).transition(order_id, actor, payload.status)
    return OrderOut.model_validate(order)
