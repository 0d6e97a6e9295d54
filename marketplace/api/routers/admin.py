# marketplace/api/routers/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import require_role
from marketplace.data.database import get_db
from marketplace.domain.errors import ValidationError
from marketplace.domain.schemas import Actor, AdminOrderUpdate, OrderOut
from marketplace.domain.statuses import Role
from marketplace.services.order_state_machine import OrderStateMachine

router = APIRouter(prefix="/admin", tags=["admin"])


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: AdminOrderUpdate,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Status plus payment_status, transaction_id, tracking_number, delivered_at.
    Only the fields present in the body are written; null clears a field.
    """
    provided = payload.model_dump(exclude_unset=True)
    if "status" in provided and provided["status"] is None:
        raise ValidationError("status cannot be null.")

    new_status = provided.pop("status", None)
    order = OrderStateMachine(db).transition(order_id, actor, new_status, provided)
    return OrderOut.model_validate(order)
