# marketplace/api/routers/products.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import require_role
from marketplace.data.database import get_db
from marketplace.domain.schemas import Actor, ProductStockOut, StockUpdate
from marketplace.domain.statuses import Role
from marketplace.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.put("/{product_id}/stock", response_model=ProductStockOut)
def set_stock(
    product_id: int,
    payload: StockUpdate,
    actor: Actor = Depends(require_role(Role.VENDOR, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    product = ProductService(db).set_stock(actor, product_id, payload.stock_quantity)
    return ProductStockOut(product_id=product.id, stock_quantity=product.stock_quantity)
