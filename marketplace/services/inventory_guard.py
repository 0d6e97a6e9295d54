# marketplace/services/inventory_guard.py
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import Conflict, InsufficientStock, ProductNotFound, ProductUnavailable
from marketplace.domain.statuses import ProductStatus
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryGuard:
    """
    Stock checks and stock decrements for order lines.

    Runs on the caller's session, so every read and write belongs to the
    caller's transaction. Stock is never written as "read, subtract, write
    back": the decrement is one conditional UPDATE guarded by
    ``stock_quantity >= quantity``, so concurrent orders cannot oversell.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def check(self, product_id: int, quantity: int) -> ProductModel:
        product = self.repo.get_product(product_id)

        if not product:
            raise ProductNotFound(product_id)

        if product.status != ProductStatus.ACTIVE.value:
            raise ProductUnavailable(product.id, product.name)

        if product.stock_quantity < quantity:
            raise InsufficientStock(product.id, product.name, product.stock_quantity, quantity)

        return product

    def decrement(self, product_id: int, quantity: int) -> None:
        rowcount = self.repo.decrement_stock(product_id, quantity)

        if rowcount == 1:
            logger.info(f"Stock of product {product_id} decremented by {quantity}")
            return

        # the row changed after check(), report what it looks like now
        logger.warning(f"Conditional stock decrement matched no row for product {product_id}")
        self.check(product_id, quantity)
        raise Conflict(f"Stock of product {product_id} changed during checkout, please retry.")
