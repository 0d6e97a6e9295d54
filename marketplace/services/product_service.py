# marketplace/services/product_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import Forbidden, NotFound, ValidationError
from marketplace.domain.schemas import Actor
from marketplace.domain.statuses import Role
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.common import atomic
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    """Catalog side of stock: absolute stock edits by the owning vendor or an admin."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound(f"Product {product_id} not found.")
        return product

    def set_stock(self, actor: Actor, product_id: int, new_value: int) -> ProductModel:
        if new_value < 0:
            raise ValidationError("stock_quantity must be a non-negative integer.")
        if actor.role not in (Role.ADMIN, Role.VENDOR):
            raise Forbidden(f"Role '{actor.role.value}' may not edit stock.")

        with atomic(self.db, "update stock"):
            product = self.get_product(product_id)

            if actor.role == Role.VENDOR and product.vendor_id != actor.user_id:
                raise Forbidden("You can only edit stock of your own products.")

            # one statement, so it cannot interleave with an order's conditional decrement
            self.repo.set_stock(product_id, new_value)
            product = self.get_product(product_id)

        logger.info(f"Stock of product {product_id} set to {new_value} by {actor.role.value} {actor.user_id}")
        return product
