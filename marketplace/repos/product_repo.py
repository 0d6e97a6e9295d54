# marketplace/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.statuses import ProductStatus


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        # always the persisted row, never a stale identity-map copy
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        # UPDATE products SET stock_quantity = stock_quantity - :q
        # WHERE id = :id AND status = 'active' AND stock_quantity >= :q
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.status == ProductStatus.ACTIVE.value,
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def set_stock(self, product_id: int, new_value: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock_quantity=new_value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
