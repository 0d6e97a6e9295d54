#import of all models so SQLAlchemy registers them in Base.metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel

__all__ = ["UserModel", "ProductModel", "OrderModel", "OrderItemModel"]
