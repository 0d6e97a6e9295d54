from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    vendor_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(Numeric(10, 2), nullable=False)

    # snapshot for historical display, never re-read from the product
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(64), nullable=True)
    product_image_url = Column(String(512), nullable=True)

    item_status = Column(String(32), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    order = relationship("OrderModel", back_populates="items")

    __table_args__ = (
        UniqueConstraint("order_id", "product_id", name="unique_order_product_item"),
        CheckConstraint("quantity > 0", name="order_items_quantity_positive"),
    )