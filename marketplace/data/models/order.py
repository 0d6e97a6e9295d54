from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    # user ids come from the identity provider, no foreign key to users
    user_id = Column(Integer, nullable=False, index=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)

    payment_method = Column(String(50), nullable=True)
    payment_status = Column(String(32), nullable=False, default="pending")  # pending, paid, failed, refunded
    transaction_id = Column(String(255), nullable=True, unique=True)

    shipping_method = Column(String(50), nullable=True)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    notes_to_vendor = Column(Text, nullable=True)

    status = Column(String(32), nullable=False, default="pending_payment", index=True)
    delivery_person_id = Column(Integer, nullable=True, index=True)
    tracking_number = Column(String(255), nullable=True)
    estimated_delivery_date = Column(Date, nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
