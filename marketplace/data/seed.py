# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import SessionLocal, init_db, transaction
from marketplace.data.models import ProductModel, UserModel
from marketplace.domain.statuses import ProductStatus, Role
from marketplace.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

DEMO_USERS = [
    (1, "Demo Customer", Role.CUSTOMER),
    (2, "Demo Vendor", Role.VENDOR),
    (3, "Demo Admin", Role.ADMIN),
    (4, "Demo Courier", Role.DELIVERY_PERSON),
]

DEMO_PRODUCTS = [
    ("Espresso Beans 1kg", "ESP-1KG", Decimal("10.00"), 5, ProductStatus.ACTIVE),
    ("Ceramic Mug", "MUG-CER", Decimal("6.50"), 40, ProductStatus.ACTIVE),
    ("Pour-over Kettle", "KET-PO", Decimal("34.90"), 2, ProductStatus.ACTIVE),
    ("Grinder (discontinued)", "GRD-OLD", Decimal("79.00"), 3, ProductStatus.INACTIVE),
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            logger.info("Seed skipped, users already present")
            return

        with transaction(db):
            db.add_all([UserModel(id=uid, name=name, role=role.value) for uid, name, role in DEMO_USERS])
            db.flush()
            vendor_id = next(uid for uid, _, role in DEMO_USERS if role == Role.VENDOR)
            db.add_all(
                [
                    ProductModel(
                        vendor_id=vendor_id,
                        name=name,
                        sku=sku,
                        price=price,
                        stock_quantity=stock,
                        status=status.value,
                    )
                    for name, sku, price, stock, status in DEMO_PRODUCTS
                ]
            )

        logger.info("Seeded demo data", users=len(DEMO_USERS), products=len(DEMO_PRODUCTS))
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    init_db()
    seed()
