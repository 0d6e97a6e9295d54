# marketplace/api/__init__.py
from fastapi import FastAPI

from marketplace.api.errors import register_error_handlers
from marketplace.api.routers import admin, delivery, health, orders, products, vendor


def include_api(app: FastAPI) -> FastAPI:
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(vendor.router)
    app.include_router(delivery.router)
    app.include_router(products.router)
    return app
