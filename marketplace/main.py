# marketplace/main.py
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from marketplace.api import include_api
from marketplace.data.database import init_db
from marketplace.utils.logging import add_context, clear_context, configure_logging, get_logger
from marketplace.utils.settings import APP_HOST, APP_PORT, ENVIRONMENT

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting order service", environment=ENVIRONMENT)
    init_db()
    yield
    logger.info("Order service stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Order Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            user_id=request.headers.get("x-user-id"),
        )
        try:
            return await call_next(request)
        finally:
            clear_context()

    return include_api(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
