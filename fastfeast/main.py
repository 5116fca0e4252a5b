"""
FastFeast API - restaurants, cart, orders and payments in one process.

    uvicorn fastfeast.main:app --reload
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fastfeast import __version__, config
from fastfeast.database import Base, SessionLocal, engine
from fastfeast.errors import register_exception_handlers
from fastfeast.events import events
from fastfeast.init_data import seed_all

from fastfeast.user_service import models as user_models  # noqa: F401
from fastfeast.restaurant_service import models as restaurant_models  # noqa: F401
from fastfeast.cart_service import models as cart_models  # noqa: F401
from fastfeast.order_service import models as order_models  # noqa: F401

from fastfeast.user_service.main import router as user_router
from fastfeast.restaurant_service.main import router as restaurant_router
from fastfeast.cart_service.main import router as cart_router
from fastfeast.order_service.main import router as order_router
from fastfeast.payment_service.main import router as payment_router
from fastfeast.notification_service.main import router as notification_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if config.SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            seed_all(db)
        finally:
            db.close()
    await events.start()
    logger.info("FastFeast API ready")
    yield
    await events.stop()


app = FastAPI(
    title="FastFeast API",
    description="Browse restaurants, manage a cart, place orders and pay with Stripe",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(user_router)
app.include_router(restaurant_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(payment_router)
app.include_router(notification_router)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "fastfeast-api"}


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
