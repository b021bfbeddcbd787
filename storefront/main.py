import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.database import create_db_and_tables, engine
from storefront.dependencies.checkout import build_checkout_context
from storefront.errors import StorageUnavailable
from storefront.routes import checkout, health
from storefront.utils.client_storage import ClientStorage
from storefront.utils.token import check_token_format

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()

    if getattr(app.state, "checkout", None) is None:
        try:
            check_token_format(ClientStorage(engine))
        except StorageUnavailable:
            logger.exception("Token check skipped, storage unavailable")

        app.state.checkout = build_checkout_context()
        app.state.checkout.refresh_cart()
    yield


app = FastAPI(title="Storefront Checkout", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "checkout": [
            "/checkout", "/checkout/cart/refresh", "/checkout/cart/summary",
            "/checkout/cart", "/checkout/addresses", "/checkout/address",
            "/checkout/payment-method", "/checkout/place-order",
            "/checkout/payment", "/checkout/payment/callback",
            "/checkout/orders/{order_id}"
        ],
        "health": ["/health/check"]
    }
