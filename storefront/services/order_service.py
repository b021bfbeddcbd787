import logging

from storefront.errors import ApiError, OrderRejected
from storefront.schemas.checkout_schemas import OrderDraft
from storefront.services.store_api import StoreApiClient, is_failure

logger = logging.getLogger(__name__)

ORDERS_PATH = "/orders"


def create_order(api: StoreApiClient, draft: OrderDraft) -> str:
    """Submit the draft and return the backend's order id."""
    try:
        body = api.post(ORDERS_PATH, json=draft.to_payload())
    except ApiError as e:
        raise OrderRejected(e.message or "Failed to place order") from e

    if is_failure(body):
        raise OrderRejected(body.get("message") or "Failed to place order")

    data = body.get("data")
    order_id = data.get("_id") if isinstance(data, dict) else None
    if not order_id:
        logger.error(f"Order created without an id in response: {body!r}")
        raise OrderRejected("The store did not return an order number")

    logger.info(f"Order {order_id} created ({draft.payment_method.value}, total {draft.totals.total_amount})")
    return str(order_id)


def get_order(api: StoreApiClient, order_id: str) -> dict:
    try:
        body = api.get(f"{ORDERS_PATH}/{order_id}")
    except ApiError as e:
        raise OrderRejected(e.message or "Order not found") from e

    if is_failure(body):
        raise OrderRejected(body.get("message") or "Order not found")

    data = body.get("data")
    return data if isinstance(data, dict) else {}
