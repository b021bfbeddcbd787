import logging
from typing import List

from pydantic import ValidationError

from storefront.errors import ApiError, CartUnavailable
from storefront.schemas.cart_schemas import CartLine
from storefront.services.store_api import StoreApiClient, is_failure

logger = logging.getLogger(__name__)

CART_PATH = "/users/cart"
FALLBACK_IMAGE = "/products/product.png"


def normalize_cart_line(raw: dict) -> CartLine:
    """Flatten one backend cart entry (with nested product data) into a CartLine."""
    product = raw.get("item")
    if not isinstance(product, dict):
        # unexpanded product reference
        product = {"_id": product} if isinstance(product, str) else {}
    files = product.get("files") or []

    image = f"/uploads/{files[0]}" if files else FALLBACK_IMAGE

    return CartLine(
        product_ref=str(raw.get("proId") or product.get("_id") or ""),
        name=product.get("name") or raw.get("name") or "Product",
        unit_price=raw.get("price"),
        quantity=raw.get("quantity"),
        variant_label=raw.get("variantSize") or raw.get("color"),
        image_ref=image,
        mrp=raw.get("mrp"),
    )


class CartReader:
    def __init__(self, api: StoreApiClient):
        self.api = api

    def fetch_cart(self) -> List[CartLine]:
        try:
            body = self.api.get(CART_PATH)
        except ApiError as e:
            raise CartUnavailable(e.message or "Failed to load cart") from e

        if is_failure(body):
            raise CartUnavailable(body.get("message") or "Failed to load cart")

        result = body.get("result") or []
        if not isinstance(result, list):
            logger.error(f"Cart response has no item list: {body!r}")
            raise CartUnavailable("Failed to load cart")

        lines = []
        for raw in result:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed cart entry {raw!r}")
                continue
            try:
                line = normalize_cart_line(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid cart entry {raw!r}: {e.error_count()} error(s)")
                continue
            except (AttributeError, TypeError) as e:
                logger.warning(f"Skipping unreadable cart entry {raw!r}: {e}")
                continue
            if not line.product_ref:
                logger.warning(f"Skipping cart entry without product reference: {raw!r}")
                continue
            lines.append(line)

        return lines

    def clear_cart(self) -> None:
        try:
            body = self.api.delete(CART_PATH)
        except ApiError as e:
            raise CartUnavailable(e.message or "Failed to clear cart") from e

        if is_failure(body):
            raise CartUnavailable(body.get("message") or "Failed to clear cart")
