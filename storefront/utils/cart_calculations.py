from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.config import settings
from storefront.schemas.cart_schemas import CartLine, CartSummary
from storefront.schemas.checkout_schemas import Totals


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_totals(
    lines: Iterable[CartLine],
    delivery_fee: int | None = None,
    discount_rate: float | None = None,
) -> Totals:
    """
    Checkout totals for the current cart.

    Flat delivery fee whenever the cart has at least one line and a flat
    percentage discount on the item total.
    """
    lines = list(lines)
    fee = settings.DELIVERY_FEE if delivery_fee is None else delivery_fee
    rate = settings.DISCOUNT_RATE if discount_rate is None else discount_rate

    item_total = sum(line.unit_price * line.quantity for line in lines)
    delivery = fee if lines else 0
    # str() keeps 0.1 from turning into 0.1000000000000000055...
    discount = round_half_up(Decimal(item_total) * Decimal(str(rate)))

    return Totals(
        item_total=item_total,
        delivery_fee=delivery,
        discount=discount,
        total_amount=item_total + delivery - discount,
    )


def calculate_cart_summary(
    lines: Iterable[CartLine],
    shipping_fee_threshold: int = 2000,
    default_shipping_fee: int = 40,
) -> CartSummary:
    """Cart page summary: MRP savings and free shipping over a threshold."""
    subtotal = 0
    mrp_total = 0

    for line in lines:
        subtotal += line.line_total
        if line.mrp is None:
            # no MRP on record, count the selling price
            mrp_total += line.line_total
        else:
            mrp_total += line.mrp * line.quantity

    shipping = 0 if subtotal >= shipping_fee_threshold else default_shipping_fee
    if subtotal == 0:
        shipping = 0

    return CartSummary(
        subtotal=subtotal,
        mrp_total=mrp_total,
        shipping=shipping,
        savings=max(0, mrp_total - subtotal),
        total=max(0, subtotal + shipping),
    )
