from pydantic import BaseModel, Field
from typing import List, Optional

from storefront.constants.payment_method import DEFAULT_PAYMENT_METHOD, PaymentMethod
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.cart_schemas import CartLine
from storefront.schemas.payment_schemas import PaymentFlow


class Totals(BaseModel):
    item_total: int
    delivery_fee: int
    discount: int
    total_amount: int     # item_total + delivery_fee - discount


class CheckoutPreferences(BaseModel):
    """The part of checkout that survives a page reload."""

    shipping_address: Optional[ShippingAddress] = None
    payment_method: PaymentMethod = DEFAULT_PAYMENT_METHOD


class OrderDraft(BaseModel):
    lines: List[CartLine]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    totals: Totals

    def to_payload(self) -> dict:
        return {
            "items": [
                {
                    "productId": line.product_ref,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": line.unit_price,
                    "mrp": line.mrp,
                    "variantSize": line.variant_label,
                    "image": line.image_ref,
                }
                for line in self.lines
            ],
            "shippingAddress": self.shipping_address.to_wire(),
            "paymentMethod": self.payment_method.value,
            "totalAmount": self.totals.total_amount,
            "itemTotal": self.totals.item_total,
            "deliveryFee": self.totals.delivery_fee,
            "discount": self.totals.discount,
        }


class OrderResult(BaseModel):
    success: bool
    order_id: Optional[str] = None
    reason: Optional[str] = None
    payment: Optional[PaymentFlow] = None

    @classmethod
    def failure(cls, reason: str, order_id: Optional[str] = None, payment: Optional[PaymentFlow] = None):
        return cls(success=False, reason=reason, order_id=order_id, payment=payment)


class PaymentMethodUpdate(BaseModel):
    payment_method: PaymentMethod


class CheckoutSnapshot(BaseModel):
    cart_items: List[CartLine]
    cart_loading: bool
    cart_error: Optional[str] = None
    selected_address: Optional[ShippingAddress] = None
    payment_method: PaymentMethod
    order_loading: bool
    order_error: Optional[str] = None
    payment_error: Optional[str] = None
    totals: Totals
    payment: Optional[PaymentFlow] = None
    last_order_id: Optional[str] = None
    # for the UI's manual retry button
    can_retry_cart: bool = Field(default=False)
