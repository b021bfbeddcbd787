from pydantic import BaseModel, Field
from typing import Optional


class CartLine(BaseModel):
    product_ref: str
    name: str
    unit_price: int = Field(ge=0)        # whole rupees
    quantity: int = Field(ge=1)
    variant_label: Optional[str] = None
    image_ref: str
    mrp: Optional[int] = Field(default=None, ge=0)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class CartSummary(BaseModel):
    subtotal: int
    mrp_total: int
    shipping: int         # free at or above the threshold
    savings: int          # mrp_total - subtotal, never negative
    total: int
