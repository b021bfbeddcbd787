from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class ShippingAddress(BaseModel):
    """Shipping address as the storefront backend and local storage spell it."""

    model_config = ConfigDict(populate_by_name=True)

    recipient_name: str = Field(alias="name")
    address_lines: List[str] = Field(alias="address")
    city: str
    state: str
    postal_code: str = Field(alias="pincode")
    phone: str

    @field_validator("address_lines", mode="before")
    @classmethod
    def _split_single_line(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("postal_code", "phone", mode="before")
    @classmethod
    def _stringify(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    def is_complete(self) -> bool:
        scalars = [self.recipient_name, self.city, self.state, self.postal_code, self.phone]
        if not all(s and s.strip() for s in scalars):
            return False
        return bool(self.address_lines) and all(line.strip() for line in self.address_lines)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class AddressBookEntry(ShippingAddress):
    id: Optional[str] = Field(default=None, alias="_id")
    is_default: bool = Field(default=False, alias="isDefault")

    def as_shipping_address(self) -> ShippingAddress:
        return ShippingAddress.model_validate(
            self.model_dump(by_alias=True, exclude={"id", "is_default"})
        )
