import json
import logging

from pydantic import ValidationError

from storefront.constants.payment_method import DEFAULT_PAYMENT_METHOD, PaymentMethod
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.checkout_schemas import CheckoutPreferences
from storefront.utils.client_storage import ClientStorage

logger = logging.getLogger(__name__)

ADDRESS_KEY = "checkout_address"
PAYMENT_METHOD_KEY = "checkout_payment_method"


class CheckoutStorage:
    """Persists the selected address and payment method between page loads."""

    def __init__(self, storage: ClientStorage):
        self.storage = storage

    def load(self) -> CheckoutPreferences:
        return CheckoutPreferences(
            shipping_address=self._load_address(),
            payment_method=self._load_payment_method(),
        )

    def save(self, preferences: CheckoutPreferences) -> None:
        if preferences.shipping_address is None:
            self.storage.remove_item(ADDRESS_KEY)
        else:
            self.storage.set_item(ADDRESS_KEY, preferences.shipping_address.model_dump_json(by_alias=True))

        self.storage.set_item(PAYMENT_METHOD_KEY, preferences.payment_method.value)

    def _load_address(self):
        stored = self.storage.get_item(ADDRESS_KEY)
        if not stored:
            return None

        try:
            return ShippingAddress.model_validate(json.loads(stored))
        except (ValueError, ValidationError):
            logger.warning("Ignoring corrupt stored checkout address")
            return None

    def _load_payment_method(self) -> PaymentMethod:
        stored = self.storage.get_item(PAYMENT_METHOD_KEY)
        if not stored:
            return DEFAULT_PAYMENT_METHOD

        try:
            return PaymentMethod(stored)
        except ValueError:
            logger.warning(f"Ignoring unknown stored payment method {stored!r}")
            return DEFAULT_PAYMENT_METHOD
