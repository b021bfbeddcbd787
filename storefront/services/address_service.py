import logging
from typing import List

from pydantic import ValidationError

from storefront.errors import ApiError, CheckoutError
from storefront.schemas.address_schemas import AddressBookEntry
from storefront.services.store_api import StoreApiClient, is_failure

logger = logging.getLogger(__name__)

ADDRESSES_PATH = "/users/addresses"


def list_addresses(api: StoreApiClient) -> List[AddressBookEntry]:
    """The user's saved addresses, default address first."""
    try:
        body = api.get(ADDRESSES_PATH)
    except ApiError as e:
        raise CheckoutError(e.message or "Failed to load addresses") from e

    if is_failure(body):
        raise CheckoutError(body.get("message") or "Failed to load addresses")

    raw_entries = body.get("data")
    if raw_entries is None:
        raw_entries = body.get("addresses") or []

    entries = []
    for raw in raw_entries:
        try:
            entries.append(AddressBookEntry.model_validate(raw))
        except ValidationError:
            logger.warning(f"Skipping malformed address {raw!r}")

    entries.sort(key=lambda a: not a.is_default)
    return entries
