from fastapi import Request

from storefront.database import engine as default_engine
from storefront.services.cart_service import CartReader
from storefront.services.checkout_context import CheckoutContext
from storefront.services.checkout_storage import CheckoutStorage
from storefront.services.payment_service import OrderSubmitter
from storefront.services.store_api import StoreApiClient
from storefront.utils.client_storage import ClientStorage


def build_checkout_context(engine=None, api: StoreApiClient | None = None) -> CheckoutContext:
    storage = ClientStorage(engine or default_engine)
    api = api or StoreApiClient(storage=storage)

    return CheckoutContext(
        cart_reader=CartReader(api),
        submitter=OrderSubmitter(api),
        storage=CheckoutStorage(storage),
    )


def get_checkout(request: Request) -> CheckoutContext:
    return request.app.state.checkout


def get_store_api(request: Request) -> StoreApiClient:
    return request.app.state.checkout.cart_reader.api
