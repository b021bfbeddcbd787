"""
Shared fixtures: in-memory storage, a scripted stand-in for the storefront
backend and ready-made checkout contexts.
"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from storefront.database import create_db_and_tables
from storefront.errors import ApiError
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.cart_schemas import CartLine
from storefront.services.cart_service import CartReader
from storefront.services.checkout_context import CheckoutContext
from storefront.services.checkout_storage import CheckoutStorage
from storefront.services.payment_service import OrderSubmitter
from storefront.utils.client_storage import ClientStorage


class FakeStoreApi:
    """Answers (method, path) pairs from a table and records every call."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def request(self, method, path, json=None, params=None):
        self.calls.append((method, path, json))
        response = self.responses.get((method, path))
        if response is None:
            raise ApiError(f"No stub for {method} {path}", 404)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, json=None):
        return self.request("POST", path, json=json)

    def delete(self, path):
        return self.request("DELETE", path)

    def calls_to(self, method, path):
        return [c for c in self.calls if c[0] == method and c[1] == path]


def raw_cart_entry(pro_id="p1", price=500, quantity=2, name="Kurta", **extra):
    entry = {
        "proId": pro_id,
        "item": {"name": name, "files": [f"{pro_id}.jpg"]},
        "price": price,
        "mrp": price + 100,
        "quantity": quantity,
        "variantSize": "M",
    }
    entry.update(extra)
    return entry


def make_line(price=500, quantity=1, product_ref="p1", mrp=None):
    return CartLine(
        product_ref=product_ref,
        name="Kurta",
        unit_price=price,
        quantity=quantity,
        variant_label="M",
        image_ref="/products/product.png",
        mrp=mrp,
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def client_storage(engine):
    return ClientStorage(engine)


@pytest.fixture
def checkout_storage(client_storage):
    return CheckoutStorage(client_storage)


@pytest.fixture
def address():
    return ShippingAddress(
        name="Asha Rao",
        address=["12 MG Road", "Indiranagar"],
        city="Bengaluru",
        state="Karnataka",
        pincode="560038",
        phone="9876543210",
    )


@pytest.fixture
def api():
    return FakeStoreApi({
        ("GET", "/users/cart"): {"success": True, "result": [raw_cart_entry()]},
        ("DELETE", "/users/cart"): {"success": True},
        ("POST", "/orders"): {"success": True, "data": {"_id": "ord_1"}},
        ("POST", "/razorpay/order"): {
            "success": True,
            "orderId": "order_rzp_1",
            "amount": 94000,
            "currency": "INR",
        },
        ("POST", "/razorpay/verify"): {"success": True, "message": "Payment verified"},
    })


@pytest.fixture
def submitter(api):
    return OrderSubmitter(api, razorpay_key_id="rzp_test_key", store_name="Test Store", currency="INR")


@pytest.fixture
def make_context(api, submitter, checkout_storage):
    def _make(storage=checkout_storage):
        return CheckoutContext(
            cart_reader=CartReader(api),
            submitter=submitter,
            storage=storage,
        )
    return _make


@pytest.fixture
def context(make_context):
    return make_context()
