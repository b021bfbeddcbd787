from fastapi import APIRouter, Depends, HTTPException

from storefront.dependencies.checkout import get_checkout, get_store_api
from storefront.errors import CheckoutError
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.checkout_schemas import PaymentMethodUpdate
from storefront.schemas.payment_schemas import GatewayCallback
from storefront.services import order_service
from storefront.services.address_service import list_addresses
from storefront.services.checkout_context import CheckoutContext, ORDER_IN_PROGRESS
from storefront.services.store_api import StoreApiClient
from storefront.utils.cart_calculations import calculate_cart_summary

router = APIRouter()


@router.get("/")
def get_checkout_state(checkout: CheckoutContext = Depends(get_checkout)):
    return checkout.snapshot()


@router.post("/cart/refresh")
def refresh_cart(checkout: CheckoutContext = Depends(get_checkout)):
    checkout.refresh_cart()
    return checkout.snapshot()


@router.get("/cart/summary")
def cart_summary(checkout: CheckoutContext = Depends(get_checkout)):
    return calculate_cart_summary(checkout.cart_items)


@router.delete("/cart")
def clear_cart(checkout: CheckoutContext = Depends(get_checkout)):
    checkout.clear_cart_completely()
    return {"message": "Cart cleared"}


@router.get("/addresses")
def address_book(api: StoreApiClient = Depends(get_store_api)):
    try:
        return {"addresses": list_addresses(api)}
    except CheckoutError as e:
        raise HTTPException(502, e.message)


@router.put("/address")
def select_address(
    address: ShippingAddress,
    checkout: CheckoutContext = Depends(get_checkout),
):
    checkout.set_shipping_address(address)
    return {"message": "Address saved", "address": checkout.selected_address}


@router.put("/payment-method")
def select_payment_method(
    data: PaymentMethodUpdate,
    checkout: CheckoutContext = Depends(get_checkout),
):
    checkout.set_payment_method(data.payment_method)
    return {"message": "Payment method saved", "payment_method": checkout.payment_method}


@router.post("/place-order")
def place_order(checkout: CheckoutContext = Depends(get_checkout)):
    result = checkout.place_order()

    if not result.success:
        if result.reason == ORDER_IN_PROGRESS:
            raise HTTPException(409, result.reason)
        raise HTTPException(400, result.reason)

    return result


@router.get("/payment")
def payment_status(checkout: CheckoutContext = Depends(get_checkout)):
    if checkout.payment is None:
        raise HTTPException(404, "No order has been placed")
    return checkout.payment


@router.post("/payment/callback")
def payment_callback(
    callback: GatewayCallback,
    checkout: CheckoutContext = Depends(get_checkout),
):
    result = checkout.complete_payment(callback)

    if not result.success:
        if result.reason == ORDER_IN_PROGRESS:
            raise HTTPException(409, result.reason)
        raise HTTPException(400, result.reason)

    return result


@router.get("/orders/{order_id}")
def order_details(order_id: str, api: StoreApiClient = Depends(get_store_api)):
    try:
        return order_service.get_order(api, order_id)
    except CheckoutError as e:
        raise HTTPException(502, e.message)


@router.delete("/")
def reset_checkout(checkout: CheckoutContext = Depends(get_checkout)):
    checkout.clear_checkout_state()
    return {"message": "Checkout reset"}
