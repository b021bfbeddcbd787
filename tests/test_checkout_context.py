"""
Tests for storefront/services/checkout_context.py -- the checkout state holder.
"""

from conftest import raw_cart_entry
from storefront.constants.checkout_status import FailureStage, PaymentState
from storefront.constants.payment_method import PaymentMethod
from storefront.errors import ApiError
from storefront.schemas.payment_schemas import GatewayCallback


def network_calls(api):
    return len(api.calls)


class TestRefreshCart:
    def test_loads_and_normalizes(self, context, api):
        context.refresh_cart()

        assert context.cart_error is None
        assert context.cart_loading is False
        assert len(context.cart_items) == 1
        line = context.cart_items[0]
        assert line.product_ref == "p1"
        assert line.unit_price == 500
        assert line.quantity == 2
        assert line.image_ref == "/uploads/p1.jpg"

    def test_success_false_body_is_a_failure(self, context, api):
        context.cart_items = []
        api.responses[("GET", "/users/cart")] = {"success": False, "message": "Session expired"}

        context.refresh_cart()

        assert context.cart_error == "Session expired"
        assert context.cart_items == []

    def test_transport_failure_empties_cart(self, context, api):
        context.refresh_cart()
        api.responses[("GET", "/users/cart")] = ApiError("Could not reach the store")

        context.refresh_cart()

        assert context.cart_items == []
        assert context.cart_error == "Could not reach the store"
        assert context.snapshot().can_retry_cart is True

    def test_manual_retry_recovers(self, context, api):
        api.responses[("GET", "/users/cart")] = ApiError("down")
        context.refresh_cart()
        api.responses[("GET", "/users/cart")] = {"success": True, "result": [raw_cart_entry()]}

        context.refresh_cart()

        assert context.cart_error is None
        assert len(context.cart_items) == 1

    def test_unexpanded_product_does_not_escape(self, context, api):
        api.responses[("GET", "/users/cart")] = {"success": True, "result": [raw_cart_entry(item="64f0abc")]}

        context.refresh_cart()

        assert context.cart_error is None
        assert [line.product_ref for line in context.cart_items] == ["p1"]


class TestPlaceOrderGuards:
    def test_no_address(self, context, api):
        context.refresh_cart()
        calls_before = network_calls(api)

        result = context.place_order()

        assert result.success is False
        assert "address required" in result.reason.lower()
        assert network_calls(api) == calls_before
        assert context.order_error == result.reason

        totals = context.totals
        assert totals.item_total == 1000
        assert totals.delivery_fee == 40
        assert totals.discount == 100
        assert totals.total_amount == 940

    def test_empty_cart(self, context, api, address):
        context.set_shipping_address(address)

        result = context.place_order()

        assert result.success is False
        assert result.reason.lower() == "cart is empty"
        assert api.calls == []

    def test_incomplete_address(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address.model_copy(update={"phone": "  "}))
        calls_before = network_calls(api)

        result = context.place_order()

        assert result.success is False
        assert "incomplete" in result.reason
        assert network_calls(api) == calls_before

    def test_concurrent_submission_rejected(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        calls_before = network_calls(api)

        context._submit_lock.acquire()
        try:
            result = context.place_order()
        finally:
            context._submit_lock.release()

        assert result.success is False
        assert result.reason == "An order is already being placed"
        assert network_calls(api) == calls_before


class TestPlaceOrderCashOnDelivery:
    def test_success_resets_checkout(self, context, api, address):
        api.responses[("GET", "/users/cart")] = {
            "success": True,
            "result": [raw_cart_entry(price=1000, quantity=1)],
        }
        context.refresh_cart()
        context.set_shipping_address(address)
        context.set_payment_method("cash-on-delivery")

        result = context.place_order()

        assert result.success is True
        assert result.order_id == "ord_1"
        assert result.payment.state == PaymentState.DONE
        assert context.cart_items == []
        assert context.selected_address is None
        assert context.payment_method == PaymentMethod.ONLINE
        assert context.last_order_id == "ord_1"
        assert api.calls_to("DELETE", "/users/cart")
        assert api.calls_to("POST", "/razorpay/order") == []

    def test_order_payload(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        context.set_payment_method(PaymentMethod.CASH_ON_DELIVERY)

        context.place_order()

        _, _, payload = api.calls_to("POST", "/orders")[0]
        assert payload["paymentMethod"] == "cod"
        assert payload["itemTotal"] == 1000
        assert payload["deliveryFee"] == 40
        assert payload["discount"] == 100
        assert payload["totalAmount"] == 940
        assert payload["shippingAddress"]["pincode"] == "560038"
        assert payload["items"][0]["productId"] == "p1"
        assert payload["items"][0]["quantity"] == 2

    def test_backend_rejection_leaves_state(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        context.set_payment_method(PaymentMethod.CASH_ON_DELIVERY)
        api.responses[("POST", "/orders")] = {"success": False, "message": "Product not available: Kurta"}

        result = context.place_order()

        assert result.success is False
        assert result.reason == "Product not available: Kurta"
        assert context.order_error == "Product not available: Kurta"
        assert context.payment.failure_stage == FailureStage.ORDER
        assert len(context.cart_items) == 1
        assert context.selected_address == address
        assert context.payment_method == PaymentMethod.CASH_ON_DELIVERY
        assert context.order_loading is False

    def test_malformed_order_response_leaves_state(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        api.responses[("POST", "/orders")] = {"success": True, "data": "ord_1"}

        result = context.place_order()

        assert result.success is False
        assert context.order_error == "The store did not return an order number"
        assert len(context.cart_items) == 1
        assert context.selected_address == address
        assert api.calls_to("POST", "/razorpay/order") == []

    def test_transport_error_leaves_state(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        api.responses[("POST", "/orders")] = ApiError("Could not reach the store")

        result = context.place_order()

        assert result.success is False
        assert len(context.cart_items) == 1
        assert context.selected_address == address

    def test_retry_after_failure(self, context, api, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        context.set_payment_method(PaymentMethod.CASH_ON_DELIVERY)
        api.responses[("POST", "/orders")] = ApiError("down")
        assert context.place_order().success is False

        api.responses[("POST", "/orders")] = {"success": True, "data": {"_id": "ord_2"}}
        result = context.place_order()

        assert result.success is True
        assert result.order_id == "ord_2"
        assert context.order_error is None


class TestPlaceOrderOnline:
    def _place(self, context, address):
        context.refresh_cart()
        context.set_shipping_address(address)
        context.set_payment_method(PaymentMethod.ONLINE)
        return context.place_order()

    def test_waits_for_gateway(self, context, api, address):
        result = self._place(context, address)

        assert result.success is True
        flow = context.payment
        assert flow.state == PaymentState.AWAITING_GATEWAY_CALLBACK
        assert flow.gateway_session.gateway_order_id == "order_rzp_1"
        assert flow.gateway_session.widget_options["order_id"] == "order_rzp_1"
        assert context.cart_items == []

        _, _, payload = api.calls_to("POST", "/razorpay/order")[0]
        assert payload == {"amount": 940, "currency": "INR", "orderId": "ord_1"}

    def test_verified_payment(self, context, api, address):
        self._place(context, address)

        result = context.complete_payment(GatewayCallback(
            razorpay_order_id="order_rzp_1",
            razorpay_payment_id="pay_1",
            razorpay_signature="sig",
        ))

        assert result.success is True
        assert result.order_id == "ord_1"
        assert context.payment.state == PaymentState.DONE
        assert context.payment_error is None

    def test_gateway_failure_is_reported_as_payment_error(self, context, api, address):
        self._place(context, address)

        result = context.complete_payment(GatewayCallback(
            status="failure",
            error_description="Card declined",
        ))

        assert result.success is False
        assert result.order_id == "ord_1"
        assert context.payment_error == "Card declined"
        assert context.order_error is None
        assert context.payment.failure_stage == FailureStage.PAYMENT
        assert api.calls_to("POST", "/razorpay/verify") == []

    def test_gateway_session_failure_keeps_order(self, context, api, address):
        api.responses[("POST", "/razorpay/order")] = {"success": False, "message": "Gateway down"}

        result = self._place(context, address)

        assert result.success is True
        assert result.order_id == "ord_1"
        assert context.payment.state == PaymentState.FAILED
        assert context.payment_error == "Gateway down"

    def test_unreadable_gateway_amount_keeps_order(self, context, api, address):
        api.responses[("POST", "/razorpay/order")] = {"success": True, "orderId": "rzp", "amount": "n/a"}

        result = self._place(context, address)

        assert result.success is True
        assert result.order_id == "ord_1"
        assert context.payment.state == PaymentState.FAILED
        assert context.payment.failure_stage == FailureStage.PAYMENT
        assert context.payment_error == "Could not start online payment"
        assert context.cart_items == []
        assert context.selected_address is None

    def test_callback_without_pending_payment(self, context):
        result = context.complete_payment(GatewayCallback(
            razorpay_order_id="x", razorpay_payment_id="y", razorpay_signature="z",
        ))
        assert result.success is False
        assert result.reason == "No payment is awaiting confirmation"

    def test_terminal_flow_is_not_revisited(self, context, api, address):
        self._place(context, address)
        callback = GatewayCallback(
            razorpay_order_id="order_rzp_1",
            razorpay_payment_id="pay_1",
            razorpay_signature="sig",
        )
        assert context.complete_payment(callback).success is True

        second = context.complete_payment(callback)

        assert second.success is False
        assert len(api.calls_to("POST", "/razorpay/verify")) == 1


class TestSnapshot:
    def test_snapshot_reflects_state(self, context, address):
        context.refresh_cart()
        context.set_shipping_address(address)

        snap = context.snapshot()

        assert snap.selected_address == address
        assert snap.totals.total_amount == 940
        assert snap.payment_method == PaymentMethod.ONLINE
        assert snap.payment is None
