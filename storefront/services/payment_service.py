import logging
from typing import Optional

from storefront.config import settings
from storefront.constants.checkout_status import FailureStage, PaymentState
from storefront.constants.payment_method import PaymentMethod
from storefront.errors import ApiError, InvalidTransition, OrderRejected, PaymentFailed
from storefront.schemas.checkout_schemas import OrderDraft
from storefront.schemas.payment_schemas import GatewayCallback, GatewaySession, PaymentFlow
from storefront.services import order_service
from storefront.services.store_api import StoreApiClient, is_failure

logger = logging.getLogger(__name__)

GATEWAY_ORDER_PATH = "/razorpay/order"
GATEWAY_VERIFY_PATH = "/razorpay/verify"


class OrderSubmitter:
    """
    Places an order and walks it through the payment handoff.

    Cash on delivery finishes as soon as the order exists. Online payment
    stops in ``awaiting_gateway_callback`` with a Razorpay session the UI
    opens in the checkout widget; the widget's result comes back through
    :meth:`complete`.
    """

    def __init__(
        self,
        api: StoreApiClient,
        razorpay_key_id: Optional[str] = None,
        store_name: Optional[str] = None,
        currency: Optional[str] = None,
    ):
        self.api = api
        self.razorpay_key_id = razorpay_key_id if razorpay_key_id is not None else settings.RAZORPAY_KEY_ID
        self.store_name = store_name or settings.STORE_NAME
        self.currency = currency or settings.CURRENCY

    def submit(self, draft: OrderDraft) -> PaymentFlow:
        flow = PaymentFlow(payment_method=draft.payment_method)
        flow.move_to(PaymentState.SUBMITTING)

        try:
            flow.order_id = order_service.create_order(self.api, draft)
        except OrderRejected as e:
            flow.fail(FailureStage.ORDER, e.message)
            return flow

        flow.move_to(PaymentState.ORDER_CREATED)

        if draft.payment_method == PaymentMethod.CASH_ON_DELIVERY:
            flow.move_to(PaymentState.DONE)
            return flow

        try:
            flow.gateway_session = self.create_gateway_session(flow.order_id, draft)
        except PaymentFailed as e:
            # the order exists on the backend but stays unpaid
            flow.fail(FailureStage.PAYMENT, e.message)
            return flow

        flow.move_to(PaymentState.AWAITING_GATEWAY_CALLBACK)
        return flow

    def create_gateway_session(self, order_id: str, draft: OrderDraft) -> GatewaySession:
        payload = {
            "amount": draft.totals.total_amount,
            "currency": self.currency,
            "orderId": order_id,
        }

        try:
            body = self.api.post(GATEWAY_ORDER_PATH, json=payload)
        except ApiError as e:
            raise PaymentFailed(e.message or "Could not start online payment") from e

        if is_failure(body) or not body.get("orderId"):
            raise PaymentFailed(body.get("message") or "Could not start online payment")

        try:
            session = GatewaySession(
                gateway_order_id=body["orderId"],
                internal_order_id=order_id,
                amount=int(body.get("amount") or draft.totals.total_amount * 100),
                currency=body.get("currency") or self.currency,
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Unreadable gateway session for order {order_id}: {body!r} ({e})")
            raise PaymentFailed("Could not start online payment") from e

        session.widget_options = self.build_widget_options(session, draft)
        return session

    def build_widget_options(self, session: GatewaySession, draft: OrderDraft) -> dict:
        address = draft.shipping_address
        return {
            "key": self.razorpay_key_id,
            "amount": session.amount,
            "currency": session.currency,
            "name": self.store_name,
            "description": f"Order #{session.internal_order_id}",
            "order_id": session.gateway_order_id,
            "prefill": {
                "name": address.recipient_name,
                "contact": address.phone,
            },
            "notes": {"orderId": session.internal_order_id},
        }

    def complete(self, flow: PaymentFlow, callback: GatewayCallback) -> PaymentFlow:
        if flow.state != PaymentState.AWAITING_GATEWAY_CALLBACK:
            raise InvalidTransition(flow.state.value, PaymentState.VERIFYING.value)

        if callback.status == "failure":
            logger.warning(f"Payment for order {flow.order_id} failed in gateway: {callback.error_description}")
            flow.fail(FailureStage.PAYMENT, callback.error_description or "Payment was not completed")
            return flow

        missing = [
            name for name in ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")
            if not getattr(callback, name)
        ]
        if missing:
            flow.fail(FailureStage.PAYMENT, f"Incomplete payment confirmation: missing {', '.join(missing)}")
            return flow

        if callback.razorpay_order_id != flow.gateway_session.gateway_order_id:
            logger.error(
                f"Gateway order mismatch for order {flow.order_id}: "
                f"expected {flow.gateway_session.gateway_order_id}, got {callback.razorpay_order_id}"
            )
            flow.fail(FailureStage.PAYMENT, "Payment confirmation does not match this order")
            return flow

        flow.move_to(PaymentState.VERIFYING)

        try:
            body = self.api.post(GATEWAY_VERIFY_PATH, json={
                "razorpay_order_id": callback.razorpay_order_id,
                "razorpay_payment_id": callback.razorpay_payment_id,
                "razorpay_signature": callback.razorpay_signature,
                "orderId": flow.order_id,
            })
        except ApiError as e:
            flow.fail(FailureStage.PAYMENT, e.message or "Payment verification failed")
            return flow

        if is_failure(body):
            flow.fail(FailureStage.PAYMENT, body.get("message") or "Payment verification failed")
            return flow

        logger.info(f"Payment {callback.razorpay_payment_id} verified for order {flow.order_id}")
        flow.move_to(PaymentState.DONE)
        return flow
