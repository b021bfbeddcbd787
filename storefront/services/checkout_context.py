import logging
import threading
from typing import List, Optional

from storefront.constants.checkout_status import FailureStage, PaymentState
from storefront.constants.payment_method import DEFAULT_PAYMENT_METHOD, PaymentMethod
from storefront.errors import CartUnavailable, StorageUnavailable
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.cart_schemas import CartLine
from storefront.schemas.checkout_schemas import (
    CheckoutPreferences,
    CheckoutSnapshot,
    OrderDraft,
    OrderResult,
    Totals,
)
from storefront.schemas.payment_schemas import GatewayCallback, PaymentFlow
from storefront.services.cart_service import CartReader
from storefront.services.checkout_storage import CheckoutStorage
from storefront.services.payment_service import OrderSubmitter
from storefront.utils.cart_calculations import calculate_totals

logger = logging.getLogger(__name__)

ADDRESS_REQUIRED = "Delivery address required"
ADDRESS_INCOMPLETE = "Delivery address is incomplete"
CART_EMPTY = "Cart is empty"
ORDER_IN_PROGRESS = "An order is already being placed"
NO_PENDING_PAYMENT = "No payment is awaiting confirmation"


class CheckoutContext:
    """
    State holder for one in-progress checkout.

    Every operation reports failures through the ``*_error`` attributes and
    its return value; nothing here raises to the UI. Address and payment
    method are restored from storage on construction and written back on
    every change.
    """

    def __init__(
        self,
        cart_reader: CartReader,
        submitter: OrderSubmitter,
        storage: Optional[CheckoutStorage] = None,
    ):
        self.cart_reader = cart_reader
        self.submitter = submitter
        self.storage = storage

        self.cart_items: List[CartLine] = []
        self.cart_loading = False
        self.cart_error: Optional[str] = None

        self.selected_address: Optional[ShippingAddress] = None
        self.payment_method: PaymentMethod = DEFAULT_PAYMENT_METHOD

        self.order_loading = False
        self.order_error: Optional[str] = None
        self.payment_error: Optional[str] = None
        self.payment: Optional[PaymentFlow] = None
        self.last_order_id: Optional[str] = None

        # held for the whole of place_order / complete_payment
        self._submit_lock = threading.Lock()

        self.restore()

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    @property
    def preferences(self) -> CheckoutPreferences:
        return CheckoutPreferences(
            shipping_address=self.selected_address,
            payment_method=self.payment_method,
        )

    def restore(self):
        if self.storage is None:
            return

        try:
            preferences = self.storage.load()
        except StorageUnavailable as e:
            logger.warning(f"Could not restore checkout state: {e.message}")
            return

        self.selected_address = preferences.shipping_address
        self.payment_method = preferences.payment_method

    def save(self):
        if self.storage is None:
            return

        try:
            self.storage.save(self.preferences)
        except StorageUnavailable as e:
            # in-memory state stays valid for this session
            logger.warning(f"Could not persist checkout state: {e.message}")

    # ------------------------------------------------------------------
    # cart
    # ------------------------------------------------------------------

    @property
    def totals(self) -> Totals:
        return calculate_totals(self.cart_items)

    def refresh_cart(self):
        self.cart_loading = True
        self.cart_error = None

        try:
            self.cart_items = self.cart_reader.fetch_cart()
        except CartUnavailable as e:
            logger.error(f"Error refreshing cart: {e.message}")
            self.cart_error = e.message
            self.cart_items = []
        finally:
            self.cart_loading = False

    def clear_cart_completely(self):
        self.cart_items = []
        self.clear_checkout_state()

        try:
            self.cart_reader.clear_cart()
        except CartUnavailable as e:
            logger.error(f"Error clearing cart on the store: {e.message}")

    # ------------------------------------------------------------------
    # address / payment method
    # ------------------------------------------------------------------

    def set_shipping_address(self, address: ShippingAddress):
        self.selected_address = address
        self.save()

    def set_payment_method(self, method):
        self.payment_method = PaymentMethod(method)
        self.save()

    def clear_checkout_state(self):
        self.selected_address = None
        self.payment_method = DEFAULT_PAYMENT_METHOD
        self.save()

    # ------------------------------------------------------------------
    # order
    # ------------------------------------------------------------------

    def build_draft(self) -> OrderDraft:
        return OrderDraft(
            lines=list(self.cart_items),
            shipping_address=self.selected_address,
            payment_method=self.payment_method,
            totals=self.totals,
        )

    def place_order(self) -> OrderResult:
        if not self._submit_lock.acquire(blocking=False):
            return OrderResult.failure(ORDER_IN_PROGRESS)

        try:
            return self._place_order()
        finally:
            self._submit_lock.release()

    def _place_order(self) -> OrderResult:
        reason = self._precondition_failure()
        if reason:
            self.order_error = reason
            return OrderResult.failure(reason)

        self.order_loading = True
        self.order_error = None
        self.payment_error = None

        try:
            flow = self.submitter.submit(self.build_draft())
        finally:
            self.order_loading = False

        self.payment = flow

        if flow.state == PaymentState.FAILED and flow.failure_stage == FailureStage.ORDER:
            self.order_error = flow.error
            return OrderResult.failure(flow.error, payment=flow)

        # the backend owns the order now, this checkout is spent
        self.last_order_id = flow.order_id
        self.clear_cart_completely()

        if flow.state == PaymentState.FAILED:
            self.payment_error = flow.error
            logger.warning(f"Order {flow.order_id} placed but payment could not start: {flow.error}")

        return OrderResult(success=True, order_id=flow.order_id, payment=flow)

    def _precondition_failure(self) -> Optional[str]:
        if self.selected_address is None:
            return ADDRESS_REQUIRED
        if not self.cart_items:
            return CART_EMPTY
        if not self.selected_address.is_complete():
            return ADDRESS_INCOMPLETE
        return None

    def complete_payment(self, callback: GatewayCallback) -> OrderResult:
        if not self._submit_lock.acquire(blocking=False):
            return OrderResult.failure(ORDER_IN_PROGRESS)

        try:
            flow = self.payment
            if flow is None or not flow.awaiting_callback:
                self.payment_error = NO_PENDING_PAYMENT
                return OrderResult.failure(NO_PENDING_PAYMENT, order_id=flow.order_id if flow else None)

            self.submitter.complete(flow, callback)

            if flow.state == PaymentState.DONE:
                self.payment_error = None
                return OrderResult(success=True, order_id=flow.order_id, payment=flow)

            self.payment_error = flow.error
            return OrderResult.failure(flow.error, order_id=flow.order_id, payment=flow)
        finally:
            self._submit_lock.release()

    def snapshot(self) -> CheckoutSnapshot:
        return CheckoutSnapshot(
            cart_items=self.cart_items,
            cart_loading=self.cart_loading,
            cart_error=self.cart_error,
            selected_address=self.selected_address,
            payment_method=self.payment_method,
            order_loading=self.order_loading,
            order_error=self.order_error,
            payment_error=self.payment_error,
            totals=self.totals,
            payment=self.payment,
            last_order_id=self.last_order_id,
            can_retry_cart=self.cart_error is not None,
        )
