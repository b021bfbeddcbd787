from enum import Enum


class PaymentState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ORDER_CREATED = "order_created"
    AWAITING_GATEWAY_CALLBACK = "awaiting_gateway_callback"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    PaymentState.IDLE: [PaymentState.SUBMITTING],
    PaymentState.SUBMITTING: [PaymentState.ORDER_CREATED, PaymentState.FAILED],
    PaymentState.ORDER_CREATED: [
        PaymentState.DONE,
        PaymentState.AWAITING_GATEWAY_CALLBACK,
        PaymentState.FAILED,
    ],
    PaymentState.AWAITING_GATEWAY_CALLBACK: [PaymentState.VERIFYING, PaymentState.FAILED],
    PaymentState.VERIFYING: [PaymentState.DONE, PaymentState.FAILED],
    PaymentState.DONE: [],
    PaymentState.FAILED: [],
}

TERMINAL_STATES = {PaymentState.DONE, PaymentState.FAILED}


class FailureStage(str, Enum):
    ORDER = "order"
    PAYMENT = "payment"
