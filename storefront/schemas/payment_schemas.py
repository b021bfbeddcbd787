from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from storefront.constants.checkout_status import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATES,
    FailureStage,
    PaymentState,
)
from storefront.constants.payment_method import PaymentMethod
from storefront.errors import InvalidTransition


class GatewaySession(BaseModel):
    """Razorpay order created server side for one internal order."""

    gateway_order_id: str
    internal_order_id: str
    amount: int                 # paise, as the gateway reports it
    currency: str = "INR"
    widget_options: Dict[str, Any] = Field(default_factory=dict)


class GatewayCallback(BaseModel):
    """Completion event reported by the Razorpay checkout widget."""

    status: Literal["success", "failure"] = "success"
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    error_description: Optional[str] = None


class PaymentFlow(BaseModel):
    """One order submission and, for online payment, its gateway handoff."""

    payment_method: PaymentMethod
    state: PaymentState = PaymentState.IDLE
    order_id: Optional[str] = None
    gateway_session: Optional[GatewaySession] = None
    error: Optional[str] = None
    failure_stage: Optional[FailureStage] = None
    history: List[PaymentState] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def awaiting_callback(self) -> bool:
        return self.state == PaymentState.AWAITING_GATEWAY_CALLBACK

    def move_to(self, target: PaymentState):
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(self.state.value, target.value)
        self.history.append(self.state)
        self.state = target
        self.updated_at = datetime.utcnow()

    def fail(self, stage: FailureStage, message: str):
        self.move_to(PaymentState.FAILED)
        self.failure_stage = stage
        self.error = message
