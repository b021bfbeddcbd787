"""Errors raised by the checkout services.

The checkout context catches these and turns them into message strings;
nothing here is meant to reach the UI as an exception.
"""


class CheckoutError(Exception):
    """Base class for checkout failures carrying a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(CheckoutError):
    """The storefront backend could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CartUnavailable(CheckoutError):
    pass


class OrderRejected(CheckoutError):
    pass


class PaymentFailed(CheckoutError):
    pass


class StorageUnavailable(CheckoutError):
    pass


class InvalidTransition(CheckoutError):
    """A payment flow was asked to move along an edge it does not have."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move payment flow from '{current}' to '{target}'")
        self.current = current
        self.target = target
