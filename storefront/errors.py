"""Error taxonomy surfaced to API callers.

Each error carries a stable ``kind`` and a message that is safe to show to an
untrusted caller. Raw gateway or database details are logged where they are
caught and never stored on these exceptions.
"""

from fastapi import status


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgument(StorefrontError):
    """Raised for malformed order drafts, bad ranges and missing fields."""

    kind = "invalid-argument"
    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDenied(StorefrontError):
    """Raised when the caller lacks the administrative capability."""

    kind = "permission-denied"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Must be an admin"):
        super().__init__(message)


class PaymentNotConfirmed(StorefrontError):
    """Raised when the gateway does not report the payment as succeeded."""

    kind = "payment-not-confirmed"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, payment_reference: str, reason: str | None = None):
        self.payment_reference = payment_reference
        msg = "Payment not successful"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class OrderNotFound(StorefrontError):
    kind = "not-found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Order not found")


class ProductNotFound(StorefrontError):
    kind = "not-found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class GatewayUnavailable(StorefrontError):
    """Raised when a payment gateway call fails."""

    kind = "gateway-unavailable"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str = "Payment gateway unavailable"):
        super().__init__(message)


class PaymentIntentCreationFailed(GatewayUnavailable):
    kind = "payment-intent-creation-failed"

    def __init__(self):
        super().__init__("Unable to create payment intent")


class StoreUnavailable(StorefrontError):
    """Raised when a persistence call fails."""

    kind = "store-unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Unable to process order"):
        super().__init__(message)


class WebhookSignatureInvalid(StorefrontError):
    kind = "webhook-signature-invalid"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message)
