import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import stripe

from storefront.errors import GatewayUnavailable, InvalidArgument

logger = logging.getLogger(__name__)

INTENT_REQUIRES_PAYMENT = "requires_payment"
INTENT_SUCCEEDED = "succeeded"
INTENT_FAILED = "failed"

_STRIPE_STATUS_MAP = {
    "succeeded": INTENT_SUCCEEDED,
    "canceled": INTENT_FAILED,
}


@dataclass(frozen=True)
class PaymentIntentRef:
    id: str
    status: str
    amount: int | None = None
    currency: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    client_secret: str | None = None


def to_minor_units(amount: Decimal | float | int | str) -> int:
    """Convert a decimal currency amount to integer cents, rounding half-up."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise InvalidArgument(f"Invalid amount: {amount}") from exc
    if not value.is_finite():
        raise InvalidArgument(f"Invalid amount: {amount}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def normalize_intent_status(raw_status: str | None) -> str:
    return _STRIPE_STATUS_MAP.get(raw_status or "", INTENT_REQUIRES_PAYMENT)


def _intent_from_stripe(intent: Any) -> PaymentIntentRef:
    metadata = intent.get("metadata") or {}
    return PaymentIntentRef(
        id=intent["id"],
        status=normalize_intent_status(intent.get("status")),
        amount=intent.get("amount"),
        currency=intent.get("currency"),
        metadata={str(key): str(value) for key, value in dict(metadata).items()},
        client_secret=intent.get("client_secret"),
    )


class StripeGateway:
    """Payment intent calls against Stripe, the source of truth for payment status."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def _require_key(self) -> None:
        if not self.api_key:
            logger.error("STRIPE_SECRET_KEY is not set")
            raise GatewayUnavailable("Payment gateway is not configured")

    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntentRef:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=currency,
                metadata=metadata or {},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent creation failed: %s", exc)
            raise GatewayUnavailable() from exc
        return _intent_from_stripe(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntentRef:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent retrieval failed for %s: %s", intent_id, exc)
            raise GatewayUnavailable() from exc
        return _intent_from_stripe(intent)
