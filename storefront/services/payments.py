import logging
from decimal import Decimal

from storefront.errors import GatewayUnavailable, InvalidArgument, PaymentIntentCreationFailed
from storefront.services.payment_gateway import StripeGateway, to_minor_units

logger = logging.getLogger(__name__)


def normalize_currency(currency: str) -> str:
    normalized = (currency or "").strip().lower()
    if len(normalized) != 3 or not normalized.isalpha():
        raise InvalidArgument(f"Invalid currency: {currency}")
    return normalized


def create_payment_intent(
    gateway: StripeGateway,
    amount: Decimal,
    currency: str = "usd",
    metadata: dict | None = None,
) -> str:
    """Create a payment intent and return its client secret."""
    amount_minor_units = to_minor_units(amount)
    if amount_minor_units <= 0:
        raise InvalidArgument("Amount must be positive")
    currency = normalize_currency(currency)
    string_metadata = {str(key): str(value) for key, value in (metadata or {}).items()}

    try:
        intent = gateway.create_intent(amount_minor_units, currency, string_metadata)
    except GatewayUnavailable as exc:
        logger.error("Error creating payment intent: %s", exc)
        raise PaymentIntentCreationFailed() from exc

    if not intent.client_secret:
        logger.error("Payment intent %s was created without a client secret", intent.id)
        raise PaymentIntentCreationFailed()

    logger.info("Created payment intent %s for %s %s", intent.id, amount_minor_units, currency)
    return intent.client_secret
