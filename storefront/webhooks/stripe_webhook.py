import logging
from typing import Annotated

import stripe
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import WebhookSignatureInvalid
from storefront.models import get_db
from storefront.services.order_store import OrderStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _log_payment_intent_event(event_type: str, intent: dict, db: Session) -> None:
    intent_id = intent.get("id")
    order = None
    if intent_id:
        try:
            order = OrderStore(db).get_by_payment_reference(intent_id)
        except SQLAlchemyError:
            logger.exception("Failed to look up order for PaymentIntent %s", intent_id)
    order_note = f"order {order.id}" if order else "no settled order yet"
    if event_type == "payment_intent.succeeded":
        logger.info("PaymentIntent %s was successful (%s)", intent_id, order_note)
    else:
        error = intent.get("last_payment_error") or {}
        logger.warning(
            "PaymentIntent %s failed: %s (%s)",
            intent_id,
            error.get("message", "unknown error"),
            order_note,
        )


@router.post(
    "/stripe",
    summary="Stripe webhook",
)
async def stripe_webhook(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Stripe sends events here. The signature is checked against STRIPE_WEBHOOK_SECRET;
    every verified event is acknowledged, handled or not.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not set, rejecting webhook")
        raise WebhookSignatureInvalid("Webhook secret is not configured")

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        logger.error("Invalid webhook payload: %s", e)
        raise WebhookSignatureInvalid("Invalid payload")
    except stripe.SignatureVerificationError as e:
        logger.error("Webhook signature verification failed: %s", e)
        raise WebhookSignatureInvalid("Invalid signature")

    event_type = event["type"]
    if event_type in {"payment_intent.succeeded", "payment_intent.payment_failed"}:
        _log_payment_intent_event(event_type, event["data"]["object"], db)
    else:
        logger.info("Unhandled event type %s", event_type)

    return {"received": True}
