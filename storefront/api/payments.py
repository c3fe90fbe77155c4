from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.dependencies import get_current_user_optional, get_notifier, get_payment_gateway
from storefront.models import User, get_db
from storefront.schemas.orders import ConfirmPaymentRequest, ConfirmPaymentResponse
from storefront.schemas.payments import PaymentIntentRequest, PaymentIntentResponse
from storefront.services.notifications import NotificationDispatcher
from storefront.services.payment_gateway import StripeGateway
from storefront.services.payments import create_payment_intent
from storefront.services.settlement import SettlementService

router = APIRouter()


@router.post(
    "/intents",
    response_model=PaymentIntentResponse,
    summary="Create a payment intent",
)
def create_intent(
    body: PaymentIntentRequest,
    gateway: Annotated[StripeGateway, Depends(get_payment_gateway)],
):
    """Create a Stripe payment intent and return the client secret for the checkout widget."""
    client_secret = create_payment_intent(
        gateway,
        amount=body.amount,
        currency=body.currency or settings.DEFAULT_CURRENCY,
        metadata=body.metadata,
    )
    return PaymentIntentResponse(client_secret=client_secret)


@router.post(
    "/confirm",
    response_model=ConfirmPaymentResponse,
    summary="Settle a succeeded payment into an order",
)
def confirm_payment(
    body: ConfirmPaymentRequest,
    db: Annotated[Session, Depends(get_db)],
    gateway: Annotated[StripeGateway, Depends(get_payment_gateway)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
    current_user: Annotated[User | None, Depends(get_current_user_optional)],
):
    """
    Re-check the payment with Stripe, then create the order and decrement inventory
    in one transaction. Settling the same payment twice returns the existing order.
    """
    service = SettlementService(db, gateway, notifier)
    order_id = service.settle(
        body.payment_intent_id,
        body.order,
        user_id=current_user.id if current_user else None,
    )
    return ConfirmPaymentResponse(order_id=order_id)
