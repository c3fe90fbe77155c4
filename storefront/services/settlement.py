"""Turn a succeeded payment into a persisted order plus inventory adjustment.

The payment status is always re-fetched from the gateway; a client claiming
success is never trusted. The order row, its line items and every inventory
delta share one transaction so a failure leaves no partial decrement behind.
"""

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import InvalidArgument, PaymentNotConfirmed, StoreUnavailable
from storefront.models import Order, OrderItem, Product
from storefront.schemas.orders import OrderDraft
from storefront.services.inventory import InventoryLedger
from storefront.services.notifications import NotificationDispatcher
from storefront.services.order_store import OrderStore
from storefront.services.payment_gateway import INTENT_SUCCEEDED, StripeGateway, to_minor_units
from storefront.services.payments import normalize_currency

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _to_decimal(value, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidArgument(f"{field_name} must be a number") from exc
    if not result.is_finite():
        raise InvalidArgument(f"{field_name} must be a number")
    return result


def _is_whole_cents(value: Decimal) -> bool:
    try:
        return value == value.quantize(CENT)
    except InvalidOperation:
        return False


def validate_draft(draft: OrderDraft) -> Decimal:
    """Check the draft's line items and return the order total."""
    if not draft.items:
        raise InvalidArgument("Order must contain at least one item")

    total = Decimal("0")
    for index, item in enumerate(draft.items):
        if not item.product_id or not item.product_id.strip():
            raise InvalidArgument(f"items[{index}].product_id is required")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity <= 0:
            raise InvalidArgument(f"items[{index}].quantity must be a positive integer")
        unit_price = _to_decimal(item.unit_price, f"items[{index}].unit_price")
        if unit_price < 0:
            raise InvalidArgument(f"items[{index}].unit_price must not be negative")
        if not _is_whole_cents(unit_price):
            raise InvalidArgument(f"items[{index}].unit_price must be a whole number of cents")
        total += unit_price * item.quantity

    if draft.total is not None:
        stated_total = _to_decimal(draft.total, "total")
        if not _is_whole_cents(stated_total):
            raise InvalidArgument("total must be a whole number of cents")
        if stated_total != total:
            raise InvalidArgument("Order total does not match the sum of its line items")
    return total


class SettlementService:
    def __init__(self, db: Session, gateway: StripeGateway, notifier: NotificationDispatcher):
        self.db = db
        self.gateway = gateway
        self.notifier = notifier
        self.store = OrderStore(db)
        self.ledger = InventoryLedger(db)

    def settle(self, payment_reference: str, draft: OrderDraft, user_id: int | None = None) -> int:
        if not payment_reference or not payment_reference.strip():
            raise InvalidArgument("payment_intent_id is required")
        total = validate_draft(draft)
        currency = normalize_currency(draft.currency or settings.DEFAULT_CURRENCY)

        intent = self.gateway.retrieve_intent(payment_reference)
        if intent.status != INTENT_SUCCEEDED:
            logger.warning("Payment %s is not succeeded (status=%s)", payment_reference, intent.status)
            raise PaymentNotConfirmed(payment_reference)
        if intent.currency and intent.currency.lower() != currency:
            logger.warning(
                "Currency mismatch for payment %s: expected=%s, received=%s",
                payment_reference,
                currency,
                intent.currency,
            )
            raise PaymentNotConfirmed(payment_reference, "currency mismatch")
        if intent.amount is not None and intent.amount != to_minor_units(total):
            logger.warning(
                "Amount mismatch for payment %s: expected=%s, received=%s",
                payment_reference,
                to_minor_units(total),
                intent.amount,
            )
            raise PaymentNotConfirmed(payment_reference, "amount mismatch")

        try:
            existing = self.store.get_by_payment_reference(payment_reference)
            catalogue = self._load_products(draft)
        except SQLAlchemyError as exc:
            logger.error("Error loading settlement state for payment %s: %s", payment_reference, exc)
            raise StoreUnavailable() from exc
        if existing:
            logger.info("Payment %s already settled as order %s, skipping", payment_reference, existing.id)
            return existing.id
        self._check_against_catalogue(draft, catalogue)

        order = Order(
            user_id=user_id,
            customer_email=draft.customer_email,
            shipping_address=draft.shipping_address,
            currency=currency,
            total=total,
            payment_intent_id=payment_reference,
            status="confirmed",
            items=[
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=_to_decimal(item.unit_price, "unit_price"),
                )
                for item in draft.items
            ],
        )
        try:
            self.store.create(order)
            self.ledger.decrement_for_items(order.items)
            self.db.commit()
        except InvalidArgument:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            try:
                existing = self.store.get_by_payment_reference(payment_reference)
            except SQLAlchemyError as lookup_exc:
                logger.error("Error loading order for payment %s: %s", payment_reference, lookup_exc)
                raise StoreUnavailable() from exc
            if existing:
                logger.info("Payment %s was settled concurrently as order %s", payment_reference, existing.id)
                return existing.id
            logger.error("Integrity error while settling payment %s: %s", payment_reference, exc)
            raise StoreUnavailable() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error settling payment %s: %s", payment_reference, exc, exc_info=True)
            raise StoreUnavailable() from exc

        logger.info("Order %s settled for payment %s", order.id, payment_reference)
        self.notifier.order_confirmed(order)
        return order.id

    def _load_products(self, draft: OrderDraft) -> dict[str, Product]:
        product_ids = {item.product_id for item in draft.items}
        products = self.db.query(Product).filter(Product.id.in_(product_ids)).all()
        return {product.id: product for product in products}

    @staticmethod
    def _check_against_catalogue(draft: OrderDraft, catalogue: dict[str, Product]) -> None:
        """Line items must reference active products at their catalogue price."""
        missing = sorted({item.product_id for item in draft.items} - catalogue.keys())
        if missing:
            raise InvalidArgument(f"Unknown product(s): {', '.join(missing)}")

        inactive = sorted({item.product_id for item in draft.items if not catalogue[item.product_id].is_active})
        if inactive:
            raise InvalidArgument(f"Product(s) not available: {', '.join(inactive)}")

        for index, item in enumerate(draft.items):
            price = catalogue[item.product_id].price
            if _to_decimal(item.unit_price, "unit_price") != price:
                raise InvalidArgument(
                    f"items[{index}].unit_price {item.unit_price} does not match the price of {item.product_id}"
                )
