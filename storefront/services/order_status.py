import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import InvalidArgument, OrderNotFound, StoreUnavailable
from storefront.models import ORDER_STATUSES, Order
from storefront.services.notifications import NotificationDispatcher
from storefront.services.order_store import OrderStore

logger = logging.getLogger(__name__)

FORWARD_SEQUENCE = ("pending", "confirmed", "shipped", "delivered")
TERMINAL_STATUSES = {"delivered", "cancelled"}


def can_transition(current: str, new: str) -> bool:
    """Statuses only move forward; cancellation is allowed until a terminal status."""
    if current == new:
        return True
    if current in TERMINAL_STATUSES:
        return False
    if new == "cancelled":
        return True
    if current not in FORWARD_SEQUENCE or new not in FORWARD_SEQUENCE:
        return False
    return FORWARD_SEQUENCE.index(new) > FORWARD_SEQUENCE.index(current)


def update_order_status(
    db: Session,
    notifier: NotificationDispatcher,
    order_id: int,
    new_status: str,
    tracking_number: str | None = None,
) -> Order:
    if new_status not in ORDER_STATUSES:
        raise InvalidArgument(f"Unknown order status: {new_status}")

    store = OrderStore(db)
    order = store.get(order_id)
    if not order:
        raise OrderNotFound(order_id)
    if not can_transition(order.status, new_status):
        raise InvalidArgument(f"Cannot change order status from {order.status} to {new_status}")

    fields = {"status": new_status}
    if tracking_number:
        fields["tracking_number"] = tracking_number

    previous_status = order.status
    try:
        store.update(order, **fields)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error updating order %s: %s", order_id, exc, exc_info=True)
        raise StoreUnavailable("Unable to update order") from exc

    db.refresh(order)
    logger.info("Order %s status changed %s -> %s", order.id, previous_status, order.status)
    notifier.order_status_changed(order)
    return order
