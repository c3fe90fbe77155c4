import logging

from storefront.models import Order
from storefront.services import email_service

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Best-effort customer notifications.

    Failures are logged and never reach the caller: a settled order or a
    status change is reported as successful regardless of delivery.
    """

    def order_confirmed(self, order: Order) -> None:
        try:
            if not self._can_email(order):
                logger.info("Sending order confirmation for order %s (email disabled)", order.id)
                return
            email_service.send_order_confirmation_email(
                to_email=order.customer_email,
                order_id=order.id,
                total=order.total,
                currency=order.currency,
                lines=[(item.product_id, item.quantity) for item in order.items],
            )
            logger.info("Order confirmation email sent for order %s", order.id)
        except Exception:
            logger.exception("Failed to send order confirmation for order %s", order.id)

    def order_status_changed(self, order: Order) -> None:
        try:
            if not self._can_email(order):
                logger.info(
                    "Sending order status update %s for order %s (email disabled)", order.status, order.id
                )
                return
            email_service.send_order_status_email(
                to_email=order.customer_email,
                order_id=order.id,
                status=order.status,
                tracking_number=order.tracking_number,
            )
            logger.info("Order status email (%s) sent for order %s", order.status, order.id)
        except Exception:
            logger.exception("Failed to send order status update for order %s", order.id)

    @staticmethod
    def _can_email(order: Order) -> bool:
        return bool(order.customer_email) and email_service.smtp_configured()
