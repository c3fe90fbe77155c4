import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import InvalidArgument, StoreUnavailable
from storefront.services.order_store import OrderStore

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 10


@dataclass
class AnalyticsSummary:
    total_revenue: Decimal = Decimal("0")
    total_orders: int = 0
    average_order_value: Decimal = Decimal("0")
    top_products: list[tuple[str, int]] = field(default_factory=list)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def summarize(store: OrderStore, start: datetime, end: datetime) -> AnalyticsSummary:
    """Revenue, order count and best sellers for confirmed orders in [start, end]."""
    start, end = _as_utc(start), _as_utc(end)
    if start > end:
        raise InvalidArgument("start_date must not be after end_date")

    try:
        orders = store.list_confirmed_between(start, end)
    except SQLAlchemyError as exc:
        logger.error("Error getting analytics: %s", exc)
        raise StoreUnavailable("Unable to get analytics") from exc

    summary = AnalyticsSummary()
    product_sales: dict[str, int] = {}
    for order in orders:
        summary.total_revenue += Decimal(str(order.total))
        summary.total_orders += 1
        for item in order.items:
            product_sales[item.product_id] = product_sales.get(item.product_id, 0) + item.quantity

    if summary.total_orders:
        summary.average_order_value = (summary.total_revenue / summary.total_orders).quantize(Decimal("0.01"))
    # sorted() is stable, so ties keep first-encountered order.
    summary.top_products = sorted(product_sales.items(), key=lambda entry: entry[1], reverse=True)[
        :TOP_PRODUCTS_LIMIT
    ]
    return summary
