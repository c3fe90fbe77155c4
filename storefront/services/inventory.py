import logging
from typing import Iterable

from sqlalchemy.orm import Session

from storefront.errors import InvalidArgument
from storefront.models import Product

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Per-product stock counters changed only by relative deltas."""

    def __init__(self, db: Session):
        self.db = db

    def apply_delta(self, product_id: str, delta: int) -> None:
        # UPDATE ... SET inventory = inventory + :delta; never read-modify-write.
        updated = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .update({Product.inventory: Product.inventory + delta}, synchronize_session=False)
        )
        if updated == 0:
            raise InvalidArgument(f"Unknown product: {product_id}")

    def decrement_for_items(self, items: Iterable) -> None:
        touched = []
        for item in items:
            self.apply_delta(item.product_id, -item.quantity)
            touched.append(item.product_id)

        # Overselling is not prevented, only reported.
        oversold = (
            self.db.query(Product.id, Product.inventory)
            .filter(Product.id.in_(touched), Product.inventory < 0)
            .all()
        )
        for product_id, inventory in oversold:
            logger.warning("Product %s inventory is negative after settlement: %s", product_id, inventory)
