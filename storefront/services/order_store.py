from datetime import datetime

from sqlalchemy.orm import Session, selectinload

from storefront.models import Order
from storefront.models.database import utcnow


class OrderStore:
    """Order documents keyed by generated id.

    Writes only flush; committing is left to the caller so that an order can
    share a transaction with inventory deltas.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, order: Order) -> int:
        now = utcnow()
        if order.created_at is None:
            order.created_at = now
        order.updated_at = now
        self.db.add(order)
        self.db.flush()
        return order.id

    def get(self, order_id: int) -> Order | None:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_by_payment_reference(self, payment_intent_id: str) -> Order | None:
        return self.db.query(Order).filter(Order.payment_intent_id == payment_intent_id).first()

    def update(self, order: Order, **fields) -> Order:
        for name, value in fields.items():
            setattr(order, name, value)
        order.updated_at = utcnow()
        self.db.flush()
        return order

    def list_confirmed_between(self, start: datetime, end: datetime) -> list[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(
                Order.status == "confirmed",
                Order.created_at >= start,
                Order.created_at <= end,
            )
            .order_by(Order.created_at.asc(), Order.id.asc())
            .all()
        )

    def list_for_user(self, user_id: int) -> list[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def list_all(self, status: str | None = None, limit: int = 50, offset: int = 0) -> list[Order]:
        query = self.db.query(Order).options(selectinload(Order.items))
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
