from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.dependencies import (
    get_current_admin,
    get_current_user,
    get_notifier,
    get_token_claims,
    is_admin,
)
from storefront.errors import OrderNotFound
from storefront.models import User, get_db
from storefront.schemas.orders import (
    OrderResponse,
    OrderStatus,
    OrderStatusUpdateRequest,
    OrderStatusUpdateResponse,
)
from storefront.services.notifications import NotificationDispatcher
from storefront.services.order_status import update_order_status
from storefront.services.order_store import OrderStore

router = APIRouter()


@router.get(
    "",
    response_model=list[OrderResponse],
    summary="List all orders (admin)",
)
def list_orders(
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[Session, Depends(get_db)],
    status: OrderStatus | None = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    orders = OrderStore(db).list_all(status=status.value if status else None, limit=limit, offset=offset)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get(
    "/me",
    response_model=list[OrderResponse],
    summary="List my orders",
)
def my_orders(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Returns the current user's orders, newest first."""
    orders = OrderStore(db).list_for_user(current_user.id)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
)
def get_order(
    order_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    claims: Annotated[dict | None, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """Returns one order. Customers only see their own orders."""
    order = OrderStore(db).get(order_id)
    if not order or (order.user_id != current_user.id and not is_admin(current_user, claims)):
        raise OrderNotFound(order_id)
    return OrderResponse.model_validate(order)


@router.patch(
    "/{order_id}/status",
    response_model=OrderStatusUpdateResponse,
    summary="Update order status (admin)",
)
def update_status(
    order_id: int,
    body: OrderStatusUpdateRequest,
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[Session, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
):
    """Apply a new status and optional tracking number, then notify the customer."""
    order = update_order_status(
        db,
        notifier,
        order_id,
        body.status.value,
        tracking_number=body.tracking_number,
    )
    return OrderStatusUpdateResponse(order_id=order.id, status=order.status)
