from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_admin
from storefront.models import User, get_db
from storefront.schemas.analytics import AnalyticsResponse, ProductSales
from storefront.services.analytics import summarize
from storefront.services.order_store import OrderStore

router = APIRouter()


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Sales summary for a date range (admin)",
)
def get_analytics(
    start_date: datetime,
    end_date: datetime,
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revenue, order count, average order value and top 10 products over confirmed orders."""
    summary = summarize(OrderStore(db), start_date, end_date)
    return AnalyticsResponse(
        total_revenue=summary.total_revenue,
        total_orders=summary.total_orders,
        average_order_value=summary.average_order_value,
        top_products=[
            ProductSales(product_id=product_id, quantity=quantity)
            for product_id, quantity in summary.top_products
        ],
    )
