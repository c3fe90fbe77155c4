from decimal import Decimal

from pydantic import BaseModel, field_serializer


class ProductSales(BaseModel):
    product_id: str
    quantity: int


class AnalyticsResponse(BaseModel):
    total_revenue: Decimal
    total_orders: int
    average_order_value: Decimal
    top_products: list[ProductSales]

    @field_serializer("total_revenue", "average_order_value")
    def serialize_money(self, value: Decimal) -> str:
        return format(Decimal(value).quantize(Decimal("0.01")), "f")
