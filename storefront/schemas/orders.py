from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_serializer


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class _MoneyResponse(BaseModel):
    @field_serializer("total", "unit_price", check_fields=False)
    def serialize_money(self, value: Decimal) -> str:
        return format(Decimal(value).quantize(Decimal("0.01")), "f")


class LineItemDraft(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal


class OrderDraft(BaseModel):
    items: list[LineItemDraft]
    currency: str | None = None
    total: Decimal | None = None
    customer_email: str | None = None
    shipping_address: dict[str, Any] | None = None


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str
    order: OrderDraft

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "payment_intent_id": "pi_3Nabc123",
                    "order": {
                        "items": [
                            {"product_id": "A", "quantity": 2, "unit_price": "5.00"},
                            {"product_id": "B", "quantity": 1, "unit_price": "9.99"},
                        ],
                        "currency": "usd",
                        "customer_email": "customer@example.com",
                    },
                }
            ]
        }
    }


class ConfirmPaymentResponse(BaseModel):
    order_id: int
    success: bool = True


class OrderItemResponse(_MoneyResponse):
    product_id: str
    quantity: int
    unit_price: Decimal

    model_config = {"from_attributes": True}


class OrderResponse(_MoneyResponse):
    id: int
    user_id: int | None = None
    customer_email: str | None = None
    currency: str
    total: Decimal
    status: OrderStatus
    tracking_number: str | None = None
    payment_intent_id: str
    items: list[OrderItemResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus
    tracking_number: str | None = None


class OrderStatusUpdateResponse(BaseModel):
    success: bool = True
    order_id: int
    status: OrderStatus
