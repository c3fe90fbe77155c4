from storefront.schemas.analytics import AnalyticsResponse, ProductSales
from storefront.schemas.orders import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    LineItemDraft,
    OrderDraft,
    OrderResponse,
    OrderStatusUpdateRequest,
    OrderStatusUpdateResponse,
)
from storefront.schemas.payments import PaymentIntentRequest, PaymentIntentResponse
from storefront.schemas.products import ProductCreateRequest, ProductResponse, ProductUpdateRequest

__all__ = [
    "AnalyticsResponse",
    "ProductSales",
    "ConfirmPaymentRequest",
    "ConfirmPaymentResponse",
    "LineItemDraft",
    "OrderDraft",
    "OrderResponse",
    "OrderStatusUpdateRequest",
    "OrderStatusUpdateResponse",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "ProductCreateRequest",
    "ProductResponse",
    "ProductUpdateRequest",
]
