from checkout_api.schemas.checkout import (
    CompletePaymentRequest,
    CompletePaymentResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    ErrorResponse,
    LineItem,
    OrderData,
    OrderDetailResponse,
    OrdersListResponse,
    OrderView,
    ShippingAddress,
)
from checkout_api.schemas.gateway import EmailReceipt, GatewayOrder

__all__ = [
    "CreateIntentRequest",
    "CreateIntentResponse",
    "CompletePaymentRequest",
    "CompletePaymentResponse",
    "OrderData",
    "LineItem",
    "ShippingAddress",
    "OrderView",
    "OrderDetailResponse",
    "OrdersListResponse",
    "ErrorResponse",
    "GatewayOrder",
    "EmailReceipt",
]
