import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from checkout_api.models.order import OrderStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItem(CamelModel):
    product_id: str = Field(min_length=1, max_length=128)
    title: str = Field(min_length=1, max_length=255)
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    quantity: int = Field(gt=0, le=1000)
    image_url: str | None = Field(default=None, max_length=2048)
    customization: str | None = Field(default=None, max_length=500)


class ShippingAddress(CamelModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)
    phone: str = Field(min_length=5, max_length=32)
    address: str = Field(min_length=1, max_length=1000)
    city: str = Field(min_length=1, max_length=128)
    state: str = Field(min_length=1, max_length=128)
    postal_code: str = Field(min_length=3, max_length=16)
    country: str = Field(default="India", min_length=2, max_length=64)


class OrderData(CamelModel):
    user_email: str = Field(min_length=3, max_length=320)
    items: list[LineItem] = Field(min_length=1)
    shipping_address: ShippingAddress
    total_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

    @field_validator("user_email")
    @classmethod
    def validate_user_email(cls, value: str) -> str:
        email = value.strip()
        if "@" not in email:
            raise ValueError("userEmail must be an email address")
        return email


class CreateIntentRequest(CamelModel):
    amount_major_units: Decimal = Field(gt=0, max_digits=14, decimal_places=3)
    currency: str | None = None
    order_data: OrderData

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, value: str | None) -> str | None:
        if value is None:
            return None
        code = value.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("currency must be a 3-letter ISO-4217 code")
        return code


class CreateIntentResponse(CamelModel):
    success: bool = True
    gateway_order_id: str
    ledger_order_id: uuid.UUID
    api_key_id: str
    amount: int
    currency: str


class CompletePaymentRequest(CamelModel):
    gateway_order_id: str = Field(min_length=1, max_length=64)
    gateway_payment_id: str = Field(min_length=1, max_length=64)
    signature: str = Field(min_length=1, max_length=128)
    ledger_order_id: uuid.UUID


class OrderView(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str | None
    user_email: str
    shipping_address: dict
    items: list[dict]
    total_price: Decimal
    currency: str
    amount_subunits: int
    gateway_order_id: str
    gateway_payment_id: str | None
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class CompletePaymentResponse(CamelModel):
    success: bool = True
    order: OrderView


class OrderDetailResponse(CamelModel):
    success: bool = True
    order: OrderView


class OrdersListResponse(CamelModel):
    success: bool = True
    orders: list[OrderView]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
