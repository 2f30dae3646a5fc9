"""Shop request/response contracts — Pydantic v2 models. Money is integer paise."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    pending_payment = "PENDING_PAYMENT"
    paid = "PAID"
    failed = "FAILED"


class OrderItemIn(BaseModel):
    product_id: int | str
    quantity: int = Field(default=1, ge=1)
    variant: str | None = None
    size: str | None = None
    # Only read for products that are not in the catalogue table.
    product_name: str | None = None
    unit_price: int | None = Field(default=None, ge=0)


class OrderCreate(BaseModel):
    items: list[OrderItemIn] = Field(..., min_length=1)
    customer_name: str | None = None
    phone: str | None = None
    email: str | None = None
    shipping_address: dict[str, Any] | None = None


class PaymentVerify(BaseModel):
    payment_id: str | None = None
    signature: str | None = None
    razorpay_order_id: str | None = None


class ProductOut(BaseModel):
    id: int
    slug: str
    name: str
    description: str | None = None
    price: int
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True


class OrderItemOut(BaseModel):
    id: int | None = None
    product_id: int | None = None
    product_name: str
    variant: str | None = None
    size: str | None = None
    quantity: int
    unit_price: int
    total_price: int


class OrderOut(BaseModel):
    id: int
    order_number: str
    subtotal: int
    shipping_fee: int
    total: int
    customer_name: str
    phone: str
    email: str
    shipping_address: dict[str, Any] = Field(default_factory=dict)
    status: OrderStatus
    payment_provider: str | None = None
    payment_reference: str | None = None
    payment_data: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItemOut] = Field(default_factory=list)


class OrderCreated(BaseModel):
    order: OrderOut
    razorpay_order_id: str | None = None
    razorpay_key_id: str | None = None
    test_mode: bool = False
    error: str | None = None


class PaymentVerified(BaseModel):
    order: OrderOut
    success: bool = True
