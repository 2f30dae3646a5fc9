"""Shop HTTP router: catalogue, checkout and payment verification."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.db import get_session
from academy.shop import gateway, orders, repository
from academy.shop.models import (
    OrderCreate,
    OrderCreated,
    OrderOut,
    OrderStatus,
    PaymentVerified,
    PaymentVerify,
    ProductOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shop", tags=["shop"])

PAYMENT_PROVIDER = "razorpay"


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@router.get("/products", response_model=list[ProductOut])
async def list_products(session: AsyncSession = Depends(get_session)) -> list[dict]:
    return await repository.list_active_products(session)


@router.get("/products/{slug}", response_model=ProductOut)
async def product_detail(slug: str, session: AsyncSession = Depends(get_session)) -> dict:
    product = await repository.get_product(session, slug)
    if product is None or not product["is_active"]:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@router.post("/orders", response_model=OrderCreated)
async def create_order(
    body: OrderCreate,
    session: AsyncSession = Depends(get_session),
) -> OrderCreated:
    try:
        order = await orders.create_order(session, body)
    except orders.CheckoutRejected as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SQLAlchemyError:
        logger.exception("Error creating order")
        raise HTTPException(status_code=500, detail="Failed to create order")

    client = gateway.get_gateway()
    if client is None:
        return OrderCreated(order=OrderOut(**order), test_mode=True)

    try:
        gateway_order = await client.create_order(
            amount=order["total"],
            currency=settings.shop_currency,
            receipt=order["order_number"],
            notes={
                "orderId": str(order["id"]),
                "customerName": order["customer_name"],
                "email": order["email"],
            },
        )
    except gateway.PaymentGatewayError as exc:
        logger.warning("Razorpay order creation failed for %s: %s", order["order_number"], exc)
        return OrderCreated(order=OrderOut(**order), error="Payment gateway not available")

    return OrderCreated(
        order=OrderOut(**order),
        razorpay_order_id=gateway_order.get("id"),
        razorpay_key_id=client.key_id,
    )


@router.post("/orders/{order_id}/verify", response_model=PaymentVerified)
async def verify_payment(
    order_id: int,
    body: PaymentVerify,
    session: AsyncSession = Depends(get_session),
) -> PaymentVerified:
    order = await repository.get_order_by_id(session, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    if body.payment_id and body.signature and body.razorpay_order_id and settings.razorpay_key_secret:
        valid = gateway.verify_payment_signature(
            body.razorpay_order_id,
            body.payment_id,
            body.signature,
            settings.razorpay_key_secret,
        )
        if not valid:
            await repository.update_order_payment(
                session,
                order["id"],
                status=OrderStatus.failed.value,
                payment_data={"error": "Invalid signature"},
            )
            raise HTTPException(status_code=400, detail="Invalid payment signature")

    updated = await repository.update_order_payment(
        session,
        order["id"],
        status=(OrderStatus.paid if body.payment_id else OrderStatus.failed).value,
        payment_provider=PAYMENT_PROVIDER,
        payment_reference=body.payment_id,
        payment_data={
            "payment_id": body.payment_id,
            "razorpay_order_id": body.razorpay_order_id,
            "signature": body.signature,
            "verified_at": datetime.now(timezone.utc).isoformat(),
        },
    )
    return PaymentVerified(order=OrderOut(**updated))


@router.get("/orders/{order_number}", response_model=OrderOut)
async def get_order(order_number: str, session: AsyncSession = Depends(get_session)) -> dict:
    order = await repository.get_order_by_number(session, order_number)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
