"""Checkout: price an order against the catalogue and record abandoned checkouts."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.crm.sync import CrmLeadInput, CrmSourceType, upsert_crm_lead
from academy.shop import repository
from academy.shop.models import OrderCreate, OrderItemIn

logger = logging.getLogger(__name__)


class CheckoutRejected(Exception):
    """The order cannot be placed as submitted (client error)."""


@dataclass(slots=True)
class PricedOrder:
    items: list[dict[str, Any]] = field(default_factory=list)
    subtotal: int = 0
    shipping_fee: int = 0

    @property
    def total(self) -> int:
        return self.subtotal + self.shipping_fee


def generate_order_number(prefix: str | None = None) -> str:
    """<prefix>-<epoch ms>-<8 uppercase hex>."""
    prefix = prefix or settings.shop_order_prefix
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


async def price_item(session: AsyncSession, item: OrderItemIn) -> dict[str, Any]:
    """Resolve one line. Catalogue prices win over client-supplied ones."""
    product = await repository.get_product(session, item.product_id)
    if product is not None:
        if not product["is_active"]:
            raise CheckoutRejected(f"Product {item.product_id} is inactive")
        product_id = product["id"]
        unit_price = product["price"]
        product_name = product["name"]
    else:
        # Merch that lives only in the storefront bundle carries its own details.
        if not item.product_name or not item.unit_price:
            raise CheckoutRejected(
                f"Product {item.product_id} not found. Please ensure product details are included."
            )
        product_id = None
        unit_price = item.unit_price
        product_name = item.product_name

    return {
        "product_id": product_id,
        "product_name": product_name,
        "variant": item.variant,
        "size": item.size,
        "quantity": item.quantity,
        "unit_price": unit_price,
        "total_price": unit_price * item.quantity,
    }


async def price_order(session: AsyncSession, body: OrderCreate) -> PricedOrder:
    priced = PricedOrder(shipping_fee=settings.shop_shipping_fee_paise)
    for item in body.items:
        line = await price_item(session, item)
        priced.items.append(line)
        priced.subtotal += line["total_price"]
    return priced


async def record_checkout_lead(
    session: AsyncSession,
    body: OrderCreate,
    error_message: str,
    priced: PricedOrder | None = None,
) -> dict[str, Any] | None:
    """Keep the shopper's details when checkout fails. Never raises."""
    shipping_fee = priced.shipping_fee if priced else settings.shop_shipping_fee_paise
    subtotal = priced.subtotal if priced else 0
    lead_values = {
        "customer_name": body.customer_name or "Guest",
        "phone": body.phone or "",
        "email": body.email or "",
        "shipping_address": body.shipping_address or {},
        "items": [i.model_dump() for i in body.items],
        "subtotal": subtotal,
        "shipping_fee": shipping_fee,
        "total": subtotal + shipping_fee,
        "error_message": error_message,
        "status": "NEW",
    }
    try:
        lead = await repository.insert_checkout_lead(session, lead_values)
    except SQLAlchemyError as exc:
        logger.warning("Failed to save checkout lead: %s", exc)
        await session.rollback()
        return None

    await upsert_crm_lead(
        session,
        CrmLeadInput(
            source_type=CrmSourceType.checkout,
            source_id=lead["id"],
            primary_name=lead["customer_name"] or "Guest",
            phone=lead["phone"],
            email=lead["email"],
            status_hint=lead["status"],
            converted_order_id=lead.get("converted_order_id"),
        ),
    )
    return lead


async def create_order(session: AsyncSession, body: OrderCreate) -> dict[str, Any]:
    """Price and persist an order in PENDING_PAYMENT.

    Raises CheckoutRejected for bad carts; storage errors propagate. Either way
    a checkout lead is recorded first.
    """
    priced: PricedOrder | None = None
    try:
        priced = await price_order(session, body)
        order = {
            "order_number": generate_order_number(),
            "subtotal": priced.subtotal,
            "shipping_fee": priced.shipping_fee,
            "total": priced.total,
            "customer_name": body.customer_name or "Guest",
            "phone": body.phone or "",
            "email": body.email or "",
            "shipping_address": body.shipping_address or {},
            "status": "PENDING_PAYMENT",
        }
        return await repository.insert_order(session, order, priced.items)
    except CheckoutRejected as exc:
        await record_checkout_lead(session, body, str(exc), priced)
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        await record_checkout_lead(session, body, str(exc) or "Failed to create order", priced)
        raise
