"""Database access for the shop.

Tables:
  products        id, slug, name, description, price (paise), image_url, tags (JSONB),
                  is_active, sort_order
  orders          id, order_number, subtotal, shipping_fee, total, customer_name, phone,
                  email, shipping_address (JSONB), status, payment_provider,
                  payment_reference, payment_data (JSONB), created_at, updated_at
  order_items     id, order_id, product_id (nullable), product_name, variant, size,
                  quantity, unit_price, total_price
  checkout_leads  id, customer_name, phone, email, shipping_address (JSONB), items (JSONB),
                  subtotal, shipping_fee, total, error_message, status,
                  converted_order_id, created_at
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_PRODUCT_COLUMNS = "id, slug, name, description, price, image_url, tags, is_active"
_ORDER_COLUMNS = (
    "id, order_number, subtotal, shipping_fee, total, customer_name, phone, email, "
    "shipping_address, status, payment_provider, payment_reference, payment_data, "
    "created_at, updated_at"
)
_ITEM_COLUMNS = "id, order_id, product_id, product_name, variant, size, quantity, unit_price, total_price"

_JSON_COLUMNS = ("tags", "shipping_address", "payment_data", "items")


def _row_to_dict(result, row) -> dict[str, Any]:
    data = dict(zip(result.keys(), row))
    for col in _JSON_COLUMNS:
        if isinstance(data.get(col), str):
            data[col] = json.loads(data[col])
    return data


def _dumps(value: Any) -> str | None:
    return json.dumps(value) if value is not None else None


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


async def list_active_products(session: AsyncSession) -> list[dict[str, Any]]:
    query = (
        f"SELECT {_PRODUCT_COLUMNS} FROM products "
        "WHERE is_active = true ORDER BY sort_order, id"
    )
    result = await session.execute(text(query))
    return [_row_to_dict(result, r) for r in result.fetchall()]


async def get_product(session: AsyncSession, product_ref: int | str) -> dict[str, Any] | None:
    """Look up by numeric id, or by slug for string references."""
    if isinstance(product_ref, int):
        query = f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = :ref"
    else:
        query = f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE slug = :ref"
    result = await session.execute(text(query), {"ref": product_ref})
    row = result.fetchone()
    if row is None:
        return None
    return _row_to_dict(result, row)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


async def insert_order(
    session: AsyncSession,
    order: dict[str, Any],
    items: list[dict[str, Any]],
) -> dict[str, Any]:
    """Insert an order with its line items in one transaction."""
    params = dict(order)
    params["shipping_address"] = _dumps(params.get("shipping_address") or {})
    query = (
        "INSERT INTO orders ("
        "order_number, subtotal, shipping_fee, total, customer_name, phone, email, "
        "shipping_address, status, created_at, updated_at"
        ") VALUES ("
        ":order_number, :subtotal, :shipping_fee, :total, :customer_name, :phone, :email, "
        "CAST(:shipping_address AS JSONB), :status, now(), now()"
        f") RETURNING {_ORDER_COLUMNS}"
    )
    result = await session.execute(text(query), params)
    created = _row_to_dict(result, result.fetchone())

    item_query = (
        "INSERT INTO order_items ("
        "order_id, product_id, product_name, variant, size, quantity, unit_price, total_price"
        ") VALUES ("
        ":order_id, :product_id, :product_name, :variant, :size, :quantity, :unit_price, :total_price"
        f") RETURNING {_ITEM_COLUMNS}"
    )
    created["items"] = []
    for item in items:
        item_result = await session.execute(text(item_query), {**item, "order_id": created["id"]})
        created["items"].append(_row_to_dict(item_result, item_result.fetchone()))

    await session.commit()
    return created


async def _attach_items(session: AsyncSession, order: dict[str, Any]) -> dict[str, Any]:
    query = f"SELECT {_ITEM_COLUMNS} FROM order_items WHERE order_id = :order_id ORDER BY id"
    result = await session.execute(text(query), {"order_id": order["id"]})
    order["items"] = [_row_to_dict(result, r) for r in result.fetchall()]
    return order


async def get_order_by_id(session: AsyncSession, order_id: int) -> dict[str, Any] | None:
    result = await session.execute(
        text(f"SELECT {_ORDER_COLUMNS} FROM orders WHERE id = :id"), {"id": order_id}
    )
    row = result.fetchone()
    if row is None:
        return None
    return _row_to_dict(result, row)


async def get_order_by_number(session: AsyncSession, order_number: str) -> dict[str, Any] | None:
    result = await session.execute(
        text(f"SELECT {_ORDER_COLUMNS} FROM orders WHERE order_number = :order_number"),
        {"order_number": order_number},
    )
    row = result.fetchone()
    if row is None:
        return None
    return await _attach_items(session, _row_to_dict(result, row))


async def update_order_payment(
    session: AsyncSession,
    order_id: int,
    status: str,
    payment_data: dict[str, Any],
    payment_provider: str | None = None,
    payment_reference: str | None = None,
) -> dict[str, Any]:
    query = (
        "UPDATE orders SET status = :status, "
        "payment_provider = COALESCE(:payment_provider, payment_provider), "
        "payment_reference = :payment_reference, "
        "payment_data = CAST(:payment_data AS JSONB), updated_at = now() "
        f"WHERE id = :id RETURNING {_ORDER_COLUMNS}"
    )
    result = await session.execute(
        text(query),
        {
            "id": order_id,
            "status": status,
            "payment_provider": payment_provider,
            "payment_reference": payment_reference,
            "payment_data": _dumps(payment_data),
        },
    )
    updated = _row_to_dict(result, result.fetchone())
    await session.commit()
    return updated


# ---------------------------------------------------------------------------
# Checkout leads
# ---------------------------------------------------------------------------


async def insert_checkout_lead(session: AsyncSession, lead: dict[str, Any]) -> dict[str, Any]:
    params = dict(lead)
    params["shipping_address"] = _dumps(params.get("shipping_address") or {})
    params["items"] = _dumps(params.get("items") or [])
    query = (
        "INSERT INTO checkout_leads ("
        "customer_name, phone, email, shipping_address, items, subtotal, shipping_fee, "
        "total, error_message, status, created_at"
        ") VALUES ("
        ":customer_name, :phone, :email, CAST(:shipping_address AS JSONB), "
        "CAST(:items AS JSONB), :subtotal, :shipping_fee, :total, :error_message, "
        ":status, now()"
        ") RETURNING id, customer_name, phone, email, status, converted_order_id"
    )
    result = await session.execute(text(query), params)
    created = _row_to_dict(result, result.fetchone())
    await session.commit()
    return created
