"""Shopping cart store, an explicit object over pluggable storage.

This is the client-side store a storefront or kiosk keeps between visits;
Cart.order_lines() yields the items payload for POST /shop/orders. The
server never reads it.

Lines are keyed by (product_id, variant, size): adding an existing key
merges quantities. total_price is always quantity * unit_price (paise).
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

LineKey = tuple[int | str, str | None, str | None]


@dataclass(frozen=True, slots=True)
class CartItem:
    product_id: int | str
    product_name: str
    product_slug: str
    quantity: int
    unit_price: int
    product_image: str | None = None
    variant: str | None = None
    size: str | None = None

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant, self.size)

    @property
    def total_price(self) -> int:
        return self.quantity * self.unit_price

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["total_price"] = self.total_price
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartItem:
        return cls(
            product_id=data["product_id"],
            product_name=data["product_name"],
            product_slug=data.get("product_slug") or "",
            quantity=int(data["quantity"]),
            unit_price=int(data["unit_price"]),
            product_image=data.get("product_image"),
            variant=data.get("variant"),
            size=data.get("size"),
        )


class CartStorage(Protocol):
    def read(self) -> str | None: ...

    def write(self, payload: str) -> None: ...


class MemoryStorage:
    def __init__(self, payload: str | None = None):
        self.payload = payload

    def read(self) -> str | None:
        return self.payload

    def write(self, payload: str) -> None:
        self.payload = payload


class JsonFileStorage:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(payload, encoding="utf-8")


class Cart:
    """Cart state for one shopper. Call load() once, save() after changes."""

    def __init__(self, storage: CartStorage):
        self._storage = storage
        self._items: list[CartItem] = []

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    def load(self) -> Cart:
        """Replace in-memory state with the stored cart. Bad payloads give an empty cart."""
        self._items = []
        payload = self._storage.read()
        if not payload:
            return self
        try:
            raw = json.loads(payload)
            items = [CartItem.from_dict(entry) for entry in raw]
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Discarding unreadable cart payload: %s", exc)
            return self
        for item in items:
            self.add_item(item)
        return self

    def save(self) -> None:
        self._storage.write(json.dumps([item.to_dict() for item in self._items]))

    def _index(self, key: LineKey) -> int | None:
        for i, item in enumerate(self._items):
            if item.key == key:
                return i
        return None

    def add_item(self, item: CartItem) -> CartItem:
        idx = self._index(item.key)
        if idx is None:
            self._items.append(item)
            return item
        merged = replace(self._items[idx], quantity=self._items[idx].quantity + item.quantity)
        self._items[idx] = merged
        return merged

    def remove_item(
        self,
        product_id: int | str,
        variant: str | None = None,
        size: str | None = None,
    ) -> None:
        key = (product_id, variant, size)
        self._items = [i for i in self._items if i.key != key]

    def update_quantity(
        self,
        product_id: int | str,
        quantity: int,
        variant: str | None = None,
        size: str | None = None,
    ) -> None:
        if quantity <= 0:
            self.remove_item(product_id, variant, size)
            return
        idx = self._index((product_id, variant, size))
        if idx is not None:
            self._items[idx] = replace(self._items[idx], quantity=quantity)

    def clear(self) -> None:
        self._items = []

    def total(self) -> int:
        return sum(item.total_price for item in self._items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def order_lines(self) -> list[dict[str, Any]]:
        """Cart lines in the shape POST /shop/orders accepts."""
        return [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "variant": item.variant,
                "size": item.size,
            }
            for item in self._items
        ]
