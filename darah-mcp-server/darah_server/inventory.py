"""In-memory catalog shared by every session."""

import json
import logging
import os
import threading
from decimal import Decimal
from typing import Any, Optional

from .models import Item

logger = logging.getLogger(__name__)


def is_purchasable(item: Item) -> bool:
    """An item can be bought when it is active and has stock."""
    return item.active and item.stock > 0


class Inventory:
    """Authoritative item list.

    Items are immutable; every change replaces the stored item, so a value
    returned by ``find_item`` is a consistent snapshot of that item.
    """

    def __init__(self, items: Optional[list[Item]] = None) -> None:
        self._items: dict[str, Item] = {}
        self._lock = threading.Lock()
        for item in items or []:
            self.upsert(item)

    def find_item(self, item_id: str) -> Optional[Item]:
        """Look up an item by ID, None if it does not exist."""
        return self._items.get(item_id)

    def list_items(self) -> list[Item]:
        return list(self._items.values())

    def items_by_category(self, include_inactive: bool = False) -> dict[str, list[Item]]:
        """Group items by category, keeping catalog order inside each group."""
        grouped: dict[str, list[Item]] = {}
        for item in self.list_items():
            if not item.active and not include_inactive:
                continue
            grouped.setdefault(item.category, []).append(item)
        return grouped

    def upsert(self, item: Item) -> Item:
        with self._lock:
            self._items[item.id] = item
        return item

    def remove(self, item_id: str) -> None:
        with self._lock:
            self._items.pop(item_id, None)

    def set_stock(self, item_id: str, stock: int) -> Item:
        return self._replace(item_id, stock=stock)

    def set_active(self, item_id: str, active: bool) -> Item:
        return self._replace(item_id, active=active)

    def _replace(self, item_id: str, **changes: Any) -> Item:
        with self._lock:
            current = self._items.get(item_id)
            if current is None:
                raise KeyError(f"unknown item_id '{item_id}'")
            updated = Item(**{**current.model_dump(), **changes})
            self._items[item_id] = updated
        logger.info(f"Inventory updated for {item_id}: {changes}")
        return updated


def _parse_item(raw: dict[str, Any], position: int) -> Item:
    """Build an Item from a catalog record.

    Records may carry either ``price`` (reais) or ``price_cents``. Records
    without an ID get their SKU, then their position in the file.

    Raises:
        ValueError: If price or stock is not a number
    """
    try:
        if "price" in raw:
            if raw["price"] is None:
                raise ValueError("price is null")
            price = Decimal(str(raw["price"]))
        else:
            price = Decimal(int(raw.get("price_cents") or 0)) / 100
        stock = raw.get("stock")
        stock = int(stock) if stock is not None else 0
    except (ArithmeticError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid catalog record #{position}: {e}") from e

    images = raw.get("images")
    if not isinstance(images, list):
        images = [raw["image_url"]] if raw.get("image_url") else []

    item_id = raw.get("id")
    if item_id is None:
        item_id = raw.get("sku") if raw.get("sku") is not None else position

    return Item(
        id=str(item_id),
        sku=raw.get("sku"),
        name=raw.get("name") or "Produto",
        description=raw.get("description") or "",
        category=raw.get("category") or "",
        price=price,
        stock=stock,
        active=bool(raw.get("active", True)),
        highlight=bool(raw.get("highlight", False)),
        images=[str(url) for url in images if url],
    )


def load_catalog(path: str) -> Inventory:
    """
    Load an inventory from a JSON catalog file.

    Args:
        path: File holding ``{"products": [...]}`` or a bare list of products

    Returns:
        Inventory seeded with the file's items

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or a record is invalid
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid catalog file {path}: {e}") from e

    records = data.get("products", []) if isinstance(data, dict) else data
    items = [_parse_item(raw, position) for position, raw in enumerate(records, 1)]
    logger.info(f"Loaded {len(items)} item(s) from {path}")
    return Inventory(items)
