"""Price catalog that line items are picked from."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .activity import ActivityFeed
from .auth import Actor, Capability, require
from .errors import CatalogItemNotFoundError, DocumentNotFoundError, ValidationError
from .models import PRICE_CATEGORIES, CatalogItem, _utc_now, parse_money
from .pricing import ZERO, quantize_money, search_catalog
from .store import DocumentStore

COLLECTION = "prices"

DEFAULT_PRICES: list[tuple[str, str]] = [
    ("American Ginseng", "0.30"),
    ("Animal Fat", "1.00"),
    ("Animal Feed", "0.75"),
    ("Barley", "0.25"),
    ("Bay Bolete", "0.30"),
    ("Bay Leaf", "0.30"),
    ("Beef", "0.75"),
    ("Bell Pepper", "0.25"),
    ("Bird Meat (Gamey)", "0.75"),
    ("Bird Meat (Plump)", "0.75"),
    ("Blueberry", "0.30"),
    ("Broccoli", "0.25"),
    ("Burdock Root", "0.30"),
    ("Butter", "0.50"),
    ("Cabbage", "0.25"),
    ("Carrot", "0.25"),
    ("Cheese", "0.50"),
    ("Chilli Pepper", "0.25"),
    ("Cinnamon", "0.25"),
    ("Coffee Bean", "0.25"),
    ("Corn", "0.25"),
    ("Cotton", "0.30"),
    ("Cotton (Raw)", "0.25"),
    ("Creek Plum", "0.30"),
    ("Creeping Thyme", "0.30"),
    ("Cream", "0.50"),
    ("Crows Garlic", "0.25"),
    ("Cucumber", "0.25"),
    ("Deluxe Fertilizer", "1.50"),
    ("Desert Sage", "0.30"),
    ("Dewberry", "0.30"),
    ("Eggs", "0.75"),
    ("Echinacea", "0.30"),
    ("Evergreen Huckleberry", "0.30"),
    ("Feather", "0.55"),
    ("Fertiliser", "0.50"),
    ("Flour", "0.25"),
    ("Ginseng (Alaskan)", "0.30"),
    ("Ginseng (American)", "0.30"),
    ("Glass Jar", "0.50"),
    ("Hay", "0.75"),
    ("Haycube", "1.25"),
    ("Hop", "0.25"),
    ("Lavender", "0.30"),
    ("Lasso", "8.00"),
    ("Lettuce", "0.25"),
    ("Mature Venison Meat", "0.40"),
    ("Manure", "0.55"),
    ("Milk", "0.75"),
    ("Mint", "0.30"),
    ("Mutton", "0.75"),
    ("Nitrite", "0.75"),
    ("Oat", "0.25"),
    ("Onion", "0.25"),
    ("Pork", "0.75"),
    ("Potato", "0.25"),
    ("Pumpkin", "0.25"),
    ("Raspberry", "0.30"),
    ("Rye", "0.25"),
    ("Sap", "0.20"),
    ("Saw Dust", "0.20"),
    ("Stick", "0.20"),
    ("Sugar", "0.25"),
    ("Sugar Cane", "0.25"),
    ("Sulfur", "0.75"),
    ("Sunflower", "0.25"),
    ("Tobacco", "0.25"),
    ("Tomato", "0.25"),
    ("Watermelon", "0.25"),
    ("Wintergreen Huckleberry", "0.30"),
    ("Wheat", "0.25"),
    ("Wood", "0.20"),
    ("Wool", "0.60"),
    ("Yarrow", "0.30"),
]


def _validated(name: Any, price: Any, category: Any) -> tuple[str, Decimal, str]:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name", "is required")
    value = quantize_money(parse_money(price))
    if value < ZERO:
        raise ValidationError("price", "can't be negative")
    return name, value, category if category in PRICE_CATEGORIES else "other"


class CatalogService:
    """CRUD over the price catalog. Editing needs the catalog capability."""

    def __init__(self, store: DocumentStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def list(self, category: str | None = None, search: str | None = None) -> list[CatalogItem]:
        where = ("category", category) if category else None
        docs = self.store.list(COLLECTION, where=where, order_by="name")
        return search_catalog([CatalogItem.from_dict(d) for d in docs], search)

    def get(self, item_id: str) -> CatalogItem:
        try:
            return CatalogItem.from_dict(self.store.get(COLLECTION, item_id))
        except DocumentNotFoundError:
            raise CatalogItemNotFoundError(item_id) from None

    def create(self, name: str, price: Any, category: str | None, actor: Actor) -> CatalogItem:
        require(actor, Capability.MANAGE_CATALOG)
        name, value, category = _validated(name, price, category)
        now = _utc_now()
        doc = self.store.insert(
            COLLECTION,
            {"name": name, "price": str(value), "category": category, "created_at": now, "updated_at": now},
        )
        item = CatalogItem.from_dict(doc)
        self.feed.record(actor, f"Added price: {name}", "price", item.id)
        return item

    def update(self, item_id: str, changes: dict[str, Any], actor: Actor) -> CatalogItem:
        """
        Edit a catalog entry.

        Orders and quotes keep the price they were created with.
        """
        require(actor, Capability.MANAGE_CATALOG)
        current = self.get(item_id)
        name, value, category = _validated(
            changes.get("name", current.name),
            changes.get("price", current.price),
            changes.get("category", current.category),
        )
        doc = self.store.update(
            COLLECTION,
            item_id,
            {"name": name, "price": str(value), "category": category, "updated_at": _utc_now()},
        )
        self.feed.record(actor, f"Updated price: {name}", "price", item_id)
        return CatalogItem.from_dict(doc)

    def delete(self, item_id: str, actor: Actor) -> CatalogItem:
        require(actor, Capability.MANAGE_CATALOG)
        item = self.get(item_id)
        self.store.delete(COLLECTION, item_id)
        self.feed.record(actor, f"Deleted price: {item.name}", "price", item_id)
        return item

    def import_defaults(self, actor: Actor) -> list[CatalogItem]:
        """Seed the default price list, skipping names already in the catalog."""
        require(actor, Capability.MANAGE_CATALOG)
        existing = {item.name.lower() for item in self.list()}
        now = _utc_now()
        added = []
        for name, price in DEFAULT_PRICES:
            if name.lower() in existing:
                continue
            doc = self.store.insert(
                COLLECTION,
                {"name": name, "price": price, "category": "other", "created_at": now, "updated_at": now},
            )
            added.append(CatalogItem.from_dict(doc))
        if added:
            self.feed.record(actor, f"Imported {len(added)} default prices", "price")
        return added
