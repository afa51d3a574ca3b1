"""Data models for ranchhand."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
import uuid

ORDER_STATUSES = ["outstanding", "preparing", "ready", "delivered"]
# "converting" is held only while a conversion is in flight
QUOTE_STATUSES = ["pending", "converting", "accepted", "rejected"]
PIN_CATEGORIES = ["herb", "mine", "ore", "market", "ranch", "house", "other"]
PRICE_CATEGORIES = ["livestock", "crops", "goods", "services", "other"]
FUND_LOG_TYPES = ["deposit", "withdrawal", "adjustment"]
LOG_CATEGORIES = ["livestock", "crops", "finance", "delivery", "misc"]
RECIPE_BOOKS = ["recipes", "crafting"]


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string, fixed width so it sorts as text."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _generate_id() -> str:
    """Generate a new document ID."""
    return str(uuid.uuid4())


def parse_money(value: Any) -> Decimal:
    """
    Coerce a stored or user-supplied amount to Decimal.

    Floats go through str() so 0.1 stays 0.1. Empty or non-numeric input
    counts as zero.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


@dataclass
class LineItem:
    """A priced, quantified snapshot of a catalog entry."""

    catalog_ref: str
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "catalog_ref": self.catalog_ref,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LineItem":
        return cls(
            catalog_ref=data.get("catalog_ref", ""),
            name=data.get("name", ""),
            unit_price=parse_money(data.get("unit_price")),
            quantity=int(data.get("quantity", 1)),
        )


@dataclass
class ChecklistEntry:
    """Completion record for one line item, with attribution."""

    checked: bool = False
    checked_by: str | None = None
    checked_by_name: str | None = None
    checked_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "checked": self.checked,
            "checked_by": self.checked_by,
            "checked_by_name": self.checked_by_name,
            "checked_at": self.checked_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ChecklistEntry":
        if not data:
            return cls()
        return cls(
            checked=bool(data.get("checked", False)),
            checked_by=data.get("checked_by"),
            checked_by_name=data.get("checked_by_name"),
            checked_at=data.get("checked_at"),
        )


@dataclass
class Order:
    """A customer order."""

    id: str
    customer_name: str
    contact_info: str = ""
    items: list[LineItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")  # percent, 0..100
    price: Decimal = Decimal("0")  # total after discount
    deposit_paid: Decimal = Decimal("0")
    description: str = ""
    status: str = "outstanding"
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    notes: str = ""
    checklist: list[ChecklistEntry] = field(default_factory=list)
    source_quote_id: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "contact_info": self.contact_info,
            "items": [i.to_dict() for i in self.items],
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "price": str(self.price),
            "deposit_paid": str(self.deposit_paid),
            "description": self.description,
            "status": self.status,
            "assigned_to": self.assigned_to,
            "assigned_to_name": self.assigned_to_name,
            "notes": self.notes,
            "checklist": [c.to_dict() for c in self.checklist],
            "source_quote_id": self.source_quote_id,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            customer_name=data.get("customer_name", ""),
            contact_info=data.get("contact_info", ""),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
            subtotal=parse_money(data.get("subtotal")),
            discount=parse_money(data.get("discount")),
            price=parse_money(data.get("price")),
            deposit_paid=parse_money(data.get("deposit_paid")),
            description=data.get("description", ""),
            status=data.get("status", "outstanding"),
            assigned_to=data.get("assigned_to"),
            assigned_to_name=data.get("assigned_to_name"),
            notes=data.get("notes", ""),
            checklist=[ChecklistEntry.from_dict(c) for c in data.get("checklist") or []],
            source_quote_id=data.get("source_quote_id"),
            created_by=data.get("created_by"),
            created_by_name=data.get("created_by_name"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            version=data.get("version", 0),
        )


@dataclass
class Quote:
    """A price quote that may later become an order."""

    id: str
    customer_name: str
    contact_info: str = ""
    items: list[LineItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    estimated_price: Decimal = Decimal("0")
    requested_items: str = ""
    notes: str = ""
    status: str = "pending"
    converted_order_id: str | None = None
    created_by: str | None = None
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "contact_info": self.contact_info,
            "items": [i.to_dict() for i in self.items],
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "estimated_price": str(self.estimated_price),
            "requested_items": self.requested_items,
            "notes": self.notes,
            "status": self.status,
            "converted_order_id": self.converted_order_id,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quote":
        return cls(
            id=data["id"],
            customer_name=data.get("customer_name", ""),
            contact_info=data.get("contact_info", ""),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
            subtotal=parse_money(data.get("subtotal")),
            discount=parse_money(data.get("discount")),
            estimated_price=parse_money(data.get("estimated_price")),
            requested_items=data.get("requested_items", ""),
            notes=data.get("notes", ""),
            status=data.get("status", "pending"),
            converted_order_id=data.get("converted_order_id"),
            created_by=data.get("created_by"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            version=data.get("version", 0),
        )


@dataclass
class FundLogEntry:
    """One row of the append-only ranch fund log."""

    id: str
    type: str  # "deposit"|"withdrawal"|"adjustment"
    amount: Decimal  # for adjustments, the new absolute balance
    description: str
    balance_after: Decimal
    actor_id: str | None = None
    actor_name: str | None = None
    at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "amount": str(self.amount),
            "description": self.description,
            "balance_after": str(self.balance_after),
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "at": self.at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FundLogEntry":
        return cls(
            id=data["id"],
            type=data["type"],
            amount=parse_money(data.get("amount")),
            description=data.get("description", ""),
            balance_after=parse_money(data.get("balance_after")),
            actor_id=data.get("actor_id"),
            actor_name=data.get("actor_name"),
            at=data.get("at", ""),
        )


@dataclass
class ActivityEntry:
    """A row in the global activity feed."""

    id: str
    actor_id: str | None
    actor_name: str | None
    action: str
    entity_type: str
    entity_id: str | None
    at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "at": self.at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActivityEntry":
        return cls(
            id=data["id"],
            actor_id=data.get("actor_id"),
            actor_name=data.get("actor_name"),
            action=data.get("action", ""),
            entity_type=data.get("entity_type", ""),
            entity_id=data.get("entity_id"),
            at=data.get("at", ""),
        )


@dataclass
class MapPin:
    """A point of interest on the reference map, in image percentages."""

    id: str
    x_pct: float
    y_pct: float
    title: str
    description: str = ""
    category: str = "other"
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x_pct": self.x_pct,
            "y_pct": self.y_pct,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MapPin":
        return cls(
            id=data["id"],
            x_pct=float(data["x_pct"]),
            y_pct=float(data["y_pct"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", "other"),
            created_by=data.get("created_by"),
            created_by_name=data.get("created_by_name"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class CatalogItem:
    """An entry in the price catalog."""

    id: str
    name: str
    price: Decimal
    category: str = "other"
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "category": self.category,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogItem":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            price=parse_money(data.get("price")),
            category=data.get("category", "other"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class Todo:
    """A shared task with completion attribution."""

    id: str
    title: str
    description: str = ""
    assigned_role: str | None = None
    is_completed: bool = False
    completed_by: str | None = None
    completed_by_name: str | None = None
    completed_at: str | None = None
    sort_order: int = 0
    created_by: str | None = None
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "assigned_role": self.assigned_role,
            "is_completed": self.is_completed,
            "completed_by": self.completed_by,
            "completed_by_name": self.completed_by_name,
            "completed_at": self.completed_at,
            "sort_order": self.sort_order,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Todo":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            assigned_role=data.get("assigned_role"),
            is_completed=bool(data.get("is_completed", False)),
            completed_by=data.get("completed_by"),
            completed_by_name=data.get("completed_by_name"),
            completed_at=data.get("completed_at"),
            sort_order=int(data.get("sort_order", 0)),
            created_by=data.get("created_by"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class RanchLog:
    """An entry in the ranch log book."""

    id: str
    description: str
    category: str = "misc"
    amount: Decimal | None = None
    user_id: str | None = None
    user_name: str | None = None
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "category": self.category,
            "amount": str(self.amount) if self.amount is not None else None,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RanchLog":
        amount = data.get("amount")
        return cls(
            id=data["id"],
            description=data.get("description", ""),
            category=data.get("category", "misc"),
            amount=parse_money(amount) if amount is not None else None,
            user_id=data.get("user_id"),
            user_name=data.get("user_name"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class Ingredient:
    name: str
    quantity: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ingredient":
        return cls(name=data.get("name", ""), quantity=str(data.get("quantity") or ""))


@dataclass
class Recipe:
    """A recipe or crafting recipe: what to make, where, and from what."""

    id: str
    name: str
    description: str = ""
    location: str = ""
    ingredients: list[Ingredient] = field(default_factory=list)
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            location=data.get("location", ""),
            ingredients=[Ingredient.from_dict(i) for i in data.get("ingredients") or []],
            created_by=data.get("created_by"),
            created_by_name=data.get("created_by_name"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            version=data.get("version", 0),
        )


@dataclass
class Poster:
    """A poster image kept in blob storage, with its metadata."""

    id: str
    title: str
    filename: str
    content_type: str
    storage_path: str
    size: int = 0
    uploaded_by: str | None = None
    uploaded_by_name: str | None = None
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "filename": self.filename,
            "content_type": self.content_type,
            "storage_path": self.storage_path,
            "size": self.size,
            "uploaded_by": self.uploaded_by,
            "uploaded_by_name": self.uploaded_by_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Poster":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            filename=data.get("filename", ""),
            content_type=data.get("content_type", "application/octet-stream"),
            storage_path=data["storage_path"],
            size=int(data.get("size", 0)),
            uploaded_by=data.get("uploaded_by"),
            uploaded_by_name=data.get("uploaded_by_name"),
            created_at=data.get("created_at", ""),
        )
