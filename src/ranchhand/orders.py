"""Order storage and workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from . import checklist as checklist_ops
from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .checklist import ChecklistProgress
from .errors import (
    DocumentNotFoundError,
    InvalidStatusError,
    OrderNotFoundError,
    ValidationError,
)
from .events import EventBus, OrderStatusChanged
from .models import ORDER_STATUSES, Order, _utc_now, parse_money
from .pricing import (
    ZERO,
    compute_totals,
    describe_items,
    parse_line_items,
    quantize_money,
)
from .store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "orders"

UPDATABLE_FIELDS = {
    "customer_name",
    "contact_info",
    "items",
    "discount",
    "price",
    "deposit_paid",
    "description",
    "status",
    "assigned_to",
    "assigned_to_name",
    "notes",
}


@dataclass(frozen=True)
class OrderStats:
    total_outstanding: Decimal
    total_deposits: Decimal
    completed_today: int
    pending_deliveries: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_outstanding": str(quantize_money(self.total_outstanding)),
            "total_deposits": str(quantize_money(self.total_deposits)),
            "completed_today": self.completed_today,
            "pending_deliveries": self.pending_deliveries,
        }


def validate_order_status(status: str) -> str:
    if status not in ORDER_STATUSES:
        raise InvalidStatusError(status, ORDER_STATUSES)
    return status


def drop_null_money_fields(changes: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    """Copy changes, treating an explicit None for a priced field as "leave unchanged"."""
    return {k: v for k, v in changes.items() if not (k in keys and v is None)}


def priced_fields(
    raw_items: Any, discount: Any, fallback_price: Any = None
) -> dict[str, Any]:
    """
    Work out the stored money fields for an order or quote.

    With line items the total comes from the pricing engine; without them a
    hand-entered price stands as both subtotal and total.
    """
    items = parse_line_items(raw_items)
    if items:
        totals = compute_totals(items, discount)
        return {
            "items": items,
            "subtotal": quantize_money(totals.subtotal),
            "discount": totals.discount_percent,
            "total": quantize_money(totals.total),
        }
    price = quantize_money(parse_money(fallback_price))
    if price < ZERO:
        raise ValidationError("price", "can't be negative")
    return {"items": [], "subtotal": price, "discount": ZERO, "total": price}


class OrderService:
    """Creates, reads and moves orders through their statuses."""

    def __init__(self, store: DocumentStore, feed: ActivityFeed, bus: EventBus):
        self.store = store
        self.feed = feed
        self.bus = bus

    def _load(self, order_id: str) -> Order:
        try:
            return Order.from_dict(self.store.get(COLLECTION, order_id))
        except DocumentNotFoundError:
            raise OrderNotFoundError(order_id) from None

    def get(self, order_id: str) -> Order:
        """
        Get an order by ID, with its checklist padded to the item count.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
        """
        order = self._load(order_id)
        order.checklist = checklist_ops.reconcile(order.checklist, len(order.items))
        return order

    def list(self, status: str | None = None, search: str | None = None) -> list[Order]:
        """List orders newest first, optionally filtered by status and a search term."""
        where = ("status", validate_order_status(status)) if status else None
        docs = self.store.list(COLLECTION, where=where, order_by="created_at", descending=True)
        orders = [Order.from_dict(d) for d in docs]

        if search:
            needle = search.lower()
            orders = [
                o for o in orders
                if needle in o.customer_name.lower() or needle in o.description.lower()
            ]

        for order in orders:
            order.checklist = checklist_ops.reconcile(order.checklist, len(order.items))
        return orders

    def create(self, data: dict[str, Any], actor: Actor) -> Order:
        """
        Create an order from form data.

        Raises:
            ValidationError: If the customer name is missing or a line is malformed.
        """
        require(actor, Capability.EDIT_RECORDS)

        customer_name = (data.get("customer_name") or "").strip()
        if not customer_name:
            raise ValidationError("customer_name", "is required")

        money = priced_fields(data.get("items"), data.get("discount"), data.get("price"))
        description = (data.get("description") or "").strip() or describe_items(money["items"])

        now = _utc_now()
        order = Order(
            id="",
            customer_name=customer_name,
            contact_info=data.get("contact_info") or "",
            items=money["items"],
            subtotal=money["subtotal"],
            discount=money["discount"],
            price=money["total"],
            deposit_paid=quantize_money(parse_money(data.get("deposit_paid"))),
            description=description,
            status="outstanding",
            assigned_to=data.get("assigned_to") or None,
            assigned_to_name=data.get("assigned_to_name") or None,
            notes=data.get("notes") or "",
            created_by=actor.id,
            created_by_name=actor.name,
            created_at=now,
            updated_at=now,
        )
        doc = self.insert(order)
        self.feed.record(actor, f"Created order for {customer_name}", "order", doc.id)
        return doc

    def insert(self, order: Order) -> Order:
        """Store a fully built order under a fresh ID, checklist padded to its items."""
        order.checklist = checklist_ops.reconcile(order.checklist, len(order.items))
        data = order.to_dict()
        data.pop("id")
        return Order.from_dict(self.store.insert(COLLECTION, data))

    def update(self, order_id: str, changes: dict[str, Any], actor: Actor) -> Order:
        """
        Merge changes into an order.

        Totals are recomputed whenever items or discount change. A status
        change publishes OrderStatusChanged once the write has landed.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
            ValidationError: If a field is unknown or invalid.
            ConcurrentUpdateError: If someone else wrote the order meanwhile.
        """
        require(actor, Capability.EDIT_RECORDS)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("fields", f"can't update {', '.join(sorted(unknown))}")

        current = self._load(order_id)
        fields = drop_null_money_fields(changes, ("items", "discount", "price"))

        if "status" in fields:
            validate_order_status(fields["status"])
        if "customer_name" in fields and not (fields["customer_name"] or "").strip():
            raise ValidationError("customer_name", "is required")

        if "items" in fields or "discount" in fields or "price" in fields:
            raw_items = fields.get("items", current.items)
            discount = fields.get("discount", current.discount)
            money = priced_fields(raw_items, discount, fields.get("price", current.price))
            fields["items"] = [i.to_dict() for i in money["items"]]
            fields["subtotal"] = str(money["subtotal"])
            fields["discount"] = str(money["discount"])
            fields["price"] = str(money["total"])
        if "deposit_paid" in fields:
            fields["deposit_paid"] = str(quantize_money(parse_money(fields["deposit_paid"])))
        fields["updated_at"] = _utc_now()

        doc = self.store.update(
            COLLECTION, order_id, fields, expected_version=current.version
        )
        updated = Order.from_dict(doc)
        updated.checklist = checklist_ops.reconcile(updated.checklist, len(updated.items))

        status_changed = "status" in changes and updated.status != current.status
        label = f" -> {updated.status}" if "status" in changes else ""
        self.feed.record(actor, f"Updated order{label}", "order", order_id)

        if status_changed:
            logger.info(
                "Order %s moved %s -> %s", order_id, current.status, updated.status
            )
            self.bus.publish(
                OrderStatusChanged(
                    order_id=order_id,
                    customer_name=updated.customer_name,
                    old_status=current.status,
                    new_status=updated.status,
                    price=updated.price,
                    actor=actor,
                    transition_id=f"{order_id}:{updated.version}:{updated.status}",
                )
            )
        return updated

    def set_status(self, order_id: str, status: str, actor: Actor) -> Order:
        return self.update(order_id, {"status": status}, actor)

    def delete(self, order_id: str, actor: Actor) -> Order:
        """
        Delete an order; its checklist goes with it.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
            PermissionDeniedError: If the actor neither created it nor manages all records.
        """
        order = self._load(order_id)
        require_owner_or(actor, order.created_by, Capability.MANAGE_ALL)
        self.store.delete(COLLECTION, order_id)
        self.feed.record(actor, "Deleted an order", "order", order_id)
        return order

    def toggle_checklist_item(self, order_id: str, index: int, actor: Actor) -> Order:
        """
        Check or uncheck one line of an order's checklist.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
            ChecklistIndexError: If index is outside the order's items.
            ConcurrentUpdateError: If the order changed between read and write.
        """
        require(actor, Capability.EDIT_RECORDS)
        order = self._load(order_id)
        item_count = len(order.items)
        entries = checklist_ops.toggle(order.checklist, index, item_count, actor)

        doc = self.store.update(
            COLLECTION,
            order_id,
            {"checklist": [e.to_dict() for e in entries], "updated_at": _utc_now()},
            expected_version=order.version,
        )
        updated = Order.from_dict(doc)
        updated.checklist = checklist_ops.reconcile(updated.checklist, item_count)

        item_name = order.items[index].name
        verb = "Checked" if entries[index].checked else "Unchecked"
        self.feed.record(
            actor, f"{verb} {item_name} on order for {order.customer_name}", "order", order_id
        )
        return updated

    def checklist_progress(self, order_id: str) -> ChecklistProgress:
        order = self._load(order_id)
        return checklist_ops.progress(order.checklist, len(order.items))

    def stats(self, today: datetime | None = None) -> OrderStats:
        """Dashboard figures across all orders."""
        orders = [Order.from_dict(d) for d in self.store.list(COLLECTION)]
        day = (today or datetime.now(timezone.utc)).date().isoformat()

        return OrderStats(
            total_outstanding=sum(
                (o.price for o in orders if o.status == "outstanding"), ZERO
            ),
            total_deposits=sum(
                (o.deposit_paid for o in orders if o.status != "delivered"), ZERO
            ),
            completed_today=sum(
                1 for o in orders if o.status == "delivered" and o.updated_at.startswith(day)
            ),
            pending_deliveries=sum(1 for o in orders if o.status == "ready"),
        )
