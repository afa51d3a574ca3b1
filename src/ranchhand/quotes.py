"""Quote storage and quote-to-order conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .activity import ActivityFeed
from .auth import SYSTEM_ACTOR, Actor, Capability, require, require_owner_or
from .errors import (
    DocumentNotFoundError,
    InvalidStatusError,
    QuoteAlreadyConvertedError,
    QuoteNotFoundError,
    ValidationError,
)
from .models import QUOTE_STATUSES, Order, Quote, _utc_now
from .orders import COLLECTION as ORDERS_COLLECTION
from .orders import OrderService, drop_null_money_fields, priced_fields
from .pricing import describe_items, quantize_money
from .store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "quotes"

# Statuses a user may set directly; "converting" belongs to convert()
SETTABLE_STATUSES = ["pending", "accepted", "rejected"]

UPDATABLE_FIELDS = {
    "customer_name",
    "contact_info",
    "items",
    "discount",
    "estimated_price",
    "requested_items",
    "notes",
    "status",
}


@dataclass(frozen=True)
class ReconcileOutcome:
    quote_id: str
    outcome: str  # "linked"|"reverted"
    order_id: str | None = None


def _check_not_converting(quote: Quote) -> None:
    # Only convert() and reconcile_conversions() may touch a claimed quote
    if quote.status == "converting":
        raise ValidationError("status", "conversion in progress")


class QuoteService:
    """Manages quotes and turns accepted ones into orders."""

    def __init__(self, store: DocumentStore, feed: ActivityFeed, orders: OrderService):
        self.store = store
        self.feed = feed
        self.orders = orders

    def get(self, quote_id: str) -> Quote:
        """
        Get a quote by ID.

        Raises:
            QuoteNotFoundError: If the quote doesn't exist.
        """
        try:
            return Quote.from_dict(self.store.get(COLLECTION, quote_id))
        except DocumentNotFoundError:
            raise QuoteNotFoundError(quote_id) from None

    def list(self, status: str | None = None, search: str | None = None) -> list[Quote]:
        """List quotes newest first, optionally filtered by status and a search term."""
        if status and status not in QUOTE_STATUSES:
            raise InvalidStatusError(status, QUOTE_STATUSES)
        where = ("status", status) if status else None
        docs = self.store.list(COLLECTION, where=where, order_by="created_at", descending=True)
        quotes = [Quote.from_dict(d) for d in docs]

        if search:
            needle = search.lower()
            quotes = [
                q for q in quotes
                if needle in q.customer_name.lower() or needle in q.requested_items.lower()
            ]
        return quotes

    def create(self, data: dict[str, Any], actor: Actor) -> Quote:
        """
        Create a pending quote.

        Raises:
            ValidationError: If the customer name is missing or a line is malformed.
        """
        require(actor, Capability.EDIT_RECORDS)

        customer_name = (data.get("customer_name") or "").strip()
        if not customer_name:
            raise ValidationError("customer_name", "is required")

        money = priced_fields(data.get("items"), data.get("discount"), data.get("estimated_price"))
        requested = (data.get("requested_items") or "").strip() or describe_items(money["items"])

        now = _utc_now()
        quote = Quote(
            id="",
            customer_name=customer_name,
            contact_info=data.get("contact_info") or "",
            items=money["items"],
            subtotal=money["subtotal"],
            discount=money["discount"],
            estimated_price=money["total"],
            requested_items=requested,
            notes=data.get("notes") or "",
            status="pending",
            converted_order_id=None,
            created_by=actor.id,
            created_at=now,
            updated_at=now,
        )
        fields = quote.to_dict()
        fields.pop("id")
        created = Quote.from_dict(self.store.insert(COLLECTION, fields))
        self.feed.record(actor, f"Created quote for {customer_name}", "quote", created.id)
        return created

    def update(self, quote_id: str, changes: dict[str, Any], actor: Actor) -> Quote:
        """
        Merge changes into a quote.

        Raises:
            QuoteNotFoundError: If the quote doesn't exist.
            ValidationError: If a field is unknown or invalid, or the quote
                is being converted.
        """
        require(actor, Capability.EDIT_RECORDS)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("fields", f"can't update {', '.join(sorted(unknown))}")

        current = self.get(quote_id)
        _check_not_converting(current)
        fields = drop_null_money_fields(changes, ("items", "discount", "estimated_price"))

        if "status" in fields and fields["status"] not in SETTABLE_STATUSES:
            raise InvalidStatusError(fields["status"], SETTABLE_STATUSES)
        if "customer_name" in fields and not (fields["customer_name"] or "").strip():
            raise ValidationError("customer_name", "is required")

        if "items" in fields or "discount" in fields or "estimated_price" in fields:
            money = priced_fields(
                fields.get("items", current.items),
                fields.get("discount", current.discount),
                fields.get("estimated_price", current.estimated_price),
            )
            fields["items"] = [i.to_dict() for i in money["items"]]
            fields["subtotal"] = str(money["subtotal"])
            fields["discount"] = str(money["discount"])
            fields["estimated_price"] = str(money["total"])
        fields["updated_at"] = _utc_now()

        doc = self.store.update(COLLECTION, quote_id, fields, expected_version=current.version)
        return Quote.from_dict(doc)

    def delete(self, quote_id: str, actor: Actor) -> Quote:
        quote = self.get(quote_id)
        require_owner_or(actor, quote.created_by, Capability.MANAGE_ALL)
        _check_not_converting(quote)
        self.store.delete(COLLECTION, quote_id)
        self.feed.record(actor, "Deleted a quote", "quote", quote_id)
        return quote

    def convert(self, quote_id: str, actor: Actor) -> Order:
        """
        Turn a quote into an outstanding order.

        The quote is marked "converting" before the order is written and
        "accepted" (with a link to the order) afterwards. If the process dies
        in between, reconcile_conversions() finishes or undoes the job.

        Raises:
            QuoteNotFoundError: If the quote doesn't exist.
            QuoteAlreadyConvertedError: If the quote already links to an order.
            ValidationError: If another conversion of this quote is in flight.
            ConcurrentUpdateError: If the quote changed while being claimed.
        """
        require(actor, Capability.EDIT_RECORDS)
        quote = self.get(quote_id)

        if quote.converted_order_id:
            raise QuoteAlreadyConvertedError(quote_id, quote.converted_order_id)
        if quote.status == "converting":
            raise ValidationError("status", "conversion already in progress")

        claimed = self.store.update(
            COLLECTION,
            quote_id,
            {"status": "converting", "updated_at": _utc_now()},
            expected_version=quote.version,
        )

        now = _utc_now()
        order = self.orders.insert(
            Order(
                id="",
                customer_name=quote.customer_name,
                contact_info=quote.contact_info,
                items=quote.items,
                subtotal=quote.subtotal,
                discount=quote.discount,
                price=quantize_money(quote.estimated_price),
                description=quote.requested_items or describe_items(quote.items),
                status="outstanding",
                assigned_to=None,
                assigned_to_name=None,
                notes=quote.notes,
                source_quote_id=quote.id,
                created_by=actor.id,
                created_by_name=actor.name,
                created_at=now,
                updated_at=now,
            )
        )

        self.store.update(
            COLLECTION,
            quote_id,
            {"status": "accepted", "converted_order_id": order.id, "updated_at": _utc_now()},
            expected_version=claimed["version"],
        )

        self.feed.record(
            actor, f"Converted quote for {quote.customer_name} to order", "quote", quote_id
        )
        return order

    def reconcile_conversions(self, actor: Actor = SYSTEM_ACTOR) -> list[ReconcileOutcome]:
        """
        Resolve quotes left in "converting" by an interrupted conversion.

        A quote whose order was written gets linked and accepted; one whose
        order never got written goes back to pending.
        """
        require(actor, Capability.MANAGE_ALL)
        outcomes: list[ReconcileOutcome] = []

        for doc in self.store.list(COLLECTION, where=("status", "converting")):
            quote = Quote.from_dict(doc)
            orphans = self.store.list(
                ORDERS_COLLECTION,
                where=("source_quote_id", quote.id),
                order_by="created_at",
            )
            if orphans:
                order_id = orphans[0]["id"]
                self.store.update(
                    COLLECTION,
                    quote.id,
                    {"status": "accepted", "converted_order_id": order_id, "updated_at": _utc_now()},
                    expected_version=quote.version,
                )
                outcomes.append(ReconcileOutcome(quote.id, "linked", order_id))
                logger.info("Linked quote %s to orphaned order %s", quote.id, order_id)
            else:
                self.store.update(
                    COLLECTION,
                    quote.id,
                    {"status": "pending", "updated_at": _utc_now()},
                    expected_version=quote.version,
                )
                outcomes.append(ReconcileOutcome(quote.id, "reverted"))
                logger.info("Reverted stalled conversion of quote %s", quote.id)

        if outcomes:
            self.feed.record(
                actor, f"Reconciled {len(outcomes)} stalled quote conversion(s)", "quote"
            )
        return outcomes
