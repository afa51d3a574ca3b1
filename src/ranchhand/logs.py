"""Ranch log book: free-form entries of what happened on the ranch."""

from __future__ import annotations

from typing import Any

from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .errors import DocumentNotFoundError, LogNotFoundError, ValidationError
from .models import LOG_CATEGORIES, RanchLog, _utc_now, parse_money
from .pricing import quantize_money
from .store import DocumentStore

COLLECTION = "misc_logs"


class LogService:
    def __init__(self, store: DocumentStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def list(self, category: str | None = None, limit: int | None = None) -> list[RanchLog]:
        """List entries newest first. A category of "all" means no filter."""
        where = None
        if category and category != "all":
            if category not in LOG_CATEGORIES:
                raise ValidationError(
                    "category", f"'{category}' (expected one of: {', '.join(LOG_CATEGORIES)})"
                )
            where = ("category", category)
        docs = self.store.list(
            COLLECTION, where=where, order_by="created_at", descending=True, limit=limit
        )
        return [RanchLog.from_dict(d) for d in docs]

    def get(self, log_id: str) -> RanchLog:
        try:
            return RanchLog.from_dict(self.store.get(COLLECTION, log_id))
        except DocumentNotFoundError:
            raise LogNotFoundError(log_id) from None

    def create(self, data: dict[str, Any], actor: Actor) -> RanchLog:
        """
        Add an entry to the log book.

        An empty or zero amount is stored as no amount. Unknown categories
        fall back to "misc".

        Raises:
            ValidationError: If the description is missing.
        """
        require(actor, Capability.EDIT_RECORDS)
        description = (data.get("description") or "").strip()
        if not description:
            raise ValidationError("description", "is required")

        amount = quantize_money(parse_money(data.get("amount")))
        category = data.get("category")

        entry = RanchLog(
            id="",
            description=description,
            category=category if category in LOG_CATEGORIES else "misc",
            amount=amount or None,
            user_id=actor.id,
            user_name=actor.name,
            created_at=_utc_now(),
        )
        fields = entry.to_dict()
        fields.pop("id")
        created = RanchLog.from_dict(self.store.insert(COLLECTION, fields))
        self.feed.record(actor, f"Logged: {description}", "log", created.id)
        return created

    def delete(self, log_id: str, actor: Actor) -> RanchLog:
        entry = self.get(log_id)
        require_owner_or(actor, entry.user_id, Capability.MANAGE_ALL)
        self.store.delete(COLLECTION, log_id)
        self.feed.record(actor, "Deleted a log entry", "log", log_id)
        return entry
