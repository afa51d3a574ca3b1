"""Shared ranch to-do list."""

from __future__ import annotations

from typing import Any

from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .errors import DocumentNotFoundError, TodoNotFoundError, ValidationError
from .models import Todo, _utc_now
from .store import DocumentStore

COLLECTION = "todos"


class TodoService:
    def __init__(self, store: DocumentStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def list(self) -> list[Todo]:
        docs = self.store.list(COLLECTION, order_by="sort_order")
        return [Todo.from_dict(d) for d in docs]

    def get(self, todo_id: str) -> Todo:
        try:
            return Todo.from_dict(self.store.get(COLLECTION, todo_id))
        except DocumentNotFoundError:
            raise TodoNotFoundError(todo_id) from None

    def create(self, data: dict[str, Any], actor: Actor) -> Todo:
        require(actor, Capability.EDIT_RECORDS)
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("title", "is required")

        try:
            sort_order = int(data.get("sort_order") or 0)
        except (TypeError, ValueError):
            sort_order = 0

        now = _utc_now()
        todo = Todo(
            id="",
            title=title,
            description=data.get("description") or "",
            assigned_role=data.get("assigned_role") or None,
            sort_order=sort_order,
            created_by=actor.id,
            created_at=now,
            updated_at=now,
        )
        fields = todo.to_dict()
        fields.pop("id")
        created = Todo.from_dict(self.store.insert(COLLECTION, fields))
        self.feed.record(actor, f"Added task: {title}", "todo", created.id)
        return created

    def toggle(self, todo_id: str, actor: Actor) -> Todo:
        """
        Complete or reopen a task.

        Reopening clears who completed it and when.
        """
        require(actor, Capability.EDIT_RECORDS)
        todo = self.get(todo_id)
        completing = not todo.is_completed

        doc = self.store.update(
            COLLECTION,
            todo_id,
            {
                "is_completed": completing,
                "completed_by": actor.id if completing else None,
                "completed_by_name": actor.name if completing else None,
                "completed_at": _utc_now() if completing else None,
                "updated_at": _utc_now(),
            },
        )
        verb = "Completed" if completing else "Unchecked"
        self.feed.record(actor, f"{verb} task: {todo.title}", "todo", todo_id)
        return Todo.from_dict(doc)

    def delete(self, todo_id: str, actor: Actor) -> Todo:
        todo = self.get(todo_id)
        require_owner_or(actor, todo.created_by, Capability.MANAGE_ALL)
        self.store.delete(COLLECTION, todo_id)
        self.feed.record(actor, "Deleted a task", "todo", todo_id)
        return todo
