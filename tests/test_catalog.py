"""Tests for the price catalog, to-dos and the activity feed."""

from decimal import Decimal

import pytest

from ranchhand.catalog import DEFAULT_PRICES
from ranchhand.errors import (
    CatalogItemNotFoundError,
    PermissionDeniedError,
    TodoNotFoundError,
    TransientIOError,
    ValidationError,
)


class TestCatalog:
    def test_create_and_list_sorted(self, ranch, admin):
        ranch.catalog.create("Milk", "0.75", "goods", admin)
        ranch.catalog.create("Hay", "0.5", "crops", admin)
        items = ranch.catalog.list()
        assert [i.name for i in items] == ["Hay", "Milk"]
        assert items[0].price == Decimal("0.50")

    def test_filter_and_search(self, ranch, admin):
        ranch.catalog.create("Hay", "0.75", "crops", admin)
        ranch.catalog.create("Haycube", "1.25", "goods", admin)
        assert [i.name for i in ranch.catalog.list(category="crops")] == ["Hay"]
        assert len(ranch.catalog.list(search="hay")) == 2

    def test_unknown_category_is_other(self, ranch, admin):
        assert ranch.catalog.create("Lasso", "8", "tools", admin).category == "other"

    def test_validation(self, ranch, admin):
        with pytest.raises(ValidationError):
            ranch.catalog.create("", "1", "other", admin)
        with pytest.raises(ValidationError):
            ranch.catalog.create("Hay", "-1", "other", admin)

    def test_member_cannot_edit(self, ranch, member):
        with pytest.raises(PermissionDeniedError):
            ranch.catalog.create("Hay", "1", "crops", member)

    def test_update_does_not_touch_existing_orders(self, ranch, admin, member):
        hay = ranch.catalog.create("Hay", "0.75", "crops", admin)
        order = ranch.orders.create(
            {
                "customer_name": "Arthur",
                "items": [{"catalog_ref": hay.id, "name": hay.name, "unit_price": hay.price}],
            },
            member,
        )
        ranch.catalog.update(hay.id, {"price": "2"}, admin)

        assert ranch.catalog.get(hay.id).price == Decimal("2.00")
        assert ranch.orders.get(order.id).price == Decimal("0.75")

    def test_delete(self, ranch, admin):
        hay = ranch.catalog.create("Hay", "0.75", "crops", admin)
        ranch.catalog.delete(hay.id, admin)
        with pytest.raises(CatalogItemNotFoundError):
            ranch.catalog.get(hay.id)

    def test_import_defaults_skips_existing(self, ranch, admin):
        ranch.catalog.create("hay", "9.99", "crops", admin)
        added = ranch.catalog.import_defaults(admin)
        assert len(added) == len(DEFAULT_PRICES) - 1
        assert ranch.catalog.import_defaults(admin) == []

        hay = [i for i in ranch.catalog.list() if i.name.lower() == "hay"]
        assert len(hay) == 1
        assert hay[0].price == Decimal("9.99")


class TestTodos:
    def test_create_and_order(self, ranch, member):
        ranch.todos.create({"title": "Feed horses", "sort_order": 2}, member)
        ranch.todos.create({"title": "Mend fence", "sort_order": 1}, member)
        assert [t.title for t in ranch.todos.list()] == ["Mend fence", "Feed horses"]

    def test_title_required(self, ranch, member):
        with pytest.raises(ValidationError):
            ranch.todos.create({"title": " "}, member)

    def test_toggle_attribution(self, ranch, member, other_member):
        todo = ranch.todos.create({"title": "Feed horses"}, member)

        done = ranch.todos.toggle(todo.id, other_member)
        assert done.is_completed is True
        assert done.completed_by_name == "Charles"
        assert done.completed_at is not None

        reopened = ranch.todos.toggle(todo.id, member)
        assert reopened.is_completed is False
        assert reopened.completed_by is None
        assert reopened.completed_at is None

    def test_delete_missing(self, ranch, admin):
        with pytest.raises(TodoNotFoundError):
            ranch.todos.delete("nope", admin)

    def test_guest_cannot_toggle(self, ranch, member, guest):
        todo = ranch.todos.create({"title": "Feed horses"}, member)
        with pytest.raises(PermissionDeniedError):
            ranch.todos.toggle(todo.id, guest)


class TestActivityFeed:
    def test_newest_first_with_limit(self, ranch, member):
        for name in ("A", "B", "C"):
            ranch.orders.create({"customer_name": name}, member)
        feed = ranch.activity.recent(limit=2)
        assert [e.action for e in feed] == ["Created order for C", "Created order for B"]

    def test_feed_failure_does_not_fail_operation(self, ranch, member, store, monkeypatch, caplog):
        real_insert = store.insert

        def flaky_insert(collection, data, doc_id=None):
            if collection == "activity":
                raise TransientIOError("write of 'activity'", "disk full")
            return real_insert(collection, data, doc_id)

        monkeypatch.setattr(store, "insert", flaky_insert)
        order = ranch.orders.create({"customer_name": "Arthur"}, member)

        assert ranch.orders.get(order.id).customer_name == "Arthur"
        assert "Failed to record activity" in caplog.text
