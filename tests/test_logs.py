"""Tests for the ranch log book."""

from decimal import Decimal

import pytest

from ranchhand.errors import LogNotFoundError, PermissionDeniedError, ValidationError


class TestCreateLog:
    def test_create(self, ranch, member):
        entry = ranch.logs.create(
            {"description": "Sold two cows", "amount": "40", "category": "livestock"}, member
        )
        assert entry.description == "Sold two cows"
        assert entry.amount == Decimal("40.00")
        assert entry.category == "livestock"
        assert entry.user_name == "Sadie"

    def test_empty_or_zero_amount_is_none(self, ranch, member):
        assert ranch.logs.create({"description": "Fed horses"}, member).amount is None
        assert ranch.logs.create({"description": "Fed pigs", "amount": "0"}, member).amount is None

    def test_unknown_category_is_misc(self, ranch, member):
        assert ranch.logs.create({"description": "x", "category": "weather"}, member).category == "misc"

    def test_description_required(self, ranch, member):
        with pytest.raises(ValidationError):
            ranch.logs.create({"description": "  "}, member)

    def test_guest_cannot_log(self, ranch, guest):
        with pytest.raises(PermissionDeniedError):
            ranch.logs.create({"description": "Fed horses"}, guest)

    def test_records_activity(self, ranch, member):
        ranch.logs.create({"description": "Mended fence"}, member)
        assert ranch.activity.recent()[0].action == "Logged: Mended fence"


class TestListLogs:
    def test_newest_first_with_limit(self, ranch, member):
        for text in ("first", "second", "third"):
            ranch.logs.create({"description": text}, member)
        assert [e.description for e in ranch.logs.list(limit=2)] == ["third", "second"]

    def test_category_filter(self, ranch, member):
        ranch.logs.create({"description": "Wheat in", "category": "crops"}, member)
        ranch.logs.create({"description": "Paid vet", "category": "finance"}, member)
        assert [e.description for e in ranch.logs.list(category="crops")] == ["Wheat in"]
        assert len(ranch.logs.list(category="all")) == 2

    def test_unknown_category_filter(self, ranch):
        with pytest.raises(ValidationError):
            ranch.logs.list(category="weather")


class TestDeleteLog:
    def test_owner_can_delete(self, ranch, member):
        entry = ranch.logs.create({"description": "Oops"}, member)
        ranch.logs.delete(entry.id, member)
        assert ranch.logs.list() == []
        assert ranch.activity.recent()[0].action == "Deleted a log entry"

    def test_other_member_cannot_delete(self, ranch, member, other_member, admin):
        entry = ranch.logs.create({"description": "Mine"}, member)
        with pytest.raises(PermissionDeniedError):
            ranch.logs.delete(entry.id, other_member)
        ranch.logs.delete(entry.id, admin)

    def test_delete_missing(self, ranch, admin):
        with pytest.raises(LogNotFoundError):
            ranch.logs.delete("nope", admin)
