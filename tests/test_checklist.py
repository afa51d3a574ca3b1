"""Tests for the order checklist."""

import pytest

from ranchhand.auth import Actor
from ranchhand.checklist import progress, reconcile, toggle
from ranchhand.errors import ChecklistIndexError
from ranchhand.models import ChecklistEntry

ACTOR = Actor(id="u1", name="Arthur", role="member")


class TestReconcile:
    def test_pads_to_item_count(self):
        existing = ChecklistEntry(checked=True, checked_by="u1", checked_by_name="Arthur", checked_at="t")
        entries = reconcile([existing], 3)
        assert len(entries) == 3
        assert entries[0] == existing
        assert entries[1] == ChecklistEntry()
        assert entries[2] == ChecklistEntry()

    def test_keeps_entries_beyond_item_count(self):
        entries = reconcile([ChecklistEntry(checked=True)] * 3, 1)
        assert len(entries) == 3

    def test_does_not_mutate_input(self):
        entries = [ChecklistEntry()]
        reconcile(entries, 4)
        assert len(entries) == 1


class TestToggle:
    def test_check_records_actor_and_time(self):
        entries = toggle([], 1, 2, ACTOR, now="2026-01-01T00:00:00Z")
        assert entries[1].checked is True
        assert entries[1].checked_by == "u1"
        assert entries[1].checked_by_name == "Arthur"
        assert entries[1].checked_at == "2026-01-01T00:00:00Z"
        assert entries[0] == ChecklistEntry()

    def test_uncheck_resets_fully(self):
        entries = toggle([], 0, 1, ACTOR)
        entries = toggle(entries, 0, 1, ACTOR)
        assert entries[0] == ChecklistEntry()
        assert entries[0].checked_by is None
        assert entries[0].checked_at is None

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_out_of_range(self, index):
        with pytest.raises(ChecklistIndexError):
            toggle([], index, 2, ACTOR)

    def test_no_items(self):
        with pytest.raises(ChecklistIndexError):
            toggle([], 0, 0, ACTOR)


class TestProgress:
    def test_counts_checked(self):
        entries = toggle([], 0, 4, ACTOR)
        result = progress(entries, 4)
        assert result.checked == 1
        assert result.total == 4
        assert result.percent == 25.0

    def test_ignores_entries_beyond_items(self):
        entries = [ChecklistEntry(checked=True)] * 3
        result = progress(entries, 2)
        assert result.checked == 2
        assert result.total == 2

    def test_empty_order(self):
        result = progress([], 0)
        assert result.percent == 0.0
