"""Per-item completion checklist for orders."""

from dataclasses import dataclass, replace
from typing import Iterable

from .auth import Actor
from .errors import ChecklistIndexError
from .models import ChecklistEntry, _utc_now


@dataclass(frozen=True)
class ChecklistProgress:
    checked: int
    total: int

    @property
    def percent(self) -> float:
        # An order with no items has nothing to check
        if self.total == 0:
            return 0.0
        return self.checked / self.total * 100


def reconcile(checklist: Iterable[ChecklistEntry], item_count: int) -> list[ChecklistEntry]:
    """
    Pad a checklist with unchecked entries until it covers every item.

    Entries past item_count (items removed after checking) are kept.
    """
    entries = [replace(e) for e in checklist]
    missing = item_count - len(entries)
    if missing > 0:
        entries.extend(ChecklistEntry() for _ in range(missing))
    return entries


def toggle(
    checklist: Iterable[ChecklistEntry],
    index: int,
    item_count: int,
    actor: Actor,
    now: str | None = None,
) -> list[ChecklistEntry]:
    """
    Flip the entry at index and return the new checklist.

    Checking records who and when; unchecking resets the entry completely so
    an unchecked box never shows a stale name.

    Raises:
        ChecklistIndexError: If index is outside the current items.
    """
    if index < 0 or index >= item_count:
        raise ChecklistIndexError(index, item_count)

    entries = reconcile(checklist, item_count)
    if entries[index].checked:
        entries[index] = ChecklistEntry()
    else:
        entries[index] = ChecklistEntry(
            checked=True,
            checked_by=actor.id,
            checked_by_name=actor.name,
            checked_at=now or _utc_now(),
        )
    return entries


def progress(checklist: Iterable[ChecklistEntry], item_count: int) -> ChecklistProgress:
    """Count checked entries among the first item_count positions."""
    entries = reconcile(checklist, item_count)[:item_count]
    return ChecklistProgress(checked=sum(1 for e in entries if e.checked), total=item_count)
