"""Line-item pricing and the line-item editor."""

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Protocol

from .errors import ValidationError
from .models import LineItem, parse_money

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricedEntry(Protocol):
    """Anything the editor can add: a catalog item or similar."""

    id: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class PricingResult:
    """Totals for a list of line items. Derived, never stored as-is."""

    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": str(quantize_money(self.subtotal)),
            "discount_percent": str(self.discount_percent),
            "discount_amount": str(quantize_money(self.discount_amount)),
            "total": str(quantize_money(self.total)),
        }


def quantize_money(amount: Decimal) -> Decimal:
    """Round to cents. Only call this at presentation or storage boundaries."""
    return parse_money(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Any) -> str:
    """Format an amount for display, e.g. ``$12.50``."""
    return f"${quantize_money(parse_money(amount))}"


def clamp_discount(discount_percent: Any) -> Decimal:
    """Clamp a discount percentage into [0, 100]; junk counts as 0."""
    return min(max(parse_money(discount_percent), ZERO), HUNDRED)


def compute_totals(items: Iterable[LineItem], discount_percent: Any = 0) -> PricingResult:
    """
    Compute subtotal, discount and total for a list of line items.

    Out-of-range discounts are clamped rather than rejected, so a discount of
    150 prices the order at zero.
    """
    subtotal = sum((item.unit_price * item.quantity for item in items), ZERO)
    discount = clamp_discount(discount_percent)
    discount_amount = subtotal * discount / HUNDRED
    return PricingResult(
        subtotal=subtotal,
        discount_percent=discount,
        discount_amount=discount_amount,
        total=subtotal - discount_amount,
    )


def describe_items(items: Iterable[LineItem]) -> str:
    """Human-readable summary, e.g. ``2x Hay, 1x Milk``."""
    return ", ".join(f"{item.quantity}x {item.name}" for item in items)


def coerce_quantity(value: Any) -> int:
    """Parse a quantity; anything invalid or below 1 becomes 1."""
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        try:
            quantity = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 1
    return max(1, quantity)


def parse_line_items(raw_items: Iterable[LineItem | dict[str, Any]] | None) -> list[LineItem]:
    """
    Build line items from request data.

    Lines sharing a catalog_ref are merged by adding quantities.

    Raises:
        ValidationError: If a line has no name or a negative price.
    """
    merged: list[LineItem] = []
    by_ref: dict[str, LineItem] = {}
    for raw in raw_items or []:
        if isinstance(raw, LineItem):
            item = replace(raw, quantity=coerce_quantity(raw.quantity))
        else:
            item = LineItem(
                catalog_ref=str(raw.get("catalog_ref") or ""),
                name=str(raw.get("name") or ""),
                unit_price=parse_money(raw.get("unit_price")),
                quantity=coerce_quantity(raw.get("quantity", 1)),
            )
        if not item.name.strip():
            raise ValidationError("line item", "name is required")
        if item.unit_price < ZERO:
            raise ValidationError("line item", f"'{item.name}' has a negative price")

        ref = item.catalog_ref or item.name
        item.catalog_ref = ref
        if ref in by_ref:
            by_ref[ref].quantity += item.quantity
            continue
        by_ref[ref] = item
        merged.append(item)
    return merged


def search_catalog(catalog: Iterable[PricedEntry], term: str | None) -> list[PricedEntry]:
    """Case-insensitive substring match on name. An empty term matches everything."""
    entries = list(catalog)
    if not term:
        return entries
    needle = term.lower()
    return [e for e in entries if needle in e.name.lower()]


class LineItemEditor:
    """
    Maintains the line items of one order or quote.

    There is at most one line per catalog entry; names and prices are
    copied when a line is added so later catalog edits don't reprice it.
    """

    def __init__(self, items: Iterable[LineItem] | None = None):
        self._items: list[LineItem] = [replace(i) for i in items or []]

    @property
    def items(self) -> list[LineItem]:
        return [replace(i) for i in self._items]

    def _find(self, catalog_ref: str) -> int | None:
        for idx, item in enumerate(self._items):
            if item.catalog_ref == catalog_ref:
                return idx
        return None

    def add_from_catalog(self, entry: PricedEntry) -> LineItem:
        """Add one unit of a catalog entry, merging with an existing line."""
        idx = self._find(entry.id)
        if idx is not None:
            self._items[idx].quantity += 1
            return replace(self._items[idx])

        item = LineItem(
            catalog_ref=entry.id,
            name=entry.name,
            unit_price=parse_money(entry.price),
            quantity=1,
        )
        self._items.append(item)
        return replace(item)

    def set_quantity(self, catalog_ref: str, value: Any) -> None:
        idx = self._find(catalog_ref)
        if idx is not None:
            self._items[idx].quantity = coerce_quantity(value)

    def adjust_quantity(self, catalog_ref: str, delta: int) -> None:
        idx = self._find(catalog_ref)
        if idx is not None:
            self._items[idx].quantity = max(1, self._items[idx].quantity + delta)

    def remove(self, catalog_ref: str) -> None:
        self._items = [i for i in self._items if i.catalog_ref != catalog_ref]

    def totals(self, discount_percent: Any = 0) -> PricingResult:
        return compute_totals(self._items, discount_percent)

    def describe(self) -> str:
        return describe_items(self._items)

    def __len__(self) -> int:
        return len(self._items)
