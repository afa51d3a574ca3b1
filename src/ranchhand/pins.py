"""Points of interest on the ranch map."""

from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .errors import DocumentNotFoundError, InvalidCoordinateError, PinNotFoundError, ValidationError
from .models import PIN_CATEGORIES, MapPin, _utc_now
from .store import DocumentStore
from .viewport import ImagePercent

COLLECTION = "map_pins"


def normalize_category(category: str | None) -> str:
    """Unknown categories fall back to "other"."""
    return category if category in PIN_CATEGORIES else "other"


class PinService:
    def __init__(self, store: DocumentStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def place_pin(
        self,
        x_pct: float,
        y_pct: float,
        title: str,
        description: str,
        category: str | None,
        actor: Actor,
    ) -> MapPin:
        """
        Persist a new pin at an image-percentage position.

        Raises:
            ValidationError: If the title is blank or the position is off the image.
        """
        require(actor, Capability.EDIT_RECORDS)

        title = (title or "").strip()
        if not title:
            raise ValidationError("title", "is required")
        if not (0 <= x_pct <= 100 and 0 <= y_pct <= 100):
            raise InvalidCoordinateError(x_pct, y_pct)

        doc = self.store.insert(
            COLLECTION,
            {
                "x_pct": float(x_pct),
                "y_pct": float(y_pct),
                "title": title,
                "description": (description or "").strip(),
                "category": normalize_category(category),
                "created_by": actor.id,
                "created_by_name": actor.name,
                "created_at": _utc_now(),
            },
        )
        pin = MapPin.from_dict(doc)
        self.feed.record(actor, f"Placed map pin: {title}", "map_pin", pin.id)
        return pin

    def place_at(
        self, point: ImagePercent, title: str, description: str, category: str | None, actor: Actor
    ) -> MapPin:
        """Place a pin at the point a viewport gesture produced."""
        return self.place_pin(point.x_pct, point.y_pct, title, description, category, actor)

    def list_pins(self, category: str | None = None) -> list[MapPin]:
        where = ("category", category) if category and category != "all" else None
        docs = self.store.list(COLLECTION, where=where, order_by="created_at")
        return [MapPin.from_dict(d) for d in docs]

    def get_pin(self, pin_id: str) -> MapPin:
        try:
            return MapPin.from_dict(self.store.get(COLLECTION, pin_id))
        except DocumentNotFoundError:
            raise PinNotFoundError(pin_id) from None

    def delete_pin(self, pin_id: str, actor: Actor) -> MapPin:
        """
        Delete a pin. Only its creator or an admin may do so.

        Raises:
            PinNotFoundError: If the pin doesn't exist.
            PermissionDeniedError: If the actor may not delete it.
        """
        pin = self.get_pin(pin_id)
        require_owner_or(actor, pin.created_by, Capability.MANAGE_ALL)
        self.store.delete(COLLECTION, pin_id)
        self.feed.record(actor, f"Deleted map pin: {pin.title}", "map_pin", pin_id)
        return pin
