"""Custom exceptions for ranchhand."""


class RanchError(Exception):
    """Base exception for all ranchhand errors."""

    pass


# --- Not found ---


class NotFoundError(RanchError):
    """Raised when a referenced entity is absent at read time."""

    entity = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id doesn't exist in a collection."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.entity = f"Document in '{collection}'"
        super().__init__(doc_id)


class OrderNotFoundError(NotFoundError):
    entity = "Order"


class QuoteNotFoundError(NotFoundError):
    entity = "Quote"


class PinNotFoundError(NotFoundError):
    entity = "Map pin"


class CatalogItemNotFoundError(NotFoundError):
    entity = "Catalog item"


class TodoNotFoundError(NotFoundError):
    entity = "Todo"


class LogNotFoundError(NotFoundError):
    entity = "Log entry"


class RecipeNotFoundError(NotFoundError):
    entity = "Recipe"


class PosterNotFoundError(NotFoundError):
    entity = "Poster"


class BlobNotFoundError(NotFoundError):
    entity = "Stored file"


# --- Validation ---


class ValidationError(RanchError):
    """Raised when a field is malformed or missing, before any write."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidStatusError(ValidationError):
    """Raised when a status value is not one of the allowed values."""

    def __init__(self, status: str, allowed: list[str]):
        self.status = status
        self.allowed = allowed
        super().__init__("status", f"'{status}' (expected one of: {', '.join(allowed)})")


class InvalidAmountError(ValidationError):
    """Raised when a ledger amount is not acceptable for the operation."""

    def __init__(self, amount: object, reason: str):
        self.amount = amount
        super().__init__("amount", f"{amount} ({reason})")


class ChecklistIndexError(ValidationError):
    """Raised when a checklist index is outside the order's item range."""

    def __init__(self, index: int, item_count: int):
        self.index = index
        self.item_count = item_count
        super().__init__(
            "checklist index", f"{index} is outside 0..{max(item_count - 1, 0)}"
        )


class InvalidCoordinateError(ValidationError):
    """Raised when a pin coordinate falls outside the image."""

    def __init__(self, x_pct: float, y_pct: float):
        self.x_pct = x_pct
        self.y_pct = y_pct
        super().__init__("coordinate", f"({x_pct}, {y_pct}) is outside [0, 100]")


# --- State ---


class QuoteAlreadyConvertedError(RanchError):
    """Raised when converting a quote that already links to an order."""

    def __init__(self, quote_id: str, order_id: str):
        self.quote_id = quote_id
        self.order_id = order_id
        super().__init__(f"Quote {quote_id} was already converted to order {order_id}")


class PermissionDeniedError(RanchError):
    """Raised when the acting user lacks a required capability."""

    def __init__(self, actor_name: str, capability: str):
        self.actor_name = actor_name
        self.capability = capability
        super().__init__(f"{actor_name} is not allowed to {capability}")


# --- Gateway ---


class TransientIOError(RanchError):
    """Raised when the document store can't be read or written."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage {operation} failed: {reason}")


class ConcurrentUpdateError(RanchError):
    """Raised when a versioned write keeps losing to concurrent writers."""

    def __init__(self, collection: str, doc_id: str, attempts: int | None = None):
        self.collection = collection
        self.doc_id = doc_id
        self.attempts = attempts
        msg = f"Concurrent update on {collection}/{doc_id}"
        if attempts:
            msg = f"{msg} (gave up after {attempts} attempts)"
        super().__init__(msg)
