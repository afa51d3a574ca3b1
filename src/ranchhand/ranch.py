"""Wires the services together over one document store."""

from pathlib import Path

from .activity import ActivityFeed
from .blobs import BlobStore
from .catalog import CatalogService
from .errors import ValidationError
from .events import EventBus, OrderStatusChanged
from .ledger import DeliveryDepositHandler, RanchFund
from .logs import LogService
from .orders import OrderService
from .pins import PinService
from .posters import PosterService
from .quotes import QuoteService
from .recipes import RecipeBookService
from .store import DocumentStore
from .todos import TodoService


class Ranch:
    """All ranch services sharing a store, feed and event bus."""

    def __init__(self, data_dir: Path | None = None, store: DocumentStore | None = None):
        self.store = store or DocumentStore(data_dir)
        self.blobs = BlobStore(self.store.data_dir / "blobs")
        self.bus = EventBus()
        self.activity = ActivityFeed(self.store)
        self.fund = RanchFund(self.store, self.activity)
        self.orders = OrderService(self.store, self.activity, self.bus)
        self.quotes = QuoteService(self.store, self.activity, self.orders)
        self.pins = PinService(self.store, self.activity)
        self.catalog = CatalogService(self.store, self.activity)
        self.todos = TodoService(self.store, self.activity)
        self.logs = LogService(self.store, self.activity)
        self.recipes = RecipeBookService(self.store, self.activity, "recipes")
        self.crafting = RecipeBookService(self.store, self.activity, "crafting")
        self.posters = PosterService(self.store, self.blobs, self.activity)

        self.bus.subscribe(OrderStatusChanged, DeliveryDepositHandler(self.fund))

    def recipe_book(self, book: str) -> RecipeBookService:
        """The service for a named recipe book ("recipes" or "crafting")."""
        if book == "crafting":
            return self.crafting
        if book == "recipes":
            return self.recipes
        raise ValidationError("book", f"'{book}' (expected one of: recipes, crafting)")
