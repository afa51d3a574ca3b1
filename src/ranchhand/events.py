"""Domain events and a minimal synchronous event bus."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from .auth import Actor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderStatusChanged:
    """An order moved from one status to another."""

    order_id: str
    customer_name: str
    old_status: str
    new_status: str
    price: Decimal
    actor: Actor
    # Unique per edge traversal; handlers dedupe on it
    transition_id: str


Handler = Callable[[Any], None]


class EventBus:
    """Delivers events to subscribers in subscription order, on the caller's thread."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: Any) -> None:
        """
        Call every handler for the event's type.

        Handler errors propagate to the publisher; there is no rollback of
        whatever the publisher already wrote.
        """
        handlers = self._handlers.get(type(event), [])
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
