"""Global activity feed for ranchhand."""

import logging

from . import config
from .auth import Actor
from .models import ActivityEntry, _utc_now
from .store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "activity"


class ActivityFeed:
    """Append-only feed of who did what."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def record(
        self,
        actor: Actor,
        action: str,
        entity_type: str,
        entity_id: str | None = None,
    ) -> ActivityEntry | None:
        """
        Append one row to the feed.

        Best effort: a failure to log never fails the operation being logged,
        so errors are logged and None is returned.
        """
        try:
            doc = self.store.insert(
                COLLECTION,
                {
                    "actor_id": actor.id,
                    "actor_name": actor.name,
                    "action": action,
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "at": _utc_now(),
                },
            )
        except Exception:
            logger.warning(
                "Failed to record activity %r for %s %s",
                action, entity_type, entity_id, exc_info=True,
            )
            return None
        return ActivityEntry.from_dict(doc)

    def recent(self, limit: int = config.ACTIVITY_FEED_DEFAULT_LIMIT) -> list[ActivityEntry]:
        """Return the newest entries first."""
        docs = self.store.list(COLLECTION, order_by="at", descending=True, limit=limit)
        return [ActivityEntry.from_dict(d) for d in docs]
