"""Poster gallery: uploaded images with a title."""

from __future__ import annotations

import logging
import mimetypes
import uuid
from pathlib import PurePosixPath

from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .blobs import BlobStore
from .errors import DocumentNotFoundError, PosterNotFoundError, ValidationError
from .models import Poster, _utc_now
from .store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "posters"
STORAGE_PREFIX = "posters"


def safe_filename(filename: str) -> str:
    """Last path component of an uploaded name, with spaces made safe."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        raise ValidationError("filename", "is required")
    return name.replace(" ", "_")


class PosterService:
    def __init__(self, store: DocumentStore, blobs: BlobStore, feed: ActivityFeed):
        self.store = store
        self.blobs = blobs
        self.feed = feed

    def list(self) -> list[Poster]:
        docs = self.store.list(COLLECTION, order_by="created_at", descending=True)
        return [Poster.from_dict(d) for d in docs]

    def get(self, poster_id: str) -> Poster:
        try:
            return Poster.from_dict(self.store.get(COLLECTION, poster_id))
        except DocumentNotFoundError:
            raise PosterNotFoundError(poster_id) from None

    def read_image(self, poster_id: str) -> tuple[Poster, bytes]:
        poster = self.get(poster_id)
        return poster, self.blobs.get(poster.storage_path)

    def upload(
        self,
        title: str,
        filename: str,
        data: bytes,
        actor: Actor,
        content_type: str | None = None,
    ) -> Poster:
        """
        Store an image and record it in the gallery.

        The blob is written first; if recording the poster fails the blob is
        removed again.

        Raises:
            ValidationError: If the title, filename or content is missing.
        """
        require(actor, Capability.EDIT_RECORDS)
        title = (title or "").strip()
        if not title:
            raise ValidationError("title", "is required")
        if not data:
            raise ValidationError("file", "is empty")

        name = safe_filename(filename)
        storage_path = f"{STORAGE_PREFIX}/{uuid.uuid4()}-{name}"
        content_type = (
            content_type or mimetypes.guess_type(name)[0] or "application/octet-stream"
        )

        size = self.blobs.put(storage_path, data)
        poster = Poster(
            id="",
            title=title,
            filename=name,
            content_type=content_type,
            storage_path=storage_path,
            size=size,
            uploaded_by=actor.id,
            uploaded_by_name=actor.name,
            created_at=_utc_now(),
        )
        fields = poster.to_dict()
        fields.pop("id")
        try:
            created = Poster.from_dict(self.store.insert(COLLECTION, fields))
        except Exception:
            self.blobs.delete(storage_path)
            raise

        logger.info("Stored poster %s (%d bytes) at %s", created.id, size, storage_path)
        self.feed.record(actor, f"Uploaded poster: {title}", "poster", created.id)
        return created

    def delete(self, poster_id: str, actor: Actor) -> Poster:
        """Delete a poster; a missing image file doesn't stop the record going."""
        poster = self.get(poster_id)
        require_owner_or(actor, poster.uploaded_by, Capability.MANAGE_ALL)
        if not self.blobs.delete(poster.storage_path):
            logger.warning("Image for poster %s was already missing", poster_id)
        self.store.delete(COLLECTION, poster_id)
        self.feed.record(actor, f"Deleted poster: {poster.title}", "poster", poster_id)
        return poster
