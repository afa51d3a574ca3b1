"""Document storage for ranchhand."""

from __future__ import annotations

import copy
import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from . import config
from .errors import ConcurrentUpdateError, DocumentNotFoundError, TransientIOError
from .models import _generate_id

SCHEMA_VERSION = 1


class DocumentStore:
    """
    A collection-of-documents store kept as one JSON file per collection.

    Every document carries an ``id`` and a ``version`` that is bumped on each
    write. Writers that pass ``expected_version`` get compare-and-swap
    semantics; everyone else gets last-writer-wins.
    """

    def __init__(self, data_dir: Path | None = None):
        """
        Initialize DocumentStore.

        Args:
            data_dir: Override data directory (for testing).
        """
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _ensure_dir(self) -> None:
        """Ensure data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _lock(self, collection: str) -> Iterator[None]:
        """Acquire exclusive lock on a collection for read-modify-write operations."""
        try:
            self._ensure_dir()
            lock_file = open(self.data_dir / f".{collection}.lock", "w")
        except OSError as e:
            raise TransientIOError("lock", str(e)) from e
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _load(self, collection: str) -> dict[str, Any]:
        """Load a collection from disk."""
        path = self._path(collection)
        if not path.exists():
            return {"schema_version": SCHEMA_VERSION, "documents": {}}

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TransientIOError(f"read of '{collection}'", str(e)) from e

    def _save(self, collection: str, data: dict[str, Any]) -> None:
        """Save a collection to disk atomically."""
        self._ensure_dir()

        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{collection}_", suffix=".tmp"
            )
        except OSError as e:
            raise TransientIOError(f"write of '{collection}'", str(e)) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self._path(collection))
        except (OSError, TypeError) as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise TransientIOError(f"write of '{collection}'", str(e)) from e

    def insert(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> dict[str, Any]:
        """
        Insert a new document and return it as stored.

        An id is generated unless one is given.
        """
        doc = copy.deepcopy(data)
        doc["id"] = doc_id or _generate_id()
        doc["version"] = 1

        with self._lock(collection):
            stored = self._load(collection)
            stored["documents"][doc["id"]] = doc
            self._save(collection, stored)

        return copy.deepcopy(doc)

    def ensure(
        self, collection: str, doc_id: str, defaults: dict[str, Any]
    ) -> dict[str, Any]:
        """Return a document, creating it from defaults if it doesn't exist yet."""
        with self._lock(collection):
            stored = self._load(collection)
            doc = stored["documents"].get(doc_id)
            if doc is None:
                doc = copy.deepcopy(defaults)
                doc["id"] = doc_id
                doc["version"] = 1
                stored["documents"][doc_id] = doc
                self._save(collection, stored)
            return copy.deepcopy(doc)

    def find(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Get a document by ID, or None if it doesn't exist."""
        doc = self._load(collection)["documents"].get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def get(self, collection: str, doc_id: str) -> dict[str, Any]:
        """
        Get a document by ID.

        Raises:
            DocumentNotFoundError: If the document doesn't exist.
        """
        doc = self.find(collection, doc_id)
        if doc is None:
            raise DocumentNotFoundError(collection, doc_id)
        return doc

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """
        Merge fields into an existing document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            fields: Top-level fields to overwrite.
            expected_version: If given, the write only happens when the stored
                version still matches.

        Returns:
            The updated document.

        Raises:
            DocumentNotFoundError: If the document doesn't exist.
            ConcurrentUpdateError: If expected_version doesn't match.
        """
        with self._lock(collection):
            stored = self._load(collection)
            doc = stored["documents"].get(doc_id)
            if doc is None:
                raise DocumentNotFoundError(collection, doc_id)

            if expected_version is not None and doc.get("version") != expected_version:
                raise ConcurrentUpdateError(collection, doc_id)

            changes = copy.deepcopy(fields)
            changes.pop("id", None)
            changes.pop("version", None)
            doc.update(changes)
            doc["version"] = doc.get("version", 0) + 1
            self._save(collection, stored)
            return copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: str) -> dict[str, Any]:
        """
        Delete a document and return it.

        Raises:
            DocumentNotFoundError: If the document doesn't exist.
        """
        with self._lock(collection):
            stored = self._load(collection)
            doc = stored["documents"].pop(doc_id, None)
            if doc is None:
                raise DocumentNotFoundError(collection, doc_id)
            self._save(collection, stored)
            return doc

    def list(
        self,
        collection: str,
        where: tuple[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List documents in a collection.

        Args:
            collection: Collection name.
            where: Optional (field, value) equality predicate.
            order_by: Optional single sort key.
            descending: Sort direction for order_by.
            limit: Maximum number of documents to return.
        """
        docs = list(self._load(collection)["documents"].values())

        if where is not None:
            key, value = where
            docs = [d for d in docs if d.get(key) == value]

        if order_by:
            # Documents missing the key sort first (ascending)
            docs.sort(
                key=lambda d: (
                    d.get(order_by) is not None,
                    d.get(order_by) if d.get(order_by) is not None else 0,
                ),
                reverse=descending,
            )

        if limit:
            docs = docs[:limit]

        return copy.deepcopy(docs)
