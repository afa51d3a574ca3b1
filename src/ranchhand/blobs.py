"""Blob storage for uploaded files, kept in a local directory."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath

from .errors import BlobNotFoundError, TransientIOError, ValidationError

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Files addressed by slash-separated keys such as ``posters/abc-map.png``.

    Keys map to paths under the root directory; a key that would escape
    the root is rejected.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or any(p in ("", ".", "..") for p in parts) or key.startswith("/"):
            raise ValidationError("key", f"'{key}' is not a valid storage key")
        return self.root.joinpath(*parts)

    def put(self, key: str, data: bytes) -> int:
        """Write a blob atomically and return its size in bytes."""
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".upload_", suffix=".tmp")
        except OSError as e:
            raise TransientIOError(f"upload of '{key}'", str(e)) from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise TransientIOError(f"upload of '{key}'", str(e)) from e
        return len(data)

    def get(self, key: str) -> bytes:
        """
        Read a blob.

        Raises:
            BlobNotFoundError: If nothing is stored under the key.
        """
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(key) from None
        except OSError as e:
            raise TransientIOError(f"download of '{key}'", str(e)) from e

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> bool:
        """Remove a blob. Returns False if it was already gone."""
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Blob %s already gone", key)
            return False
        except OSError as e:
            raise TransientIOError(f"delete of '{key}'", str(e)) from e
        return True
