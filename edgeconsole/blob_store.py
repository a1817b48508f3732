"""Blob storage for snapshot payloads.

Objects are opaque byte strings addressed by slash-separated keys. The
filesystem store keeps each object as a file below a root directory.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Optional

logger = logging.getLogger(__name__)


class BlobKeyError(ValueError):
    """Raised for keys that would escape the store root."""


class FilesystemBlobStore:
    """Key/value blob store backed by a directory tree."""

    def __init__(self, root: str):
        self._root = Path(root)

    def _path_for(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not key or key.startswith('/') or '..' in parts:
            raise BlobKeyError(f'Invalid blob key: {key!r}')
        return self._root.joinpath(*parts)

    def put(self, key: str, data: bytes) -> int:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug('Stored blob %s (%d bytes)', key, len(data))
        return len(data)

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if not path.is_file():
            return False
        path.unlink()
        return True
