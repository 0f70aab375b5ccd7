"""
File Storage Seam

Uploads happen upstream and hand us a (url, storage_key) pair. We only ask the
storage backend to delete files by key once the owning record is gone.
"""
import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from teachhub.config import STORAGE_ROOT

logger = logging.getLogger(__name__)


class StorageBackend:
    """Interface for the file storage collaborator"""

    async def delete(self, storage_key: str) -> None:
        raise NotImplementedError


class LocalStorageBackend(StorageBackend):
    """Stores files below a root directory; the storage key is the relative path"""

    def __init__(self, root: str = STORAGE_ROOT):
        self.root = Path(root).resolve()

    def _path_for(self, storage_key: str) -> Path:
        path = (self.root / storage_key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Storage key escapes storage root: {storage_key}")
        return path

    async def delete(self, storage_key: str) -> None:
        path = self._path_for(storage_key)
        await asyncio.to_thread(path.unlink, missing_ok=True)


async def purge_files(storage_keys: Iterable[Optional[str]], backend: Optional[StorageBackend] = None) -> List[str]:
    """
    Delete stored files, best-effort.

    Runs after the database change has been committed, so a storage failure
    only leaves an unreferenced file behind.

    Returns:
        Storage keys that could not be deleted
    """
    backend = backend or get_storage()
    failed = []

    for key in storage_keys:
        if not key:
            continue
        try:
            await backend.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete stored file {key}: {e}", exc_info=True)
            failed.append(key)

    return failed


# Global storage backend
_storage: Optional[StorageBackend] = None


def get_storage() -> StorageBackend:
    """Get or create global storage backend."""
    global _storage
    if _storage is None:
        _storage = LocalStorageBackend()
    return _storage


def set_storage(backend: Optional[StorageBackend]) -> None:
    """Replace the global storage backend (None restores the default)."""
    global _storage
    _storage = backend
