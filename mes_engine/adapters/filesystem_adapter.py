"""
Local filesystem storage adapter.

Keys are filesystem paths; relative keys resolve against an optional root.
"""

import os
import logging
import tempfile
from typing import Optional

from .base import StorageProvider
from ..exceptions import StorageError

logger = logging.getLogger("mes_engine")


class FileSystemStorage(StorageProvider):
    """Filesystem implementation of storage provider"""

    def __init__(self, root: Optional[str] = None):
        self.root = root

    def _resolve(self, chunk_path: str) -> str:
        if self.root and not os.path.isabs(chunk_path):
            return os.path.join(self.root, chunk_path)
        return chunk_path

    def save_chunk(self, chunk_path: str, data: bytes) -> None:
        """Write atomically via a temp file in the target directory"""
        path = self._resolve(chunk_path)
        directory = os.path.dirname(path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp_")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
            logger.debug(f"Saved {len(data)} bytes to {path}")
        except OSError as e:
            logger.error(f"Error saving {path}: {e}")
            raise StorageError(f"Failed to save {path}: {e}")

    def get_chunk(self, chunk_path: str) -> bytes:
        path = self._resolve(chunk_path)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def delete_chunk(self, chunk_path: str) -> None:
        path = self._resolve(chunk_path)
        try:
            os.remove(path)
            logger.debug(f"Deleted {path}")
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")

    def exists(self, chunk_path: str) -> bool:
        return os.path.isfile(self._resolve(chunk_path))
