"""
Abstract base class for storage adapters.

Defines the interface that all storage backends must implement, enabling
easy swapping between different backends (local filesystem, S3, etc.).
"""

from abc import ABC, abstractmethod


class StorageProvider(ABC):
    """Abstract base class for chunk storage backends"""

    def connect(self) -> None:
        """Open connections to the backend. No-op by default."""
        pass

    def close(self) -> None:
        """Release backend resources. No-op by default."""
        pass

    @abstractmethod
    def save_chunk(self, chunk_path: str, data: bytes) -> None:
        """
        Save bytes under a path-like key.

        Args:
            chunk_path: Storage key
            data: Content to store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_chunk(self, chunk_path: str) -> bytes:
        """
        Retrieve bytes stored under a key.

        Args:
            chunk_path: Storage key

        Returns:
            Stored content

        Raises:
            StorageError: If the key is absent or unreadable
        """
        pass

    @abstractmethod
    def delete_chunk(self, chunk_path: str) -> None:
        """
        Delete the content stored under a key.

        Raises:
            StorageError: If the key is absent or cannot be deleted
        """
        pass

    def exists(self, chunk_path: str) -> bool:
        """Check whether a key is present"""
        try:
            self.get_chunk(chunk_path)
            return True
        except Exception:
            return False
