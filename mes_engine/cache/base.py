"""
Abstract base class for chunk caches.

A cache sits in front of a storage provider on the read path. Every
implementation must treat internal fetch failures as cache misses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class CacheOptions:
    """Cache tuning knobs"""
    max_size: int = 100  # entries, not bytes
    ttl: int = 3600  # seconds, honoured by external caches only
    preload_next_chunk: bool = True
    external_cache_url: Optional[str] = None


class CacheStrategy(ABC):
    """Abstract base class for caches"""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return cached bytes, or None when absent or unfetchable"""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Insert or overwrite an entry"""
        pass

    @abstractmethod
    def preload(self, key: str) -> None:
        """Best-effort warm-up of the chunk following `key`. Never raises."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry"""
        pass
