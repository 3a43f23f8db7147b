"""
In-process LRU cache in front of a storage provider.
"""

import logging
from typing import Optional, Dict, Any

from .base import CacheStrategy, CacheOptions
from .lru import LRUCache
from ..adapters.base import StorageProvider
from ..pipeline.util import next_chunk_key

logger = logging.getLogger("mes_engine")


class InternalCache(CacheStrategy):
    """Local memory cache with storage fall-through and next-chunk preloading"""

    def __init__(self, options: CacheOptions, storage: StorageProvider):
        self.options = options
        self.storage = storage
        self.cache: LRUCache[bytes] = LRUCache(options.max_size)
        self.hits = 0
        self.misses = 0

    def set(self, key: str, value: bytes) -> None:
        evicted = self.cache.set(key, bytes(value))
        if evicted:
            logger.debug(f"Cache evicted {evicted}")

    def get(self, key: str) -> Optional[bytes]:
        cached = self.cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        try:
            data = self.storage.get_chunk(key)
        except Exception as e:
            logger.debug(f"Cache fetch for {key} failed: {e}")
            return None

        self.set(key, data)
        return data

    def preload(self, key: str) -> None:
        if not self.options.preload_next_chunk:
            return

        next_key = next_chunk_key(key)
        if next_key is None or next_key in self.cache:
            return

        try:
            data = self.storage.get_chunk(next_key)
            self.set(next_key, data)
            logger.debug(f"Preloaded {next_key}")
        except Exception as e:
            # Preloading is an optimisation only
            logger.debug(f"Preload of {next_key} skipped: {e}")

    def clear(self) -> None:
        self.cache.clear()
        logger.info("Internal cache cleared")

    def stats(self) -> Dict[str, Any]:
        return {
            'type': 'internal',
            'size': len(self.cache),
            'max_size': self.cache.max_size,
            'hits': self.hits,
            'misses': self.misses
        }
