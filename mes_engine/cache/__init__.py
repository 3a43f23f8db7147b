"""
Chunk caches for the streaming read path.
"""

from .base import CacheStrategy, CacheOptions
from .lru import LRUCache
from .internal import InternalCache
from .external import ExternalCache
from ..adapters.base import StorageProvider


def create_cache(options: CacheOptions, storage: StorageProvider) -> CacheStrategy:
    """Pick the remote cache when a service URL is configured, else the local one"""
    if options.external_cache_url:
        return ExternalCache(options)
    return InternalCache(options, storage)


__all__ = [
    'CacheStrategy',
    'CacheOptions',
    'LRUCache',
    'InternalCache',
    'ExternalCache',
    'create_cache'
]
