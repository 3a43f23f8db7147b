"""
Remote cache adapter.

Delegates storage, eviction and TTL to an HTTP cache service:

    POST   {url}/cache/{key}     body = bytes, header TTL = seconds
    GET    {url}/cache/{key}     200 + bytes, or any other status when absent
    GET    {url}/preload/{key}   ask the service to warm `key`
    DELETE {url}/cache           drop everything
"""

import logging
import requests
from threading import Thread
from typing import Optional, Dict, Any
from urllib.parse import quote

from .base import CacheStrategy, CacheOptions
from ..pipeline.util import next_chunk_key

logger = logging.getLogger("mes_engine")


class ExternalCache(CacheStrategy):
    """HTTP-backed cache"""

    def __init__(self, options: CacheOptions, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        if not options.external_cache_url:
            raise ValueError("external_cache_url is required for ExternalCache")
        self.options = options
        self.base_url = options.external_cache_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, route: str, key: str) -> str:
        return f"{self.base_url}/{route}/{quote(key, safe='')}"

    def set(self, key: str, value: bytes) -> None:
        response = self.session.post(
            self._url("cache", key),
            data=value,
            headers={
                'Content-Type': 'application/octet-stream',
                'TTL': str(self.options.ttl)
            },
            timeout=self.timeout
        )
        response.raise_for_status()

    def get(self, key: str) -> Optional[bytes]:
        try:
            response = self.session.get(self._url("cache", key), timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"External cache get for {key} failed: {e}")
            return None
        return response.content if response.ok else None

    def preload(self, key: str) -> None:
        if not self.options.preload_next_chunk:
            return

        next_key = next_chunk_key(key)
        if next_key is None:
            return

        thread = Thread(target=self._send_preload, args=(next_key,), daemon=True)
        thread.start()

    def _send_preload(self, key: str) -> None:
        try:
            self.session.get(self._url("preload", key), timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"External cache preload for {key} failed: {e}")

    def clear(self) -> None:
        response = self.session.delete(f"{self.base_url}/cache", timeout=self.timeout)
        response.raise_for_status()
        logger.info("External cache cleared")

    def stats(self) -> Dict[str, Any]:
        return {'type': 'external', 'url': self.base_url, 'ttl': self.options.ttl}
