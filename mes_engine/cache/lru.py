from collections import OrderedDict
from threading import Lock
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class LRUCache(Generic[T]):
    """Entry-count bounded least-recently-used map"""

    def __init__(self, max_size: int):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._data: "OrderedDict[str, T]" = OrderedDict()
        self._lock = Lock()

    def set(self, key: str, value: T) -> Optional[str]:
        """
        Insert or overwrite `key` as most recently used.

        Returns the evicted key, if inserting a new key pushed the cache
        over capacity. At most one entry is evicted per call.
        """
        evicted = None
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            elif len(self._data) >= self.max_size:
                evicted, _ = self._data.popitem(last=False)
            self._data[key] = value
        return evicted

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def peek(self, key: str) -> Optional[T]:
        """Read without refreshing recency"""
        with self._lock:
            return self._data.get(key)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def keys(self):
        """Keys from least to most recently used"""
        with self._lock:
            return list(self._data.keys())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
