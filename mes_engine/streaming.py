"""
Chunk streaming with byte-range support.

Bytes are resolved through the cache when one is configured, otherwise
straight from storage.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from .adapters.base import StorageProvider
from .cache.base import CacheStrategy
from .exceptions import ChunkNotFoundError, InvalidRangeError

logger = logging.getLogger("mes_engine")

DEFAULT_BLOCK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range. end=None reads to the last byte."""
    start: int
    end: Optional[int] = None

    def __post_init__(self):
        if self.start < 0:
            raise InvalidRangeError(f"Range start must be non-negative, got {self.start}")
        if self.end is not None and self.end < self.start:
            raise InvalidRangeError(f"Range end {self.end} precedes start {self.start}")


class ChunkStream:
    """Single-shot iterator over a chunk's bytes (or a slice of them)"""

    def __init__(self, data: bytes, start: int, end: int, block_size: int = DEFAULT_BLOCK_SIZE):
        self.total_size = len(data)
        self.start = start
        self.end = end
        self.block_size = block_size
        self._view = memoryview(data)[start:end + 1]
        self._position = 0

    @property
    def content_length(self) -> int:
        return len(self._view)

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._view)

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self.exhausted:
            raise StopIteration
        block = self._view[self._position:self._position + self.block_size]
        self._position += len(block)
        return block.tobytes()

    def read(self) -> bytes:
        """Consume and return everything not yet read"""
        remaining = self._view[self._position:].tobytes()
        self._position = len(self._view)
        return remaining


class StreamManager:
    """Builds chunk streams on top of the cache/storage chain"""

    def __init__(self, storage: StorageProvider, cache: Optional[CacheStrategy] = None,
                 block_size: int = DEFAULT_BLOCK_SIZE):
        self.storage = storage
        self.cache = cache
        self.block_size = block_size

    def _fetch(self, chunk_path: str) -> bytes:
        if self.cache is not None:
            data = self.cache.get(chunk_path)
            if data is not None:
                return data

        try:
            data = self.storage.get_chunk(chunk_path)
        except Exception as e:
            logger.debug(f"Storage fetch for {chunk_path} failed: {e}")
            raise ChunkNotFoundError(chunk_path)

        if self.cache is not None:
            try:
                self.cache.set(chunk_path, data)
            except Exception as e:
                logger.debug(f"Cache refill for {chunk_path} failed: {e}")
        return data

    def create_stream(self, chunk_path: str, byte_range: Optional[ByteRange] = None) -> ChunkStream:
        """
        Open a stream over a stored chunk.

        Args:
            chunk_path: Storage key of the chunk
            byte_range: Optional inclusive range; an end past the data is clamped

        Returns:
            ChunkStream over the full chunk or the requested slice

        Raises:
            ChunkNotFoundError: If neither cache nor storage has the chunk
            InvalidRangeError: If the range starts beyond the data
        """
        data = self._fetch(chunk_path)

        start, end = 0, len(data) - 1
        if byte_range is not None:
            if byte_range.start >= len(data):
                raise InvalidRangeError(
                    f"Range start {byte_range.start} beyond {len(data)} bytes of {chunk_path}"
                )
            start = byte_range.start
            if byte_range.end is not None:
                end = min(byte_range.end, len(data) - 1)

        if self.cache is not None:
            self.cache.preload(chunk_path)

        return ChunkStream(data, start, end, self.block_size)
