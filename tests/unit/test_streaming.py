import pytest
from unittest.mock import Mock

import requests

from mes_engine.cache import CacheOptions, ExternalCache, InternalCache
from mes_engine.exceptions import ChunkNotFoundError, InvalidRangeError
from mes_engine.streaming import ByteRange, StreamManager

from tests.conftest import MemoryStorage

PAYLOAD = bytes(range(256)) * 4


@pytest.fixture
def storage():
    s = MemoryStorage()
    s.save_chunk("v/720p/chunk_0.mp4", PAYLOAD)
    s.save_chunk("v/720p/chunk_1.mp4", b"next")
    return s


def test_full_stream(storage):
    stream = StreamManager(storage).create_stream("v/720p/chunk_0.mp4")
    assert stream.read() == PAYLOAD
    assert stream.total_size == len(PAYLOAD)


@pytest.mark.parametrize("start,end", [(0, 0), (10, 99), (100, 1023), (512, 700)])
def test_range_returns_exact_slice(storage, start, end):
    stream = StreamManager(storage).create_stream("v/720p/chunk_0.mp4", ByteRange(start, end))
    data = stream.read()
    assert len(data) == end - start + 1
    assert data == PAYLOAD[start:end + 1]
    assert stream.content_length == end - start + 1


def test_open_ended_and_overlong_ranges_clamp(storage):
    manager = StreamManager(storage)
    assert manager.create_stream("v/720p/chunk_0.mp4", ByteRange(1000)).read() == PAYLOAD[1000:]
    stream = manager.create_stream("v/720p/chunk_0.mp4", ByteRange(1000, 5000))
    assert stream.end == len(PAYLOAD) - 1
    assert stream.read() == PAYLOAD[1000:]


def test_range_start_beyond_data(storage):
    with pytest.raises(InvalidRangeError):
        StreamManager(storage).create_stream("v/720p/chunk_0.mp4", ByteRange(len(PAYLOAD)))


def test_invalid_range_construction():
    with pytest.raises(InvalidRangeError):
        ByteRange(-1, 5)
    with pytest.raises(InvalidRangeError):
        ByteRange(5, 4)


def test_stream_is_single_shot(storage):
    stream = StreamManager(storage, block_size=100).create_stream("v/720p/chunk_0.mp4")
    blocks = list(stream)
    assert b"".join(blocks) == PAYLOAD
    assert all(len(b) <= 100 for b in blocks)
    assert stream.exhausted
    assert list(stream) == []
    assert stream.read() == b""


def test_missing_chunk_without_cache(storage):
    with pytest.raises(ChunkNotFoundError):
        StreamManager(storage).create_stream("v/720p/chunk_9.mp4")


def test_missing_chunk_with_cache(storage):
    cache = InternalCache(CacheOptions(), storage)
    with pytest.raises(ChunkNotFoundError):
        StreamManager(storage, cache).create_stream("v/720p/chunk_9.mp4")


def test_cache_is_consulted_and_next_chunk_preloaded(storage):
    cache = InternalCache(CacheOptions(max_size=10), storage)
    manager = StreamManager(storage, cache)

    assert manager.create_stream("v/720p/chunk_0.mp4").read() == PAYLOAD
    assert "v/720p/chunk_1.mp4" in cache.cache

    storage.get_calls.clear()
    assert manager.create_stream("v/720p/chunk_1.mp4").read() == b"next"
    assert storage.get_calls == ["v/720p/chunk_2.mp4"]  # preload attempt only


def test_stream_triggers_preload_of_current_key(storage):
    cache = Mock()
    cache.get.return_value = b"abc"
    cache.preload.return_value = None
    stream = StreamManager(storage, cache).create_stream("x/chunk_0.mp4")
    assert stream.read() == b"abc"
    cache.preload.assert_called_once_with("x/chunk_0.mp4")


def test_external_cache_miss_falls_back_to_storage(storage):
    session = Mock(spec=requests.Session)
    session.get.return_value = Mock(ok=False, status_code=404)
    options = CacheOptions(external_cache_url="http://cache.local", preload_next_chunk=False)
    manager = StreamManager(storage, ExternalCache(options, session=session))

    assert manager.create_stream("v/720p/chunk_0.mp4").read() == PAYLOAD

    assert storage.get_calls == ["v/720p/chunk_0.mp4"]
    session.post.assert_called_once()
    assert session.post.call_args[0][0] == "http://cache.local/cache/v%2F720p%2Fchunk_0.mp4"


def test_external_cache_refill_failure_is_ignored(storage):
    session = Mock(spec=requests.Session)
    session.get.return_value = Mock(ok=False, status_code=404)
    session.post.side_effect = requests.ConnectionError("cache down")
    options = CacheOptions(external_cache_url="http://cache.local", preload_next_chunk=False)
    manager = StreamManager(storage, ExternalCache(options, session=session))

    assert manager.create_stream("v/720p/chunk_1.mp4").read() == b"next"


def test_external_cache_and_storage_miss(storage):
    session = Mock(spec=requests.Session)
    session.get.return_value = Mock(ok=False, status_code=404)
    options = CacheOptions(external_cache_url="http://cache.local", preload_next_chunk=False)

    with pytest.raises(ChunkNotFoundError):
        StreamManager(storage, ExternalCache(options, session=session)).create_stream("v/720p/chunk_9.mp4")
