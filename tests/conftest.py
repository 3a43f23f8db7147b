import os
import sys

import pytest

# Ensure repository root is on sys.path so 'mes_engine' is importable without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mes_engine.adapters.base import StorageProvider
from mes_engine.config import EngineConfig
from mes_engine.engines.base import VideoEngine
from mes_engine.exceptions import EngineError, StorageError
from mes_engine.models import QualityLevel


class FakeEngine(VideoEngine):
    """Engine double that writes small marker files instead of transcoding"""

    def __init__(self, duration=30.0, fail_chunk=None, fail_screenshot=None, fail_duration=False):
        self.duration = duration
        self.fail_chunk = fail_chunk  # (height, index)
        self.fail_screenshot = fail_screenshot  # index
        self.fail_duration = fail_duration
        self.chunk_calls = []
        self.screenshot_calls = []

    def process_chunk(self, input_path, output_path, start_time, quality, duration=None):
        self.chunk_calls.append((quality.height, start_time, output_path, duration))
        if self.fail_chunk == (quality.height, int(start_time // (duration or 10))):
            raise EngineError("ffmpeg exited with code 1")
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(f"{quality.height}@{start_time}".encode())

    def extract_screenshot(self, input_path, output_path, time):
        self.screenshot_calls.append((output_path, time))
        if self.fail_screenshot is not None and len(self.screenshot_calls) - 1 == self.fail_screenshot:
            raise EngineError("no frame at timestamp")
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(b"mock-screenshot")

    def get_duration(self, input_path):
        if self.fail_duration:
            raise EngineError("ffprobe exited with code 1")
        return self.duration


class MemoryStorage(StorageProvider):
    """Process-local storage double"""

    def __init__(self):
        self.data = {}
        self.get_calls = []

    def save_chunk(self, chunk_path, data):
        self.data[chunk_path] = bytes(data)

    def get_chunk(self, chunk_path):
        self.get_calls.append(chunk_path)
        if chunk_path not in self.data:
            raise StorageError(f"Chunk not found: {chunk_path}")
        return self.data[chunk_path]

    def delete_chunk(self, chunk_path):
        if chunk_path not in self.data:
            raise StorageError(f"Chunk not found: {chunk_path}")
        del self.data[chunk_path]


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def config(tmp_path):
    cfg = EngineConfig()
    cfg.CHUNK_SIZE = 10
    cfg.OUTPUT_DIR = str(tmp_path / "processed")
    cfg.QUALITIES = [QualityLevel(720, "2000k"), QualityLevel(480, "1000k")]
    return cfg


@pytest.fixture
def input_video(tmp_path):
    path = tmp_path / "test-video.mp4"
    path.write_bytes(b"mock-video-data")
    return str(path)
