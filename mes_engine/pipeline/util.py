import os
import re
from typing import Optional

from ..exceptions import SourceNotFoundError

SCREENSHOTS_DIR = "screenshots"
PLAYLIST_NAME = "playlist.m3u8"
MASTER_PLAYLIST_NAME = "master.m3u8"
MANIFEST_NAME = "manifest.json"

# Trailing chunk number, optionally followed by a file extension
_CHUNK_NUMBER_RE = re.compile(r'_(\d+)(\.[^./\\]*)?$')


def generate_video_id(input_path: str) -> str:
    """
    Derive a video id from the file's base name and modification time.

    Two files with the same base name and mtime map to the same id.
    """
    try:
        stats = os.stat(input_path)
    except OSError:
        raise SourceNotFoundError(input_path)

    stem = os.path.basename(input_path).split('.')[0]
    mtime_ms = stats.st_mtime_ns // 1_000_000
    return f"{stem}_{mtime_ms}"


def get_video_dir(output_dir: str, video_id: str) -> str:
    """Get output directory for a video"""
    return os.path.join(output_dir, str(video_id))


def get_quality_dir(output_dir: str, video_id: str, height: int) -> str:
    return os.path.join(get_video_dir(output_dir, video_id), f"{height}p")


def chunk_filename(index: int) -> str:
    return f"chunk_{index}.mp4"


def get_chunk_path(output_dir: str, video_id: str, height: int, index: int) -> str:
    return os.path.join(get_quality_dir(output_dir, video_id, height), chunk_filename(index))


def get_screenshot_path(output_dir: str, video_id: str, index: int) -> str:
    return os.path.join(get_video_dir(output_dir, video_id), SCREENSHOTS_DIR, f"chunk_{index}.jpg")


def get_playlist_path(output_dir: str, video_id: str, height: int) -> str:
    return os.path.join(get_quality_dir(output_dir, video_id, height), PLAYLIST_NAME)


def get_master_playlist_path(output_dir: str, video_id: str) -> str:
    return os.path.join(get_video_dir(output_dir, video_id), MASTER_PLAYLIST_NAME)


def get_manifest_path(output_dir: str, video_id: str) -> str:
    return os.path.join(get_video_dir(output_dir, video_id), MANIFEST_NAME)


def next_chunk_key(key: str) -> Optional[str]:
    """
    Compute the key of the chunk following `key`.

    ".../720p/chunk_3.mp4" -> ".../720p/chunk_4.mp4". Returns None when the
    key carries no trailing chunk number.
    """
    match = _CHUNK_NUMBER_RE.search(key)
    if not match:
        return None
    number = int(match.group(1)) + 1
    return f"{key[:match.start()]}_{number}{match.group(2) or ''}"


def ensure_dir(path: str):
    """Ensure directory exists"""
    if path:
        os.makedirs(path, exist_ok=True)
