"""
Transcode engine implementations.

The pipeline depends only on the VideoEngine interface; concrete engines
are chosen at construction time.
"""

from .base import VideoEngine
from .ffmpeg_engine import FFmpegEngine

__all__ = [
    'VideoEngine',
    'FFmpegEngine'
]
