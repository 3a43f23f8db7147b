"""
Abstract base class for transcode engines.

Defines the operations the pipeline needs from an external transcoder,
enabling easy swapping between implementations (local ffmpeg, remote
services, test doubles).
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import QualityLevel


class VideoEngine(ABC):
    """Abstract base class for transcode engines"""

    @abstractmethod
    def process_chunk(self, input_path: str, output_path: str, start_time: float,
                      quality: QualityLevel, duration: Optional[float] = None) -> None:
        """
        Transcode one chunk of the input video.

        Args:
            input_path: Source video
            output_path: Destination file for the chunk
            start_time: Offset into the source, in seconds
            quality: Target height and bitrate
            duration: Chunk length in seconds

        Raises:
            EngineError: If the transcoder fails
        """
        pass

    @abstractmethod
    def extract_screenshot(self, input_path: str, output_path: str, time: float) -> None:
        """
        Extract a single still image from the input video.

        Args:
            input_path: Source video
            output_path: Destination image file
            time: Timestamp in seconds

        Raises:
            EngineError: If extraction fails
        """
        pass

    @abstractmethod
    def get_duration(self, input_path: str) -> float:
        """
        Report the duration of the input video.

        Returns:
            Duration in seconds

        Raises:
            EngineError: If the duration cannot be probed
        """
        pass
