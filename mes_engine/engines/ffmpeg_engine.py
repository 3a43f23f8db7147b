import os
import ffmpeg
import logging
from typing import Optional
from PIL import Image

from .base import VideoEngine
from ..models import QualityLevel
from ..exceptions import EngineError
from ..pipeline.util import ensure_dir

logger = logging.getLogger("mes_engine")

DEFAULT_CHUNK_DURATION = 10.0


def _stderr(error: ffmpeg.Error) -> str:
    return error.stderr.decode(errors="replace") if error.stderr else str(error)


class FFmpegEngine(VideoEngine):
    """Transcode engine backed by the ffmpeg/ffprobe binaries"""

    def __init__(self, preset: str = "fast", audio_bitrate: str = "128k"):
        self.preset = preset
        self.audio_bitrate = audio_bitrate

    def process_chunk(self, input_path: str, output_path: str, start_time: float,
                      quality: QualityLevel, duration: Optional[float] = None) -> None:
        """Transcode [start_time, start_time + duration) to H.264/AAC at the given height"""
        ensure_dir(os.path.dirname(output_path))
        duration = duration or DEFAULT_CHUNK_DURATION

        logger.debug(f"Transcoding {input_path} @ {start_time:.2f}s -> {output_path} ({quality.label})")

        try:
            (
                ffmpeg
                .input(input_path, ss=start_time, t=duration)
                .output(
                    output_path,
                    vf=f"scale=-2:{quality.height}",  # keep aspect ratio, even width
                    vcodec='libx264',
                    video_bitrate=quality.bitrate,
                    acodec='aac',
                    audio_bitrate=self.audio_bitrate,
                    preset=self.preset
                )
                .overwrite_output()
                .run(quiet=True)
            )
        except ffmpeg.Error as e:
            raise EngineError(f"FFmpeg error transcoding {input_path} at {start_time}s: {_stderr(e)}")

        if not os.path.exists(output_path):
            raise EngineError(f"FFmpeg produced no output for {output_path}")

    def extract_screenshot(self, input_path: str, output_path: str, time: float) -> None:
        """Extract one JPEG frame at the given timestamp"""
        ensure_dir(os.path.dirname(output_path))

        try:
            (
                ffmpeg
                .input(input_path, ss=time)
                .output(output_path, vframes=1, format='image2', vcodec='mjpeg')
                .overwrite_output()
                .run(quiet=True)
            )
        except ffmpeg.Error as e:
            raise EngineError(f"FFmpeg error extracting frame at {time}s: {_stderr(e)}")

        if not validate_frame_file(output_path):
            raise EngineError(f"Screenshot {output_path} is missing or unreadable")

        logger.debug(f"Extracted screenshot at {time:.2f}s -> {output_path}")

    def get_duration(self, input_path: str) -> float:
        """Get container duration in seconds"""
        try:
            probe = ffmpeg.probe(input_path)
            return float(probe['format']['duration'])
        except ffmpeg.Error as e:
            raise EngineError(f"FFprobe error for {input_path}: {_stderr(e)}")
        except (KeyError, TypeError, ValueError) as e:
            raise EngineError(f"FFprobe reported no duration for {input_path}: {e}")


def validate_frame_file(frame_path: str) -> bool:
    """Validate that frame file exists and is readable"""
    if not os.path.exists(frame_path):
        return False

    try:
        # Try to open with PIL
        with Image.open(frame_path) as img:
            img.verify()
        return True
    except Exception:
        return False
