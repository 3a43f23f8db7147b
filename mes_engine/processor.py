"""
Video segmentation pipeline.

Drives the engine across the chunk x quality matrix, builds the manifest
and playlists, persists them through the storage provider and exposes the
chunk streaming read path.
"""

import json
import math
import time
import logging
from typing import Dict, List, Optional

from .adapters.base import StorageProvider
from .cache.base import CacheStrategy
from .config import EngineConfig
from .engines.base import VideoEngine
from .events import EventEmitter, VideoEvent
from .exceptions import (
    ArtifactPersistError,
    ChunkNotFoundError,
    ChunkTranscodeError,
    DurationProbeError,
    ManifestNotFoundError,
    ScreenshotExtractionError,
    StorageError,
    VideoProcessingError,
)
from .models import ManifestMetadata, ProcessingOptions, QualityLevel, VideoChunk, VideoManifest
from .pipeline import util
from .pipeline.playlist import MediaPlaylistBuilder, build_master_playlist
from .streaming import ByteRange, ChunkStream, StreamManager

logger = logging.getLogger("mes_engine")


class VideoProcessor(EventEmitter):
    """Turns a source video into chunked, multi-quality HLS output"""

    def __init__(self, engine: VideoEngine, storage: StorageProvider, config: EngineConfig,
                 cache: Optional[CacheStrategy] = None):
        super().__init__()
        self.engine = engine
        self.storage = storage
        self.config = config
        self.cache = cache
        self.stream_manager = StreamManager(storage, cache)

    @property
    def chunk_size(self) -> float:
        return self.config.CHUNK_SIZE

    @property
    def qualities(self) -> List[QualityLevel]:
        return list(self.config.QUALITIES)

    def process_video(self, input_path: str, options: Optional[ProcessingOptions] = None) -> VideoManifest:
        """
        Process a video through the complete segmentation pipeline.

        Qualities are processed in configured order, chunks in ascending
        index order. The first failure aborts the job; files already
        written are left in place.

        Args:
            input_path: Path to the source video
            options: Optional title/description metadata

        Returns:
            The persisted VideoManifest

        Raises:
            VideoProcessingError: On any failure, after an ERROR notification
        """
        try:
            return self._process(input_path, options or ProcessingOptions())
        except VideoProcessingError as e:
            logger.error(f"Processing failed for {input_path}: {e}")
            self.emit(VideoEvent.ERROR, e)
            raise

    def _process(self, input_path: str, options: ProcessingOptions) -> VideoManifest:
        start = time.time()
        video_id = util.generate_video_id(input_path)
        qualities = self.qualities

        duration = self._probe_duration(input_path)
        chunk_count = math.ceil(duration / self.chunk_size)

        logger.info(
            f"Processing {input_path} as {video_id}: {duration:.2f}s, "
            f"{chunk_count} chunks x {len(qualities)} qualities"
        )

        manifest = VideoManifest(
            video_id=video_id,
            qualities=qualities,
            metadata=ManifestMetadata(
                title=options.title,
                description=options.description,
                duration_sec=duration,
                chunk_size=self.chunk_size
            )
        )

        screenshots: Dict[int, str] = {}

        for position, quality in enumerate(qualities):
            playlist = MediaPlaylistBuilder(self.chunk_size)

            for index in range(chunk_count):
                start_time = index * self.chunk_size
                chunk_path = self.get_chunk_path(video_id, quality.height, index)

                self._transcode_chunk(input_path, chunk_path, start_time, quality, index)
                self._publish(chunk_path, warm_cache=True)

                # Screenshots are tied to the first quality only
                if position == 0:
                    screenshot_path = self.get_screenshot_path(video_id, index)
                    self._extract_screenshot(input_path, screenshot_path, start_time + 1, index)
                    self._publish(screenshot_path)
                    screenshots[index] = screenshot_path

                manifest.chunks.append(VideoChunk(
                    quality=quality.height,
                    index=index,
                    path=chunk_path,
                    screenshot_path=screenshots.get(index),
                    description=options.chunk_descriptions.get(index)
                ))
                playlist.add_segment(index)

                self.emit(VideoEvent.CHUNK_PROCESSED, {'quality': quality, 'chunk_number': index})

            self._persist_text(self.get_playlist_path(video_id, quality.height), playlist.finalize())
            logger.info(f"Quality {quality.label} complete for {video_id}")
            self.emit(VideoEvent.QUALITY_PROCESSED, quality)

        if len(qualities) > 1:
            try:
                master = build_master_playlist(qualities)
            except ValueError as e:
                raise VideoProcessingError(f"Cannot build master playlist for {video_id}: {e}")
            self._persist_text(self.get_master_playlist_path(video_id), master)

        self._persist_text(self.get_manifest_path(video_id), manifest.to_json())

        logger.info(f"Processing complete for {video_id} in {time.time() - start:.2f}s")
        self.emit(VideoEvent.PROCESSING_COMPLETE, manifest)
        return manifest

    def _probe_duration(self, input_path: str) -> float:
        try:
            duration = float(self.engine.get_duration(input_path))
        except Exception as e:
            raise DurationProbeError(f"Could not probe duration of {input_path}: {e}")

        if not math.isfinite(duration) or duration <= 0:
            raise DurationProbeError(f"Engine reported unusable duration {duration} for {input_path}")
        return duration

    def _transcode_chunk(self, input_path: str, chunk_path: str, start_time: float,
                         quality: QualityLevel, index: int) -> None:
        try:
            self.engine.process_chunk(input_path, chunk_path, start_time, quality, duration=self.chunk_size)
        except Exception as e:
            raise ChunkTranscodeError(quality.height, index, str(e))

    def _extract_screenshot(self, input_path: str, screenshot_path: str, time_sec: float, index: int) -> None:
        try:
            self.engine.extract_screenshot(input_path, screenshot_path, time_sec)
        except Exception as e:
            raise ScreenshotExtractionError(index, str(e))

    def _publish(self, path: str, warm_cache: bool = False) -> None:
        """Hand an engine-written file to the storage provider"""
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise ArtifactPersistError(path, f"engine output unreadable: {e}")

        try:
            self.storage.save_chunk(path, data)
        except StorageError as e:
            raise ArtifactPersistError(path, str(e))

        if warm_cache and self.cache is not None:
            try:
                self.cache.set(path, data)
            except Exception as e:
                logger.debug(f"Cache warm-up for {path} failed: {e}")

    def _persist_text(self, path: str, text: str) -> None:
        try:
            self.storage.save_chunk(path, text.encode("utf-8"))
        except StorageError as e:
            raise ArtifactPersistError(path, str(e))

    def stream_chunk(self, video_id: str, quality: int, chunk_number: int,
                     byte_range: Optional[ByteRange] = None) -> ChunkStream:
        """Open a stream over one processed chunk"""
        chunk_path = self.get_chunk_path(video_id, quality, chunk_number)
        return self.stream_manager.create_stream(chunk_path, byte_range)

    def get_manifest(self, video_id: str) -> VideoManifest:
        """Load a persisted manifest"""
        try:
            data = self.storage.get_chunk(self.get_manifest_path(video_id))
            return VideoManifest.from_dict(json.loads(data))
        except (StorageError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Manifest load for {video_id} failed: {e}")
            raise ManifestNotFoundError(video_id)

    def get_playlist(self, video_id: str, quality: Optional[int] = None) -> str:
        """Load the master playlist, or a per-quality one when `quality` is given"""
        if quality is None:
            path = self.get_master_playlist_path(video_id)
        else:
            path = self.get_playlist_path(video_id, quality)
        try:
            return self.storage.get_chunk(path).decode("utf-8")
        except StorageError:
            raise ChunkNotFoundError(path)

    def delete_video(self, video_id: str) -> int:
        """
        Delete every stored artifact of a processed video.

        Returns:
            Number of artifacts deleted
        """
        manifest = self.get_manifest(video_id)

        paths = []
        for chunk in manifest.chunks:
            paths.append(chunk.path)
            if chunk.screenshot_path and chunk.screenshot_path not in paths:
                paths.append(chunk.screenshot_path)
        for quality in manifest.qualities:
            paths.append(self.get_playlist_path(video_id, quality.height))
        if len(manifest.qualities) > 1:
            paths.append(self.get_master_playlist_path(video_id))
        paths.append(self.get_manifest_path(video_id))

        deleted = 0
        for path in paths:
            try:
                self.storage.delete_chunk(path)
                deleted += 1
            except StorageError as e:
                logger.warning(f"Skipping {path}: {e}")

        logger.info(f"Deleted {deleted}/{len(paths)} artifacts for {video_id}")
        return deleted

    def get_chunk_path(self, video_id: str, quality: int, chunk_number: int) -> str:
        return util.get_chunk_path(self.config.OUTPUT_DIR, video_id, quality, chunk_number)

    def get_screenshot_path(self, video_id: str, chunk_number: int) -> str:
        return util.get_screenshot_path(self.config.OUTPUT_DIR, video_id, chunk_number)

    def get_playlist_path(self, video_id: str, quality: int) -> str:
        return util.get_playlist_path(self.config.OUTPUT_DIR, video_id, quality)

    def get_master_playlist_path(self, video_id: str) -> str:
        return util.get_master_playlist_path(self.config.OUTPUT_DIR, video_id)

    def get_manifest_path(self, video_id: str) -> str:
        return util.get_manifest_path(self.config.OUTPUT_DIR, video_id)
