"""Exceptions raised by the segmentation pipeline and its collaborators."""


class MesEngineError(Exception):
    """Base exception for all mes_engine errors."""
    pass


class ConfigurationError(MesEngineError):
    """Raised when configuration is invalid."""
    pass


class EngineError(MesEngineError):
    """Raised by an engine implementation when an external tool fails."""
    pass


class StorageError(MesEngineError):
    """Raised by a storage provider when a read, write or delete fails."""
    pass


class VideoProcessingError(MesEngineError):
    """Raised when a processing job fails. Aborts the whole job."""
    pass


class SourceNotFoundError(VideoProcessingError):
    """Raised when the input video cannot be stat'ed."""

    def __init__(self, input_path: str):
        super().__init__(f"Source video not found: {input_path}")
        self.input_path = input_path


class DurationProbeError(VideoProcessingError):
    """Raised when the engine cannot report a usable duration."""
    pass


class ChunkTranscodeError(VideoProcessingError):
    """Raised when a single chunk fails to transcode."""

    def __init__(self, quality: int, index: int, reason: str = ""):
        message = f"Failed to transcode chunk {index} at {quality}p"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.quality = quality
        self.index = index


class ScreenshotExtractionError(VideoProcessingError):
    """Raised when the screenshot for a chunk index cannot be extracted."""

    def __init__(self, index: int, reason: str = ""):
        message = f"Failed to extract screenshot for chunk {index}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.index = index


class ArtifactPersistError(VideoProcessingError):
    """Raised when a chunk, playlist or manifest cannot be written to storage."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Failed to persist {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class ChunkNotFoundError(MesEngineError):
    """Raised on the read path when neither cache nor storage holds the chunk."""

    def __init__(self, path: str):
        super().__init__(f"Chunk not found: {path}")
        self.path = path


class ManifestNotFoundError(MesEngineError):
    """Raised when a video's manifest is missing or unreadable."""

    def __init__(self, video_id: str):
        super().__init__(f"Manifest not found for video {video_id}")
        self.video_id = video_id


class InvalidRangeError(MesEngineError, ValueError):
    """Raised when a requested byte range cannot be satisfied."""
    pass
