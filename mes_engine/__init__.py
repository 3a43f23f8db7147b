"""
mes_engine: segment a video into fixed-length chunks, transcode each chunk
at several qualities, and serve the result as HLS through a bounded cache.
"""

from .models import QualityLevel, ProcessingOptions, VideoChunk, VideoManifest, ManifestMetadata, ProcessingResult
from .events import VideoEvent, EventEmitter
from .config import EngineConfig
from .engines import VideoEngine, FFmpegEngine
from .adapters import StorageProvider, FileSystemStorage, S3StorageAdapter
from .cache import CacheStrategy, CacheOptions, InternalCache, ExternalCache, create_cache
from .streaming import ByteRange, ChunkStream, StreamManager
from .bandwidth import BandwidthEstimator
from .processor import VideoProcessor
from .orchestrator import PipelineOrchestrator

__all__ = [
    'QualityLevel',
    'ProcessingOptions',
    'VideoChunk',
    'VideoManifest',
    'ManifestMetadata',
    'ProcessingResult',
    'VideoEvent',
    'EventEmitter',
    'EngineConfig',
    'VideoEngine',
    'FFmpegEngine',
    'StorageProvider',
    'FileSystemStorage',
    'S3StorageAdapter',
    'CacheStrategy',
    'CacheOptions',
    'InternalCache',
    'ExternalCache',
    'create_cache',
    'ByteRange',
    'ChunkStream',
    'StreamManager',
    'BandwidthEstimator',
    'VideoProcessor',
    'PipelineOrchestrator'
]
