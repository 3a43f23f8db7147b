"""
Domain models for the segmentation pipeline.

Defines the quality ladder, per-job options, the manifest and its chunk
records, and the job result returned by the orchestrator.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List


@dataclass(frozen=True)
class QualityLevel:
    """One rendition of the video: target height and bitrate token (e.g. "2500k")"""
    height: int
    bitrate: str

    @classmethod
    def parse(cls, token: str) -> 'QualityLevel':
        """Parse a "<height>:<bitrate>" configuration token"""
        try:
            height, bitrate = token.strip().split(":", 1)
            return cls(height=int(height), bitrate=bitrate.strip())
        except ValueError:
            raise ValueError(f"Invalid quality token {token!r}, expected <height>:<bitrate>")

    @property
    def label(self) -> str:
        return f"{self.height}p"

    def to_dict(self) -> Dict[str, Any]:
        return {'height': self.height, 'bitrate': self.bitrate}


@dataclass
class ProcessingOptions:
    """Caller supplied metadata for a processing job"""
    title: Optional[str] = None
    description: Optional[str] = None
    chunk_descriptions: Dict[int, str] = field(default_factory=dict)


@dataclass
class VideoChunk:
    """A transcoded chunk at one quality"""
    quality: int
    index: int
    path: str
    screenshot_path: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'quality': self.quality, 'index': self.index, 'path': self.path}
        if self.screenshot_path:
            data['screenshot_path'] = self.screenshot_path
        if self.description:
            data['description'] = self.description
        return data


@dataclass
class ManifestMetadata:
    """Descriptive metadata attached to a manifest"""
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    duration_sec: Optional[float] = None
    chunk_size: Optional[float] = None


@dataclass
class VideoManifest:
    """Structured record of a processed video"""
    video_id: str
    qualities: List[QualityLevel]
    chunks: List[VideoChunk] = field(default_factory=list)
    metadata: ManifestMetadata = field(default_factory=ManifestMetadata)

    def chunks_for_quality(self, height: int) -> List[VideoChunk]:
        return [chunk for chunk in self.chunks if chunk.quality == height]

    @property
    def chunk_count(self) -> int:
        """Number of chunks per quality"""
        if not self.qualities:
            return 0
        return len(self.chunks_for_quality(self.qualities[0].height))

    def to_dict(self) -> Dict[str, Any]:
        metadata = {k: v for k, v in vars(self.metadata).items() if v is not None}
        return {
            'video_id': self.video_id,
            'qualities': [q.to_dict() for q in self.qualities],
            'chunks': [c.to_dict() for c in self.chunks],
            'metadata': metadata
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VideoManifest':
        """Rebuild a manifest from its serialized form"""
        metadata = data.get('metadata', {})
        return cls(
            video_id=data['video_id'],
            qualities=[QualityLevel(height=int(q['height']), bitrate=q['bitrate']) for q in data['qualities']],
            chunks=[
                VideoChunk(
                    quality=int(c['quality']),
                    index=int(c['index']),
                    path=c['path'],
                    screenshot_path=c.get('screenshot_path'),
                    description=c.get('description')
                )
                for c in data.get('chunks', [])
            ],
            metadata=ManifestMetadata(
                title=metadata.get('title'),
                description=metadata.get('description'),
                created_at=metadata.get('created_at', ''),
                duration_sec=metadata.get('duration_sec'),
                chunk_size=metadata.get('chunk_size')
            )
        )


@dataclass
class ProcessingResult:
    """Represents the result of a processing job"""
    success: bool
    video_id: Optional[str] = None
    manifest: Optional[VideoManifest] = None
    error: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
