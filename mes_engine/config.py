"""
Configuration management for the segmentation engine.

Centralizes all configuration loading from environment variables
and provides type-safe access to configuration values.
"""

import os
from typing import Dict, Any, List
from dataclasses import dataclass, field

from .models import QualityLevel
from .exceptions import ConfigurationError
from .pipeline.playlist import parse_bitrate

DEFAULT_QUALITIES = "1080:5000k,720:2500k,480:1000k,360:500k"


def parse_qualities(value: str) -> List[QualityLevel]:
    """Parse a comma separated "<height>:<bitrate>" list, keeping its order"""
    return [QualityLevel.parse(token) for token in value.split(",") if token.strip()]


@dataclass
class EngineConfig:
    """Configuration for the segmentation engine"""

    # Segmentation settings
    CHUNK_SIZE: float = 10.0
    OUTPUT_DIR: str = "/app/data/processed"
    QUALITIES: List[QualityLevel] = field(default_factory=lambda: parse_qualities(DEFAULT_QUALITIES))

    # Engine settings
    ENGINE_TYPE: str = "ffmpeg"
    ENGINE_CONFIG: Dict[str, Any] = field(default_factory=dict)

    # Storage settings
    STORAGE_TYPE: str = "filesystem"  # filesystem, s3
    STORAGE_CONFIG: Dict[str, Any] = field(default_factory=dict)

    # Cache settings
    CACHE_TYPE: str = "internal"  # internal, external, none
    CACHE_CONFIG: Dict[str, Any] = field(default_factory=dict)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "/app/data/logs"

    # HTTP server
    ENABLE_HTTP_SERVER: bool = False
    HTTP_PORT: int = 8000

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Load configuration from environment variables"""
        config = cls()

        # Segmentation settings
        config.CHUNK_SIZE = float(os.getenv("CHUNK_SIZE", "10"))
        config.OUTPUT_DIR = os.getenv("OUTPUT_DIR", "/app/data/processed")
        config.QUALITIES = parse_qualities(os.getenv("VIDEO_QUALITIES", DEFAULT_QUALITIES))

        # Engine configuration
        config.ENGINE_TYPE = os.getenv("ENGINE_TYPE", "ffmpeg")
        config.ENGINE_CONFIG = {
            "preset": os.getenv("FFMPEG_PRESET", "fast"),
            "audio_bitrate": os.getenv("AUDIO_BITRATE", "128k")
        }

        # Storage configuration
        config.STORAGE_TYPE = os.getenv("STORAGE_TYPE", "filesystem")
        config.STORAGE_CONFIG = cls._parse_storage_config()

        # Cache configuration
        config.CACHE_TYPE = os.getenv("CACHE_TYPE", "internal")
        config.CACHE_CONFIG = cls._parse_cache_config()

        # Logging
        config.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        config.LOG_DIR = os.getenv("LOG_DIR", "/app/data/logs")

        # HTTP server
        config.ENABLE_HTTP_SERVER = os.getenv("ENGINE_DEV_HTTP", "false").lower() == "true"
        config.HTTP_PORT = int(os.getenv("ENGINE_HTTP_PORT", "8000"))

        return config

    @classmethod
    def _parse_storage_config(cls) -> Dict[str, Any]:
        """Parse storage specific configuration"""
        storage_type = os.getenv("STORAGE_TYPE", "filesystem")

        if storage_type == "filesystem":
            return {
                "root": os.getenv("STORAGE_ROOT")
            }
        elif storage_type == "s3":
            return {
                "bucket": os.getenv("AWS_S3_BUCKET"),
                "region": os.getenv("AWS_REGION", "us-east-1"),
                "prefix": os.getenv("S3_PREFIX", "mes-engine/")
            }
        else:
            return {}

    @classmethod
    def _parse_cache_config(cls) -> Dict[str, Any]:
        """Parse cache specific configuration"""
        return {
            "max_size": int(os.getenv("MAX_CACHE_SIZE", "100")),
            "ttl": int(os.getenv("CACHE_TTL", "3600")),
            "preload_next_chunk": os.getenv("CACHE_PRELOAD", "true").lower() == "true",
            "external_cache_url": os.getenv("EXTERNAL_CACHE_URL")
        }

    def validate(self) -> None:
        """Validate configuration and raise errors for missing or invalid values"""
        problems = []

        if self.CHUNK_SIZE <= 0:
            problems.append("CHUNK_SIZE must be positive")

        if not self.QUALITIES:
            problems.append("VIDEO_QUALITIES must list at least one quality")
        else:
            heights = [q.height for q in self.QUALITIES]
            if len(set(heights)) != len(heights):
                problems.append("VIDEO_QUALITIES contains duplicate heights")
            if any(h <= 0 for h in heights):
                problems.append("VIDEO_QUALITIES heights must be positive")
            for quality in self.QUALITIES:
                try:
                    parse_bitrate(quality.bitrate)
                except ValueError:
                    problems.append(f"VIDEO_QUALITIES has invalid bitrate {quality.bitrate!r} for {quality.label}")

        if self.ENGINE_TYPE != "ffmpeg":
            problems.append(f"Unsupported ENGINE_TYPE: {self.ENGINE_TYPE}")

        if self.STORAGE_TYPE not in ("filesystem", "s3"):
            problems.append(f"Unsupported STORAGE_TYPE: {self.STORAGE_TYPE}")

        if self.STORAGE_TYPE == "s3" and not self.STORAGE_CONFIG.get("bucket"):
            problems.append("AWS_S3_BUCKET is required for s3 storage")

        if self.CACHE_TYPE not in ("internal", "external", "none"):
            problems.append(f"Unsupported CACHE_TYPE: {self.CACHE_TYPE}")

        if self.CACHE_TYPE == "external" and not self.CACHE_CONFIG.get("external_cache_url"):
            problems.append("EXTERNAL_CACHE_URL is required for external cache")

        if self.CACHE_TYPE == "internal" and self.CACHE_CONFIG.get("max_size", 1) < 1:
            problems.append("MAX_CACHE_SIZE must be at least 1")

        if problems:
            raise ConfigurationError(f"Invalid configuration: {', '.join(problems)}")
