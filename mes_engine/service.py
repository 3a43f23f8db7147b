"""
Main engine service.

Builds the engine, storage, cache and processor from configuration and
exposes a command line entry point.
"""

import os
import sys
import json
import signal
import logging
import argparse
from typing import Optional, Dict, Any

from .config import EngineConfig
from .adapters.base import StorageProvider
from .adapters.filesystem_adapter import FileSystemStorage
from .adapters.s3_adapter import S3StorageAdapter
from .cache import CacheOptions, CacheStrategy, ExternalCache, InternalCache
from .engines.base import VideoEngine
from .engines.ffmpeg_engine import FFmpegEngine
from .models import ProcessingOptions, ProcessingResult
from .processor import VideoProcessor
from .orchestrator import PipelineOrchestrator
from .events import VideoEvent
from .logging_setup import setup_logging, log_exception
from .http_server import HealthServer, start_health_server

logger = logging.getLogger("mes_engine")


class MediaService:
    """Engine service with adapter-based architecture"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.from_env()
        self.engine: Optional[VideoEngine] = None
        self.storage: Optional[StorageProvider] = None
        self.cache: Optional[CacheStrategy] = None
        self.processor: Optional[VideoProcessor] = None
        self.orchestrator: Optional[PipelineOrchestrator] = None
        self.health_server: Optional[HealthServer] = None

    def initialize(self, start_http: bool = True):
        """Initialize adapters and processor based on configuration"""
        try:
            # Setup logging
            setup_logging(self.config.LOG_LEVEL, self.config.LOG_DIR)

            # Validate configuration
            self.config.validate()

            self._initialize_adapters()

            self.processor = VideoProcessor(self.engine, self.storage, self.config, self.cache)
            self._register_listeners()
            self.orchestrator = PipelineOrchestrator(self.processor)

            # Start HTTP server if enabled
            if start_http:
                self.health_server = start_health_server(
                    self.processor, self.orchestrator,
                    self.config.ENABLE_HTTP_SERVER, self.config.HTTP_PORT
                )

            logger.info("Engine service initialized successfully")

        except Exception as e:
            log_exception(logger, f"Failed to initialize engine service: {e}")
            raise

    def _initialize_adapters(self):
        """Initialize engine, storage and cache based on configuration"""
        self._resolve_output_dir()
        self.engine = self._create_engine()

        self.storage = self._create_storage_adapter()
        self.storage.connect()

        self.cache = self._create_cache()

        logger.info(
            f"Initialized adapters: {self.config.ENGINE_TYPE} engine, "
            f"{self.config.STORAGE_TYPE} storage, {self.config.CACHE_TYPE} cache"
        )

    def _resolve_output_dir(self):
        """Anchor a relative OUTPUT_DIR at the filesystem storage root"""
        root = self.config.STORAGE_CONFIG.get("root")
        if self.config.STORAGE_TYPE == "filesystem" and root and not os.path.isabs(self.config.OUTPUT_DIR):
            self.config.OUTPUT_DIR = os.path.abspath(os.path.join(root, self.config.OUTPUT_DIR))
            logger.info(f"Output directory resolved to {self.config.OUTPUT_DIR}")

    def _create_engine(self) -> VideoEngine:
        """Create engine based on configuration"""
        if self.config.ENGINE_TYPE == "ffmpeg":
            config = self.config.ENGINE_CONFIG
            return FFmpegEngine(
                preset=config.get("preset", "fast"),
                audio_bitrate=config.get("audio_bitrate", "128k")
            )
        else:
            raise ValueError(f"Unsupported engine type: {self.config.ENGINE_TYPE}")

    def _create_storage_adapter(self) -> StorageProvider:
        """Create storage adapter based on configuration"""
        config = self.config.STORAGE_CONFIG

        if self.config.STORAGE_TYPE == "filesystem":
            return FileSystemStorage(root=config.get("root"))

        elif self.config.STORAGE_TYPE == "s3":
            return S3StorageAdapter(
                bucket=config["bucket"],
                region=config.get("region", "us-east-1"),
                prefix=config.get("prefix", "mes-engine/"),
                base_dir=self.config.OUTPUT_DIR
            )

        else:
            raise ValueError(f"Unsupported storage type: {self.config.STORAGE_TYPE}")

    def _create_cache(self) -> Optional[CacheStrategy]:
        """Create cache based on configuration"""
        if self.config.CACHE_TYPE == "none":
            return None

        config = self.config.CACHE_CONFIG
        options = CacheOptions(
            max_size=config.get("max_size", 100),
            ttl=config.get("ttl", 3600),
            preload_next_chunk=config.get("preload_next_chunk", True),
            external_cache_url=config.get("external_cache_url")
        )

        if self.config.CACHE_TYPE == "external":
            return ExternalCache(options)
        return InternalCache(options, self.storage)

    def _register_listeners(self):
        """Log processor notifications"""
        self.processor.on(
            VideoEvent.CHUNK_PROCESSED,
            lambda data: logger.debug(f"Chunk {data['chunk_number']} done at {data['quality'].label}")
        )
        self.processor.on(
            VideoEvent.QUALITY_PROCESSED,
            lambda quality: logger.debug(f"Quality {quality.label} done")
        )

    def process(self, input_path: str, options: Optional[ProcessingOptions] = None) -> ProcessingResult:
        """Run one processing job"""
        return self.orchestrator.execute(input_path, options)

    def stop(self):
        """Stop the engine service"""
        if self.health_server:
            self.health_server.stop()
        if self.storage:
            self.storage.close()
        logger.info("Engine service stopped")

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics"""
        stats = {
            'config': {
                'engine_type': self.config.ENGINE_TYPE,
                'storage_type': self.config.STORAGE_TYPE,
                'cache_type': self.config.CACHE_TYPE,
                'chunk_size': self.config.CHUNK_SIZE,
                'qualities': [q.label for q in self.config.QUALITIES]
            }
        }

        if self.orchestrator:
            stats['orchestrator'] = self.orchestrator.get_stats()

        return stats


def signal_handler(signum, frame):
    """Handle shutdown signals"""
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mes-engine", description="Chunked multi-quality HLS packager")
    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="Segment and transcode a video")
    process.add_argument("input", help="Path to the source video")
    process.add_argument("--title", help="Title stored in the manifest")
    process.add_argument("--description", help="Description stored in the manifest")

    sub.add_parser("serve", help="Serve manifests, playlists and chunks over HTTP")
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    # Setup signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    service = MediaService()

    try:
        service.initialize(start_http=False)

        if args.command == "process":
            result = service.process(args.input, ProcessingOptions(title=args.title, description=args.description))
            if not result.success:
                print(result.error, file=sys.stderr)
                return 1
            print(json.dumps(result.manifest.to_dict(), indent=2))
            return 0

        server = HealthServer(service.processor, service.orchestrator, service.config.HTTP_PORT)
        server.serve_forever()
        return 0

    except Exception as e:
        log_exception(logger, f"Engine failed: {str(e)}")
        return 1
    finally:
        service.stop()


if __name__ == "__main__":
    sys.exit(main())
