import re
import time
import logging
from typing import Optional, Iterator
from fastapi import FastAPI, HTTPException, Header
from fastapi.responses import Response, StreamingResponse
import uvicorn
from threading import Thread

from .bandwidth import BandwidthEstimator
from .exceptions import ChunkNotFoundError, InvalidRangeError, ManifestNotFoundError
from .orchestrator import PipelineOrchestrator
from .processor import VideoProcessor
from .streaming import ByteRange, ChunkStream

logger = logging.getLogger("mes_engine")

PLAYLIST_MEDIA_TYPE = "application/vnd.apple.mpegurl"

_RANGE_RE = re.compile(r'^\s*bytes\s*=\s*(\d+)\s*-\s*(\d*)\s*$')


def parse_range_header(value: str) -> ByteRange:
    """Parse a single "bytes=start-[end]" range header"""
    match = _RANGE_RE.match(value)
    if not match:
        raise InvalidRangeError(f"Unsupported Range header: {value!r}")
    start, end = match.groups()
    return ByteRange(int(start), int(end) if end else None)


class HealthServer:
    def __init__(self, processor: VideoProcessor, orchestrator: Optional[PipelineOrchestrator] = None,
                 port: int = 8000, bandwidth: Optional[BandwidthEstimator] = None):
        self.processor = processor
        self.orchestrator = orchestrator
        self.port = port
        self.bandwidth = bandwidth or BandwidthEstimator()
        self.app = FastAPI(title="mes-engine API")
        self.setup_routes()
        self.server_thread = None
        self.running = False

    def setup_routes(self):
        """Setup API routes"""

        @self.app.get("/healthz")
        async def health_check():
            """Health check endpoint"""
            return {"ok": True, "status": "healthy"}

        @self.app.get("/stats")
        async def get_stats():
            """Get processing, cache and bandwidth statistics"""
            stats = {}
            if self.orchestrator:
                stats['orchestrator'] = self.orchestrator.get_stats()

            cache = self.processor.cache
            if cache is not None and hasattr(cache, 'stats'):
                stats['cache'] = cache.stats()

            estimate = self.bandwidth.get_estimated_bandwidth()
            stats['bandwidth'] = {
                'estimated_mbps': estimate if estimate != float('inf') else None,
                'samples': self.bandwidth.sample_count
            }
            return stats

        @self.app.get("/manifest/{video_id}")
        def get_manifest(video_id: str):
            """Return a processed video's manifest"""
            try:
                return self.processor.get_manifest(video_id).to_dict()
            except ManifestNotFoundError:
                raise HTTPException(status_code=404, detail="Manifest not found")

        @self.app.get("/playlist/{video_id}/master.m3u8")
        def get_master_playlist(video_id: str):
            """Return the master playlist"""
            try:
                content = self.processor.get_playlist(video_id)
            except ChunkNotFoundError:
                raise HTTPException(status_code=404, detail="Playlist not found")
            return Response(content=content, media_type=PLAYLIST_MEDIA_TYPE)

        @self.app.get("/playlist/{video_id}/{quality}p.m3u8")
        def get_quality_playlist(video_id: str, quality: int):
            """Return the playlist of one quality"""
            try:
                content = self.processor.get_playlist(video_id, quality)
            except ChunkNotFoundError:
                raise HTTPException(status_code=404, detail="Playlist not found")
            return Response(content=content, media_type=PLAYLIST_MEDIA_TYPE)

        @self.app.get("/stream/{video_id}/{quality}/{chunk}")
        def stream_chunk(video_id: str, quality: int, chunk: int, range: Optional[str] = Header(None)):
            """Stream a chunk, honouring a single byte range"""
            started = time.monotonic()
            try:
                byte_range = parse_range_header(range) if range else None
                stream = self.processor.stream_chunk(video_id, quality, chunk, byte_range)
            except ChunkNotFoundError:
                raise HTTPException(status_code=404, detail="Chunk not found")
            except InvalidRangeError as e:
                raise HTTPException(status_code=416, detail=str(e))

            headers = {
                "Accept-Ranges": "bytes",
                "Content-Length": str(stream.content_length)
            }
            status_code = 200
            if byte_range is not None:
                status_code = 206
                headers["Content-Range"] = f"bytes {stream.start}-{stream.end}/{stream.total_size}"

            return StreamingResponse(
                self._measure(stream, started),
                status_code=status_code,
                media_type="video/mp4",
                headers=headers
            )

    def _measure(self, stream: ChunkStream, started: float) -> Iterator[bytes]:
        """Yield the stream and record the transfer as a bandwidth sample"""
        sent = 0
        for block in stream:
            sent += len(block)
            yield block
        elapsed_ms = max((time.monotonic() - started) * 1000, 0.001)
        self.bandwidth.add_sample(sent, elapsed_ms)

    def start(self):
        """Start the HTTP server in a background thread"""
        if self.running:
            return

        def run_server():
            try:
                uvicorn.run(
                    self.app,
                    host="0.0.0.0",
                    port=self.port,
                    log_level="warning",  # Reduce uvicorn logging
                    access_log=False
                )
            except Exception as e:
                logger.error(f"HTTP server error: {str(e)}")

        self.server_thread = Thread(target=run_server, daemon=True)
        self.server_thread.start()
        self.running = True

        logger.info(f"HTTP server started on port {self.port}")

    def serve_forever(self):
        """Run the HTTP server on the calling thread"""
        logger.info(f"HTTP server listening on port {self.port}")
        uvicorn.run(self.app, host="0.0.0.0", port=self.port, log_level="warning")

    def stop(self):
        """Stop the HTTP server"""
        self.running = False
        logger.info("HTTP server stopped")


def start_health_server(processor: VideoProcessor, orchestrator: Optional[PipelineOrchestrator],
                        enabled: bool, port: int = 8000) -> Optional[HealthServer]:
    """Start the HTTP server if enabled"""
    if enabled:
        server = HealthServer(processor, orchestrator, port)
        server.start()
        return server
    return None
