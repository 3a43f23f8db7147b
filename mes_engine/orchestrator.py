"""
Job execution and statistics.

Wraps VideoProcessor so that callers receive a ProcessingResult instead of
an exception, and keeps running totals for monitoring.
"""

import time
import logging
from typing import Optional, Dict, Any
from datetime import datetime
from threading import Lock

from .models import ProcessingOptions, ProcessingResult
from .processor import VideoProcessor
from .exceptions import MesEngineError
from .logging_setup import log_exception

logger = logging.getLogger("mes_engine")


class PipelineOrchestrator:
    """Manages job execution and bookkeeping around the processor"""

    def __init__(self, processor: VideoProcessor):
        self.processor = processor
        self._lock = Lock()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'jobs_processed': 0,
            'jobs_failed': 0,
            'chunks_produced': 0,
            'total_processing_time': 0.0,
            'start_time': datetime.now()
        }

    def execute(self, input_path: str, options: Optional[ProcessingOptions] = None) -> ProcessingResult:
        """
        Execute one processing job.

        Args:
            input_path: Source video
            options: Optional job metadata

        Returns:
            ProcessingResult with the manifest on success, the error otherwise
        """
        start_time = time.time()
        logger.info(f"Executing job for {input_path}")

        try:
            manifest = self.processor.process_video(input_path, options)
        except MesEngineError as e:
            processing_time = time.time() - start_time
            log_exception(logger, f"Job failed for {input_path}: {e}")
            with self._lock:
                self.stats['jobs_failed'] += 1
                self.stats['total_processing_time'] += processing_time
            return ProcessingResult(
                success=False,
                error=str(e),
                metrics={
                    'processing_time_sec': processing_time,
                    'error_type': type(e).__name__
                }
            )

        processing_time = time.time() - start_time
        with self._lock:
            self.stats['jobs_processed'] += 1
            self.stats['chunks_produced'] += len(manifest.chunks)
            self.stats['total_processing_time'] += processing_time

        logger.info(f"Job completed for {manifest.video_id} in {processing_time:.2f}s")

        return ProcessingResult(
            success=True,
            video_id=manifest.video_id,
            manifest=manifest,
            metrics={
                'processing_time_sec': processing_time,
                'chunks_count': len(manifest.chunks),
                'qualities_count': len(manifest.qualities),
                'duration_sec': manifest.metadata.duration_sec
            }
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get orchestrator statistics"""
        with self._lock:
            stats = dict(self.stats)

        uptime = (datetime.now() - stats['start_time']).total_seconds()
        total_jobs = stats['jobs_processed'] + stats['jobs_failed']

        return {
            'jobs_processed': stats['jobs_processed'],
            'jobs_failed': stats['jobs_failed'],
            'chunks_produced': stats['chunks_produced'],
            'total_processing_time': stats['total_processing_time'],
            'average_processing_time': (
                stats['total_processing_time'] / total_jobs if total_jobs > 0 else 0
            ),
            'uptime_seconds': uptime,
            'success_rate': stats['jobs_processed'] / total_jobs if total_jobs > 0 else 0
        }

    def reset_stats(self) -> None:
        """Reset orchestrator statistics"""
        with self._lock:
            self.stats = self._empty_stats()
        logger.info("Orchestrator statistics reset")
