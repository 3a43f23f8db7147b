"""
Processing notifications.

Handlers are dispatched synchronously, in registration order, on the
thread that emits the event.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger("mes_engine")


class VideoEvent(str, Enum):
    CHUNK_PROCESSED = "chunkProcessed"
    QUALITY_PROCESSED = "qualityProcessed"
    PROCESSING_COMPLETE = "processingComplete"
    ERROR = "error"


class EventEmitter:
    """Minimal synchronous event emitter"""

    def __init__(self):
        self._handlers: Dict[VideoEvent, List[Callable[[Any], None]]] = {}

    def on(self, event: VideoEvent, handler: Callable[[Any], None]) -> None:
        self._handlers.setdefault(VideoEvent(event), []).append(handler)

    def off(self, event: VideoEvent, handler: Callable[[Any], None]) -> None:
        handlers = self._handlers.get(VideoEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: VideoEvent, payload: Any = None) -> None:
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception as e:
                logger.warning(f"Handler for {event.value} raised: {e}")
