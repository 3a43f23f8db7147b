import math
import time
import statistics
from threading import Lock
from typing import Callable, List, Optional, Tuple


def _now_ms() -> float:
    return time.monotonic() * 1000


class BandwidthEstimator:
    """Rolling-window throughput estimate, in Mbps, using the median sample"""

    def __init__(self, window_ms: float = 10000, clock: Optional[Callable[[], float]] = None):
        self.window_ms = window_ms
        self._clock = clock or _now_ms
        self._samples: List[Tuple[float, float]] = []
        self._lock = Lock()

    def add_sample(self, bytes_transferred: int, duration_ms: float) -> float:
        """Record one transfer and return its rate in Mbps"""
        if duration_ms <= 0:
            raise ValueError("duration_ms must be positive")
        mbps = (bytes_transferred * 8) / (duration_ms * 1000)
        with self._lock:
            self._samples.append((self._clock(), mbps))
            self._prune()
        return mbps

    def get_estimated_bandwidth(self) -> float:
        """Median of the current window, or inf when nothing has been observed"""
        with self._lock:
            self._prune()
            if not self._samples:
                return math.inf
            return statistics.median(rate for _, rate in self._samples)

    @property
    def sample_count(self) -> int:
        with self._lock:
            return len(self._samples)

    def _prune(self) -> None:
        cutoff = self._clock() - self.window_ms
        self._samples = [(t, rate) for t, rate in self._samples if t > cutoff]
