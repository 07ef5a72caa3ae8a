"""Rolling round-trip latency tracking.

Keeps the most recent control-channel RTT samples and derives mean latency,
jitter (population standard deviation) and a normalized connection score.
"""

import logging
import math
import threading
from collections import deque

import numpy as np

from quality.interfaces.latency import ILatencyTracker
from quality.telemetry import LatencyScore

logger = logging.getLogger(__name__)

# Latency at or above this scores 0
LATENCY_CEILING_MS = 500.0
# Jitter at or above this scores 0
JITTER_CEILING_MS = 100.0


def latency_score(mean_latency_ms: float) -> float:
    """Map mean latency onto [0, 1], 1 being instantaneous."""
    return min(1.0, max(0.0, 1.0 - mean_latency_ms / LATENCY_CEILING_MS))


def jitter_score(jitter_ms: float) -> float:
    """Map jitter onto [0, 1], 1 being perfectly stable."""
    return min(1.0, max(0.0, 1.0 - jitter_ms / JITTER_CEILING_MS))


class LatencyTracker(ILatencyTracker):
    """Bounded FIFO window of RTT samples.

    Thread-safe: samples may be recorded from the control-channel thread while
    a controller tick reads the score.
    """

    def __init__(self, window_size: int = 10):
        """Initialize latency tracker.

        Args:
            window_size: Number of samples retained (default 10)
        """
        if window_size < 1:
            raise ValueError(f"Window size must be >= 1, got {window_size}")

        self.window_size = window_size
        self._samples: deque[float] = deque(maxlen=window_size)
        self._lock = threading.Lock()

    def record(self, sample_ms: float) -> None:
        """Record a round-trip latency sample.

        Args:
            sample_ms: Round-trip time in milliseconds
        """
        sample = float(sample_ms)
        if not math.isfinite(sample):
            logger.debug(f"Ignoring non-finite latency sample: {sample_ms}")
            return

        with self._lock:
            self._samples.append(sample)

    def current_score(self) -> LatencyScore:
        """Get the current latency summary.

        Returns:
            LatencyScore; with no samples the score is 1.0 (optimistic prior)
        """
        with self._lock:
            if not self._samples:
                return LatencyScore(mean_latency_ms=0.0, jitter_ms=0.0, quality_score=1.0)
            arr = np.array(list(self._samples))

        mean_ms = float(np.mean(arr))
        jitter_ms = float(np.std(arr))  # ddof=0: population std-dev

        return LatencyScore(
            mean_latency_ms=mean_ms,
            jitter_ms=jitter_ms,
            quality_score=(latency_score(mean_ms) + jitter_score(jitter_ms)) / 2,
        )

    def samples(self) -> list[float]:
        """Return a copy of the current window, oldest first."""
        with self._lock:
            return list(self._samples)

    @property
    def sample_count(self) -> int:
        with self._lock:
            return len(self._samples)

    def reset(self) -> None:
        """Drop all samples."""
        with self._lock:
            self._samples.clear()
        logger.debug("Latency window cleared")

    def __repr__(self) -> str:
        """String representation for debugging."""
        score = self.current_score()
        return (
            f"LatencyTracker(samples={self.sample_count}/{self.window_size}, "
            f"mean={score.mean_latency_ms:.1f}ms, jitter={score.jitter_ms:.1f}ms)"
        )
