"""Controller metrics collection and aggregation.

Tracks tick decisions, emissions and failures, plus rolling series of
control-channel RTT, tick evaluation time and emitted bitrate for monitoring
and tuning.
"""

import logging
import time
from collections import Counter, deque
from datetime import datetime
from typing import Any, Optional

import numpy as np
import psutil

from quality.telemetry import Decision, TickOutcome

logger = logging.getLogger(__name__)

# Evaluations slower than this are logged; a tick must stay far below the period
SLOW_TICK_MS = 50.0


class RollingSeries:
    """Bounded series of recent observations with percentile summaries."""

    def __init__(self, max_samples: int = 500):
        """Initialize rolling series.

        Args:
            max_samples: Observations retained, oldest dropped first
        """
        self.samples: deque[float] = deque(maxlen=max_samples)

    def record(self, value: float) -> None:
        self.samples.append(float(value))

    def last(self) -> Optional[float]:
        return self.samples[-1] if self.samples else None

    def get_stats(self) -> dict[str, float | int]:
        """Summarize the retained observations.

        Returns:
            Dictionary with min, avg, p50, p95, max and samples count
        """
        if not self.samples:
            return {"min": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0, "max": 0.0, "samples": 0}

        arr = np.array(list(self.samples))
        p50, p95 = np.percentile(arr, [50, 95])
        return {
            "min": float(arr.min()),
            "avg": float(arr.mean()),
            "p50": float(p50),
            "p95": float(p95),
            "max": float(arr.max()),
            "samples": int(arr.size),
        }


class ControllerMetrics:
    """Collects and aggregates controller metrics."""

    def __init__(self) -> None:
        """Initialize metrics collector."""
        self.rtt_ms = RollingSeries()
        self.tick_duration_ms = RollingSeries()
        self.emitted_bitrate_kbps = RollingSeries()
        self.decisions: Counter[str] = Counter()
        self.emissions = 0
        self.errors = 0
        self.last_settings: Optional[dict[str, Any]] = None
        self.last_quality_score: Optional[float] = None

        self.start_time = time.time()

    def record_latency(self, latency_ms: float) -> None:
        """Record a control-channel round-trip sample.

        Args:
            latency_ms: Round-trip latency in milliseconds
        """
        self.rtt_ms.record(latency_ms)

    def record_outcome(self, outcome: TickOutcome, duration_ms: float = 0.0) -> None:
        """Record the outcome of a controller tick.

        Args:
            outcome: Tick outcome
            duration_ms: Time spent evaluating the tick
        """
        self.decisions[outcome.decision.value] += 1
        self.tick_duration_ms.record(duration_ms)
        if duration_ms > SLOW_TICK_MS:
            logger.warning(f"Slow controller tick: {duration_ms:.1f}ms ({outcome.decision.value})")

        if outcome.quality_score is not None:
            self.last_quality_score = outcome.quality_score

        if outcome.settings is not None:
            self.emissions += 1
            self.emitted_bitrate_kbps.record(outcome.settings.bitrate / 1024)
            self.last_settings = outcome.settings.to_json()

        if outcome.decision is Decision.ERROR:
            self.errors += 1
            logger.warning(f"Controller tick failed (total: {self.errors})")

    def get_snapshot(self) -> dict[str, Any]:
        """Get current metrics snapshot.

        Returns:
            Dictionary with all metrics data
        """
        process = psutil.Process()
        memory_mb = process.memory_info().rss / (1024 * 1024)

        return {
            "rtt_ms": self.rtt_ms.get_stats(),
            "tick_duration_ms": self.tick_duration_ms.get_stats(),
            "emitted_bitrate_kbps": self.emitted_bitrate_kbps.get_stats(),
            "decisions": {d.value: self.decisions.get(d.value, 0) for d in Decision},
            "emissions": self.emissions,
            "errors": self.errors,
            "last_settings": self.last_settings,
            "last_quality_score": self.last_quality_score,
            "memory_usage_mb": memory_mb,
            "uptime_sec": time.time() - self.start_time,
            "timestamp": datetime.now().isoformat(),
        }
