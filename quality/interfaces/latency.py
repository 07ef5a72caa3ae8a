"""Latency tracking interface for connection quality scoring."""

from abc import ABC, abstractmethod

from quality.telemetry import LatencyScore


class ILatencyTracker(ABC):
    """Tracks round-trip latency over a bounded rolling window."""

    @abstractmethod
    def record(self, sample_ms: float) -> None:
        """Record a round-trip latency sample.

        Args:
            sample_ms: Round-trip time in milliseconds

        Evicts the oldest sample once the window is full.
        """
        pass

    @abstractmethod
    def current_score(self) -> LatencyScore:
        """Get the current latency summary.

        Returns:
            LatencyScore with mean latency, jitter and quality score

        Logic:
            - latency score: 1 - mean/500, clamped to [0, 1]
            - jitter score: 1 - jitter/100, clamped to [0, 1]
            - quality score: average of the two (1.0 with no samples)
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Reset latency tracking (e.g., after reconnection)."""
        pass
