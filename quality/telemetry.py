"""Telemetry snapshots consumed and produced by the controller."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from quality.video_settings import VideoSettings


@dataclass(frozen=True)
class QualityStats:
    """Cumulative decode counters reported by the renderer."""

    decoded_frames: int
    dropped_frames: int


@dataclass(frozen=True)
class FrameRateStats:
    """Per-second averages over the renderer's own short window.

    Attributes:
        avg_input: Frames received per second
        avg_decoded: Frames decoded per second
        avg_dropped: Frames dropped per second
        avg_size: Average encoded frame size in bytes
    """

    avg_input: float
    avg_decoded: float
    avg_dropped: float
    avg_size: float


@dataclass(frozen=True)
class NetworkHint:
    """Best-effort environment network hint; either field may be unknown."""

    effective_type: Optional[str] = None
    downlink_mbps: Optional[float] = None


@dataclass(frozen=True)
class LatencyScore:
    """Rolling latency summary."""

    mean_latency_ms: float
    jitter_ms: float
    quality_score: float


@dataclass(frozen=True)
class NetworkInfo:
    """Network view recomputed on every tick."""

    effective_type: str
    downlink_mbps: float
    quality: float
    max_bitrate: int
    latency_ms: float
    ws_quality_score: float


@dataclass
class AppliedSnapshot:
    """State recorded the last time settings were applied."""

    decoded_frames: int = 0
    dropped_frames: int = 0
    timestamp: float = 0.0  # milliseconds since epoch, 0 = never applied
    bitrate: int = 0


class Decision(str, Enum):
    """What a controller tick did."""

    SKIPPED = "skipped"
    RATE_LIMITED = "rate_limited"
    BYPASS = "bypass"
    REDUCE = "reduce"
    RAISE = "raise"
    HOLD = "hold"
    ERROR = "error"


@dataclass(frozen=True)
class TickOutcome:
    """Result of a single controller tick.

    Attributes:
        decision: Branch taken by the tick
        settings: Settings emitted during the tick, None if nothing was sent
        quality_score: Composite quality score, None if not computed
    """

    decision: Decision
    settings: Optional[VideoSettings] = None
    quality_score: Optional[float] = None

    @property
    def emitted(self) -> bool:
        return self.settings is not None
