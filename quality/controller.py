"""Adaptive quality controller.

Combines renderer decode statistics, control-channel latency and the network
hint into a single quality score each tick, then decides whether to reduce,
raise or hold the encoder settings. Reductions are fast, increases are slow
and gated on explicit bandwidth headroom.
"""

import logging
import math
import threading
import time
from dataclasses import asdict
from typing import Any, Callable, Optional

from quality.config import QualityConfig
from quality.exceptions import DecisionError, EmissionError, TelemetryError
from quality.interfaces.collaborators import (
    INetworkHintSource,
    IRenderer,
    ISettingsSink,
)
from quality.interfaces.latency import ILatencyTracker
from quality.latency_tracker import LatencyTracker, latency_score
from quality.metrics import ControllerMetrics
from quality.network_classifier import NetworkClassifier
from quality.telemetry import (
    AppliedSnapshot,
    Decision,
    FrameRateStats,
    NetworkInfo,
    TickOutcome,
)
from quality.video_settings import VideoSettings

logger = logging.getLogger(__name__)

# Decision thresholds on the composite quality score
DEGRADED_THRESHOLD = 0.4
HEALTHY_THRESHOLD = 0.8

# Reduction never cuts bitrate below this fraction in one step
MIN_REDUCTION_FACTOR = 0.3
FPS_STEP_DOWN = 5
FPS_STEP_UP = 2
BITRATE_STEP_UP = 1.1
# Raises require more than this fraction of the current bitrate as headroom
HEADROOM_MARGIN = 0.2
# Raises never target more than this fraction of the bitrate ceiling
CEILING_FRACTION = 0.9


def compute_quality_score(frames: FrameRateStats, mean_latency_ms: float) -> float:
    """Composite quality score from frame delivery, drops and latency.

    Each factor applies only when its inputs are meaningful. Delivery ratio and
    drop ratio share ``avg_input`` as denominator, so dropped frames count
    against the score twice.

    Args:
        frames: Windowed frame statistics
        mean_latency_ms: Mean round-trip latency, 0 if unknown

    Returns:
        Product of the applicable factors
    """
    score = 1.0

    dropped_rate = frames.avg_dropped / frames.avg_input if frames.avg_input > 0 else 0.0

    if frames.avg_input > 0:
        score *= frames.avg_decoded / frames.avg_input

    if dropped_rate > 0:
        score *= 1 - dropped_rate

    if mean_latency_ms > 0:
        score *= latency_score(mean_latency_ms)

    return score


def compute_i_frame_interval(max_fps: int, mean_latency_ms: float) -> int:
    """Keyframe interval shrinking as latency grows."""
    latency_factor = max(1.0, mean_latency_ms / 100)
    return max(1, math.floor(max_fps / (4 * latency_factor)))


class QualityController:
    """Closed-loop encoder settings controller.

    All collaborators are injected; the controller keeps no global state.
    """

    def __init__(
        self,
        renderer: IRenderer,
        sink: ISettingsSink,
        config: QualityConfig,
        network_hints: Optional[INetworkHintSource] = None,
        latency_tracker: Optional[ILatencyTracker] = None,
        classifier: Optional[NetworkClassifier] = None,
        metrics: Optional[ControllerMetrics] = None,
        endpoint_url: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize quality controller.

        Args:
            renderer: Renderer providing stats and receiving new settings
            sink: Control channel relaying settings to the remote encoder
            config: Controller configuration
            network_hints: Optional environment network hint source
            latency_tracker: Latency window (defaults to a new LatencyTracker)
            classifier: Network classifier (built from config by default)
            metrics: Optional metrics collector
            endpoint_url: Stream endpoint URL, used for trust classification
            clock: Wall-clock source in seconds
        """
        self.renderer = renderer
        self.sink = sink
        self.config = config
        self.network_hints = network_hints
        self.latency_tracker = latency_tracker or LatencyTracker(config.latency_window)
        self.classifier = classifier or NetworkClassifier(
            max_bitrate=config.max_bitrate,
            internal_domain_patterns=config.internal_domain_patterns,
        )
        self.metrics = metrics
        self.endpoint_url = endpoint_url if endpoint_url is not None else config.endpoint_url
        self._clock = clock

        self._lock = threading.RLock()
        self._latency_ms = 0.0
        self._ws_quality_score = 1.0
        self._last_applied = AppliedSnapshot()
        self._pending_override = False
        self._last_outcome: Optional[TickOutcome] = None

        logger.info(
            f"Quality controller initialized "
            f"(bitrate {config.min_bitrate}-{config.max_bitrate}, "
            f"fps {config.min_fps}-{config.max_fps})"
        )

    # Inputs

    def record_latency(self, sample_ms: float) -> None:
        """Feed a control-channel round-trip sample.

        Args:
            sample_ms: Round-trip time in milliseconds
        """
        self.latency_tracker.record(sample_ms)
        score = self.latency_tracker.current_score()
        with self._lock:
            self._latency_ms = score.mean_latency_ms
            self._ws_quality_score = score.quality_score
        if self.metrics:
            self.metrics.record_latency(sample_ms)

    def request_override(self) -> None:
        """Let the next tick bypass the minimum-interval gate."""
        with self._lock:
            self._pending_override = True
        logger.debug("Immediate re-evaluation requested")

    def is_trusted_endpoint(self) -> bool:
        """Check whether the current endpoint is trusted/local."""
        return self.classifier.is_trusted_endpoint(self.endpoint_url)

    def reset(self) -> None:
        """Discard all session state."""
        with self._lock:
            self.latency_tracker.reset()
            self._latency_ms = 0.0
            self._ws_quality_score = 1.0
            self._last_applied = AppliedSnapshot()
            self._pending_override = False
            self._last_outcome = None
        logger.info("Controller state reset")

    # Tick

    def tick(self) -> TickOutcome:
        """Run one evaluation of the control loop.

        Never raises: failures are logged and reported as Decision.ERROR.

        Returns:
            TickOutcome describing the decision and any emitted settings
        """
        started = time.perf_counter()
        with self._lock:
            try:
                outcome = self._evaluate()
            except Exception as e:
                logger.warning(f"Error during quality optimization: {e}", exc_info=True)
                outcome = TickOutcome(Decision.ERROR)

            self._last_outcome = outcome

        if self.metrics:
            self.metrics.record_outcome(outcome, (time.perf_counter() - started) * 1000.0)
        return outcome

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _evaluate(self) -> TickOutcome:
        if self._last_applied.timestamp == 0 and self.is_trusted_endpoint():
            return self._apply_trusted_profile()

        try:
            stats = self.renderer.get_quality_stats()
            frames = self.renderer.get_frames_stats()
        except Exception as e:
            raise TelemetryError(f"Failed to read renderer stats: {e}") from e

        if stats is None or frames is None:
            logger.debug("No quality stats available, skipping tick")
            return TickOutcome(Decision.SKIPPED)

        now = self._now_ms()
        if not self._pending_override and now - self._last_applied.timestamp < self.config.min_apply_interval_ms:
            return TickOutcome(Decision.RATE_LIMITED)
        self._pending_override = False

        dropped_rate = frames.avg_dropped / frames.avg_input if frames.avg_input > 0 else 0.0
        network = self._network_info()
        current = self.renderer.get_video_settings()
        bitrate, max_fps = current.bitrate, current.max_fps

        quality_score = compute_quality_score(frames, network.latency_ms)
        if math.isnan(quality_score):
            raise DecisionError("Quality score is NaN")

        if quality_score < DEGRADED_THRESHOLD:
            decision = Decision.REDUCE
            reduction_factor = max(MIN_REDUCTION_FACTOR, quality_score)
            bitrate = max(self.config.min_bitrate, math.floor(bitrate * reduction_factor))
            max_fps = max(self.config.min_fps, max_fps - FPS_STEP_DOWN)
            logger.info(f"Reducing quality, score: {quality_score:.2f}")
        elif quality_score > HEALTHY_THRESHOLD and frames.avg_size > 0:
            bandwidth_utilization = frames.avg_size * 8  # bits per second
            headroom = network.max_bitrate - bandwidth_utilization
            if headroom > bitrate * HEADROOM_MARGIN:
                decision = Decision.RAISE
                bitrate = math.floor(
                    min(network.max_bitrate * CEILING_FRACTION, bitrate * BITRATE_STEP_UP)
                )
                max_fps = min(self.config.max_fps, max_fps + FPS_STEP_UP)
                logger.info(f"Increasing quality, score: {quality_score:.2f}")
            else:
                decision = Decision.HOLD
        else:
            decision = Decision.HOLD

        if decision is Decision.HOLD:
            return TickOutcome(Decision.HOLD, quality_score=quality_score)

        bitrate = self._clamp_bitrate(bitrate)
        max_fps = self._clamp_fps(max_fps)

        if bitrate == current.bitrate and max_fps == current.max_fps:
            return TickOutcome(Decision.HOLD, quality_score=quality_score)

        new_settings = current.replace(
            bitrate=bitrate,
            max_fps=max_fps,
            i_frame_interval=compute_i_frame_interval(max_fps, network.latency_ms),
        )
        self._emit(new_settings)
        self._last_applied = AppliedSnapshot(
            decoded_frames=stats.decoded_frames,
            dropped_frames=stats.dropped_frames,
            timestamp=now,
            bitrate=bitrate,
        )

        logger.info(
            f"Settings adjusted: {round(bitrate / 1024)}kbps @ {max_fps}fps "
            f"(drops {round(dropped_rate * 100)}%, network {network.effective_type}, "
            f"quality {network.quality:.2f}, rtt {round(network.latency_ms)}ms, "
            f"ws score {network.ws_quality_score:.2f})",
            extra={
                "decision": decision.value,
                "bitrate": bitrate,
                "max_fps": max_fps,
                "quality_score": round(quality_score, 3),
                "latency_ms": round(network.latency_ms, 1),
            },
        )

        return TickOutcome(decision, settings=new_settings, quality_score=quality_score)

    def _apply_trusted_profile(self) -> TickOutcome:
        profile = self.config.trusted_bypass_profile
        current = self.renderer.get_video_settings()

        bitrate = self._clamp_bitrate(math.floor(self.config.max_bitrate * profile.bitrate_fraction))
        max_fps = self._clamp_fps(profile.max_fps)
        new_settings = current.replace(
            bitrate=bitrate,
            max_fps=max_fps,
            i_frame_interval=max(1, profile.i_frame_interval),
        )

        logger.info(
            "Trusted endpoint detected, applying bypass profile",
            extra={"decision": Decision.BYPASS.value, "bitrate": bitrate, "max_fps": max_fps},
        )
        self._emit(new_settings)

        self._ws_quality_score = 1.0
        self._last_applied.timestamp = self._now_ms()
        self._last_applied.bitrate = bitrate

        return TickOutcome(Decision.BYPASS, settings=new_settings, quality_score=1.0)

    def _network_info(self) -> NetworkInfo:
        hint = self.network_hints.get_network_hint() if self.network_hints else None
        return self.classifier.classify(
            effective_type=hint.effective_type if hint else None,
            downlink_mbps=hint.downlink_mbps if hint else None,
            ws_quality_score=self._ws_quality_score,
            latency_ms=self._latency_ms,
        )

    def _emit(self, settings: VideoSettings) -> None:
        try:
            self.sink.send_new_video_setting(settings)
            self.renderer.set_video_settings(settings, apply_locally=True, notify_remote=True)
        except Exception as e:
            raise EmissionError(f"Failed to emit settings: {e}") from e

    def _clamp_bitrate(self, bitrate: float) -> int:
        return int(min(self.config.max_bitrate, max(self.config.min_bitrate, bitrate)))

    def _clamp_fps(self, max_fps: float) -> int:
        return int(min(self.config.max_fps, max(self.config.min_fps, max_fps)))

    # Introspection

    def get_state(self) -> dict[str, Any]:
        """Get a snapshot of the controller state.

        Returns:
            Dictionary with latency, scores, last-applied snapshot and the
            last tick outcome
        """
        with self._lock:
            latency = self.latency_tracker.current_score()
            outcome = self._last_outcome
            return {
                "endpoint_trusted": self.is_trusted_endpoint(),
                "latency_ms": self._latency_ms,
                "jitter_ms": latency.jitter_ms,
                "ws_quality_score": self._ws_quality_score,
                "pending_override": self._pending_override,
                "last_applied": asdict(self._last_applied),
                "last_decision": outcome.decision.value if outcome else None,
                "last_quality_score": outcome.quality_score if outcome else None,
            }
