"""Adaptive quality controller for live low-latency video streams.

This package contains the closed-loop controller that turns renderer decode
statistics and control-channel latency into encoder settings, plus its
scheduling, configuration and service surface.
"""

from quality.config import QualityConfig, get_config
from quality.controller import QualityController
from quality.latency_tracker import LatencyTracker
from quality.metrics import ControllerMetrics
from quality.network_classifier import NetworkClassifier
from quality.presets import get_preset, list_presets
from quality.scheduler import OptimizationScheduler
from quality.telemetry import (
    Decision,
    FrameRateStats,
    NetworkHint,
    NetworkInfo,
    QualityStats,
    TickOutcome,
)
from quality.telemetry_hub import TelemetryHub
from quality.video_settings import VideoSettings

__version__ = "1.0.0"

__all__ = [
    # Core components
    "QualityController",
    "OptimizationScheduler",
    "LatencyTracker",
    "NetworkClassifier",
    "TelemetryHub",
    # Data structures
    "VideoSettings",
    "QualityStats",
    "FrameRateStats",
    "NetworkHint",
    "NetworkInfo",
    "TickOutcome",
    "Decision",
    # Configuration
    "QualityConfig",
    "get_config",
    "get_preset",
    "list_presets",
    # Metrics
    "ControllerMetrics",
]
