"""Dependency injection container for quality controller components.

Provides centralized management of service instances with proper lifecycle
and dependency resolution.
"""

import logging
from typing import Any, Optional

from quality.config import QualityConfig, get_config
from quality.controller import QualityController
from quality.latency_tracker import LatencyTracker
from quality.metrics import ControllerMetrics
from quality.network_classifier import NetworkClassifier
from quality.scheduler import OptimizationScheduler
from quality.telemetry_hub import TelemetryHub
from quality.video_settings import VideoSettings

logger = logging.getLogger(__name__)


class DIContainer:
    """Dependency injection container for controller components."""

    def __init__(self, config: Optional[QualityConfig] = None) -> None:
        """Initialize DI container.

        Args:
            config: Configuration (defaults to the environment-loaded singleton)
        """
        self._config = config or get_config()
        self._instances: dict[str, Any] = {}

        logger.info("DI container initialized")

    def get_config(self) -> QualityConfig:
        """Get configuration instance."""
        return self._config

    def get_telemetry_hub(self) -> TelemetryHub:
        """Get or create telemetry hub instance."""
        if "telemetry_hub" not in self._instances:
            initial = VideoSettings(
                bitrate=self._config.max_bitrate,
                max_fps=self._config.max_fps,
                i_frame_interval=10,
            )
            self._instances["telemetry_hub"] = TelemetryHub(initial)
        return self._instances["telemetry_hub"]

    def get_latency_tracker(self) -> LatencyTracker:
        """Get or create latency tracker instance."""
        if "latency_tracker" not in self._instances:
            self._instances["latency_tracker"] = LatencyTracker(
                window_size=self._config.latency_window
            )
        return self._instances["latency_tracker"]

    def get_network_classifier(self) -> NetworkClassifier:
        """Get or create network classifier instance."""
        if "network_classifier" not in self._instances:
            self._instances["network_classifier"] = NetworkClassifier(
                max_bitrate=self._config.max_bitrate,
                internal_domain_patterns=self._config.internal_domain_patterns,
            )
        return self._instances["network_classifier"]

    def get_metrics(self) -> ControllerMetrics:
        """Get or create metrics collector instance."""
        if "metrics" not in self._instances:
            self._instances["metrics"] = ControllerMetrics()
        return self._instances["metrics"]

    def get_controller(self) -> QualityController:
        """Get or create quality controller instance."""
        if "controller" not in self._instances:
            hub = self.get_telemetry_hub()
            self._instances["controller"] = QualityController(
                renderer=hub,
                sink=hub,
                config=self._config,
                network_hints=hub,
                latency_tracker=self.get_latency_tracker(),
                classifier=self.get_network_classifier(),
                metrics=self.get_metrics(),
            )
        return self._instances["controller"]

    def get_scheduler(self) -> OptimizationScheduler:
        """Get or create scheduler instance."""
        if "scheduler" not in self._instances:
            self._instances["scheduler"] = OptimizationScheduler(self.get_controller())
        return self._instances["scheduler"]

    async def cleanup(self) -> None:
        """Stop the control loop and clear all managed instances."""
        logger.info("Cleaning up DI container")

        if "scheduler" in self._instances:
            try:
                await self._instances["scheduler"].stop()
            except Exception as e:
                logger.error(f"Error stopping scheduler: {e}")

        self._instances.clear()
        logger.info("DI container cleaned up")


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get the global DI container instance.

    Returns:
        DIContainer singleton
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def cleanup_container() -> None:
    """Clean up the global DI container."""
    global _container
    if _container is not None:
        await _container.cleanup()
        _container = None
