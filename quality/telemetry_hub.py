"""In-memory telemetry hub for renderers reporting over the service API.

Holds the latest statistics and settings pushed by a remote renderer and acts
as the controller's renderer, settings sink and network hint source.
"""

import logging
import threading
from typing import Optional

from quality.interfaces.collaborators import (
    INetworkHintSource,
    IRenderer,
    ISettingsSink,
)
from quality.telemetry import FrameRateStats, NetworkHint, QualityStats
from quality.video_settings import VideoSettings

logger = logging.getLogger(__name__)


class TelemetryHub(IRenderer, ISettingsSink, INetworkHintSource):
    """Latest-value store bridging a remote renderer and the controller."""

    def __init__(self, initial_settings: VideoSettings):
        """Initialize telemetry hub.

        Args:
            initial_settings: Settings assumed active until the renderer reports
        """
        self._lock = threading.Lock()
        self._quality_stats: Optional[QualityStats] = None
        self._frames_stats: Optional[FrameRateStats] = None
        self._active_settings = initial_settings
        self._target_settings: Optional[VideoSettings] = None
        self._network_hint: Optional[NetworkHint] = None
        self.settings_version = 0

    def update_stats(
        self,
        quality_stats: Optional[QualityStats],
        frames_stats: Optional[FrameRateStats],
        active_settings: Optional[VideoSettings] = None,
    ) -> None:
        """Store a telemetry report from the renderer.

        Args:
            quality_stats: Cumulative decode counters
            frames_stats: Windowed frame statistics
            active_settings: Settings the renderer currently runs with
        """
        with self._lock:
            self._quality_stats = quality_stats
            self._frames_stats = frames_stats
            if active_settings is not None:
                self._active_settings = active_settings

    def update_network_hint(self, hint: Optional[NetworkHint]) -> None:
        with self._lock:
            self._network_hint = hint

    def get_target_settings(self) -> Optional[VideoSettings]:
        """Latest settings emitted by the controller, None before the first."""
        with self._lock:
            return self._target_settings

    # IRenderer

    def get_quality_stats(self) -> Optional[QualityStats]:
        with self._lock:
            return self._quality_stats

    def get_frames_stats(self) -> Optional[FrameRateStats]:
        with self._lock:
            return self._frames_stats

    def get_video_settings(self) -> VideoSettings:
        with self._lock:
            return self._active_settings

    def set_video_settings(
        self, settings: VideoSettings, apply_locally: bool, notify_remote: bool
    ) -> None:
        with self._lock:
            if apply_locally:
                self._active_settings = settings

    # ISettingsSink

    def send_new_video_setting(self, settings: VideoSettings) -> None:
        with self._lock:
            self._target_settings = settings
            self.settings_version += 1
        logger.debug(f"Target settings updated (version {self.settings_version})")

    # INetworkHintSource

    def get_network_hint(self) -> Optional[NetworkHint]:
        with self._lock:
            return self._network_hint
