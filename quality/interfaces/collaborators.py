"""Interfaces of the external collaborators driven by the controller."""

from abc import ABC, abstractmethod
from typing import Optional

from quality.telemetry import FrameRateStats, NetworkHint, QualityStats
from quality.video_settings import VideoSettings


class IRenderer(ABC):
    """Video renderer reporting decode statistics."""

    @abstractmethod
    def get_quality_stats(self) -> Optional[QualityStats]:
        """Get cumulative decode counters.

        Returns:
            QualityStats, or None if no frames have been decoded yet
        """
        pass

    @abstractmethod
    def get_frames_stats(self) -> Optional[FrameRateStats]:
        """Get windowed per-second frame statistics.

        Returns:
            FrameRateStats, or None if the window is not populated yet
        """
        pass

    @abstractmethod
    def get_video_settings(self) -> VideoSettings:
        """Get the currently active encoder settings."""
        pass

    @abstractmethod
    def set_video_settings(
        self, settings: VideoSettings, apply_locally: bool, notify_remote: bool
    ) -> None:
        """Update the renderer's view of the target settings.

        Args:
            settings: New target settings
            apply_locally: Adjust local decode buffers/expectations
            notify_remote: Let the renderer propagate the change
        """
        pass


class ISettingsSink(ABC):
    """One-way command channel to the remote encoder."""

    @abstractmethod
    def send_new_video_setting(self, settings: VideoSettings) -> None:
        """Relay new settings to the remote encoder (fire-and-forget).

        Args:
            settings: New target settings
        """
        pass


class INetworkHintSource(ABC):
    """Environment-level network quality hint."""

    @abstractmethod
    def get_network_hint(self) -> Optional[NetworkHint]:
        """Get the latest network hint.

        Returns:
            NetworkHint, or None if the environment offers no hint
        """
        pass
