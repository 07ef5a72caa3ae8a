"""Shared fakes for controller tests."""

from typing import Optional

import pytest

from quality.config import QualityConfig
from quality.interfaces import INetworkHintSource, IRenderer, ISettingsSink
from quality.telemetry import FrameRateStats, NetworkHint, QualityStats
from quality.video_settings import VideoSettings


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRenderer(IRenderer):
    """Renderer with settable telemetry that records settings updates."""

    def __init__(self, settings: Optional[VideoSettings] = None):
        self.quality_stats: Optional[QualityStats] = None
        self.frames_stats: Optional[FrameRateStats] = None
        self.settings = settings or VideoSettings(
            bitrate=4_000_000, max_fps=30, i_frame_interval=10, extra={"codec": "h264"}
        )
        self.applied: list[tuple[VideoSettings, bool, bool]] = []

    def report(
        self,
        avg_input: float,
        avg_decoded: float,
        avg_dropped: float = 0.0,
        avg_size: float = 0.0,
    ) -> None:
        self.quality_stats = QualityStats(decoded_frames=1000, dropped_frames=10)
        self.frames_stats = FrameRateStats(
            avg_input=avg_input,
            avg_decoded=avg_decoded,
            avg_dropped=avg_dropped,
            avg_size=avg_size,
        )

    def get_quality_stats(self) -> Optional[QualityStats]:
        return self.quality_stats

    def get_frames_stats(self) -> Optional[FrameRateStats]:
        return self.frames_stats

    def get_video_settings(self) -> VideoSettings:
        return self.settings

    def set_video_settings(
        self, settings: VideoSettings, apply_locally: bool, notify_remote: bool
    ) -> None:
        self.applied.append((settings, apply_locally, notify_remote))
        if apply_locally:
            self.settings = settings


class RecordingSink(ISettingsSink):
    """Settings sink remembering every message."""

    def __init__(self) -> None:
        self.sent: list[VideoSettings] = []

    def send_new_video_setting(self, settings: VideoSettings) -> None:
        self.sent.append(settings)


class StaticHints(INetworkHintSource):
    def __init__(self, hint: Optional[NetworkHint] = None):
        self.hint = hint

    def get_network_hint(self) -> Optional[NetworkHint]:
        return self.hint


@pytest.fixture
def config() -> QualityConfig:
    return QualityConfig(env="test", endpoint_url="")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_controller(renderer, sink, config, clock):
    """Factory building a controller around the shared fakes."""
    from quality.controller import QualityController
    from quality.metrics import ControllerMetrics

    def _make(**kwargs) -> QualityController:
        kwargs.setdefault("renderer", renderer)
        kwargs.setdefault("sink", sink)
        kwargs.setdefault("config", config)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("metrics", ControllerMetrics())
        return QualityController(**kwargs)

    return _make


@pytest.fixture
def hints() -> StaticHints:
    return StaticHints()
