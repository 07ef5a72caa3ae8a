"""Unit tests for configuration loading and presets."""

import pytest
from pydantic import ValidationError

from quality.config import MAX_BITRATE, MIN_BITRATE, BypassProfile, QualityConfig
from quality.presets import get_preset, list_presets


class TestQualityConfig:
    """Environment-driven configuration."""

    def test_defaults(self):
        config = QualityConfig()

        assert config.tick_interval_ms == 2000
        assert config.min_apply_interval_ms == 1000
        assert config.min_bitrate == MIN_BITRATE
        assert config.max_bitrate == MAX_BITRATE
        assert (config.min_fps, config.max_fps) == (15, 60)
        assert config.latency_window == 10
        assert config.trusted_bypass_profile == BypassProfile()
        assert "*.local" in config.internal_domain_patterns

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("QUALITY_TICK_INTERVAL_MS", "3000")
        monkeypatch.setenv("QUALITY_ENDPOINT_URL", "http://10.0.0.2/")
        monkeypatch.setenv("QUALITY_INTERNAL_DOMAIN_PATTERNS", '["*.studio"]')

        config = QualityConfig()

        assert config.tick_interval_ms == 3000
        assert config.endpoint_url == "http://10.0.0.2/"
        assert config.internal_domain_patterns == ["*.studio"]

    @pytest.mark.parametrize("interval", [500, 6000])
    def test_tick_interval_range(self, interval):
        with pytest.raises(ValidationError):
            QualityConfig(tick_interval_ms=interval)

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError):
            QualityConfig(min_bitrate=2_000_000, max_bitrate=1_000_000)
        with pytest.raises(ValidationError):
            QualityConfig(min_fps=30, max_fps=20)

    def test_latency_window_capped(self):
        with pytest.raises(ValidationError):
            QualityConfig(latency_window=20)


class TestPresets:
    """Named controller tunings."""

    def test_standard_preset(self):
        config = get_preset("standard")

        assert config.tick_interval_ms == 2000
        assert config.trusted_bypass_profile.bitrate_fraction == 1.0
        assert config.trusted_bypass_profile.max_fps == 60

    def test_conservative_preset(self):
        config = get_preset("Conservative")

        assert config.tick_interval_ms == 5000
        assert config.trusted_bypass_profile == BypassProfile(
            bitrate_fraction=0.5, max_fps=30, i_frame_interval=10
        )

    def test_overrides_applied_on_top(self):
        config = get_preset("standard", tick_interval_ms=4000)

        assert config.tick_interval_ms == 4000

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Available presets"):
            get_preset("turbo")

    def test_list_presets(self):
        ids = [p["id"] for p in list_presets()]

        assert ids == ["standard", "conservative"]
