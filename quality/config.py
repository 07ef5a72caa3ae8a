"""Configuration management for the quality controller.

Loads and validates environment variables using Pydantic settings.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_BITRATE = 22 * 1024 * 1024  # 22 Mbps
MIN_BITRATE = 500 * 1024  # 500 Kbps
MAX_FPS = 60
MIN_FPS = 15


class BypassProfile(BaseModel):
    """Fixed settings applied once to trusted/local endpoints."""

    bitrate_fraction: float = Field(default=1.0, gt=0.0, le=1.0)
    max_fps: int = Field(default=60, ge=1)
    i_frame_interval: int = Field(default=60, ge=1)


class QualityConfig(BaseSettings):
    """Quality controller configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Service settings
    env: Literal["development", "production", "test"] = Field(
        default="development", alias="QUALITY_ENV"
    )
    host: str = Field(default="0.0.0.0", alias="QUALITY_HOST")
    port: int = Field(default=8000, alias="QUALITY_PORT", ge=1024, le=65535)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", alias="QUALITY_LOG_LEVEL"
    )

    # Control loop timing
    tick_interval_ms: int = Field(
        default=2000, alias="QUALITY_TICK_INTERVAL_MS", ge=1000, le=5000
    )
    min_apply_interval_ms: int = Field(
        default=1000, alias="QUALITY_MIN_APPLY_INTERVAL_MS", ge=0
    )

    # Encoder bounds
    min_bitrate: int = Field(default=MIN_BITRATE, alias="QUALITY_MIN_BITRATE", ge=0)
    max_bitrate: int = Field(default=MAX_BITRATE, alias="QUALITY_MAX_BITRATE", gt=0)
    min_fps: int = Field(default=MIN_FPS, alias="QUALITY_MIN_FPS", ge=1)
    max_fps: int = Field(default=MAX_FPS, alias="QUALITY_MAX_FPS", ge=1)

    # Latency tracking
    latency_window: int = Field(default=10, alias="QUALITY_LATENCY_WINDOW", ge=1, le=10)

    # Trusted endpoint policy
    trusted_bypass_profile: BypassProfile = Field(
        default_factory=BypassProfile, alias="QUALITY_TRUSTED_BYPASS_PROFILE"
    )
    internal_domain_patterns: list[str] = Field(
        default_factory=lambda: ["*.local", "*.lan", "*.internal", "*.home.arpa"],
        alias="QUALITY_INTERNAL_DOMAIN_PATTERNS",
    )
    endpoint_url: str = Field(default="", alias="QUALITY_ENDPOINT_URL")

    @model_validator(mode="after")
    def validate_bounds(self) -> "QualityConfig":
        """Reject inverted bitrate/fps ranges."""
        if self.min_bitrate > self.max_bitrate:
            raise ValueError(
                f"min_bitrate ({self.min_bitrate}) exceeds max_bitrate ({self.max_bitrate})"
            )
        if self.min_fps > self.max_fps:
            raise ValueError(
                f"min_fps ({self.min_fps}) exceeds max_fps ({self.max_fps})"
            )
        return self


# Singleton configuration instance
_config: QualityConfig | None = None


def get_config() -> QualityConfig:
    """Get the global configuration instance.

    Returns:
        QualityConfig: Configuration singleton
    """
    global _config
    if _config is None:
        _config = QualityConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
