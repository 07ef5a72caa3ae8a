"""FastAPI service hosting the quality controller.

A remote renderer reports telemetry and latency over REST and polls for the
target settings the controller emits.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from quality.di_container import DIContainer, get_container
from quality.logging_config import setup_logging
from quality.presets import list_presets
from quality.telemetry import FrameRateStats, NetworkHint, QualityStats, TickOutcome
from quality.video_settings import VideoSettings

# Initialize logging
setup_logging()
logger = logging.getLogger(__name__)


class QualityStatsModel(BaseModel):
    decoded_frames: int = Field(ge=0)
    dropped_frames: int = Field(ge=0)


class FrameStatsModel(BaseModel):
    avg_input: float = Field(ge=0)
    avg_decoded: float = Field(ge=0)
    avg_dropped: float = Field(ge=0)
    avg_size: float = Field(ge=0)


class SettingsModel(BaseModel):
    bitrate: int = Field(ge=0)
    max_fps: int = Field(ge=1)
    i_frame_interval: int = Field(ge=1)
    extra: dict[str, Any] = Field(default_factory=dict)


class TelemetryReport(BaseModel):
    """Renderer statistics snapshot."""

    quality_stats: Optional[QualityStatsModel] = None
    frames_stats: Optional[FrameStatsModel] = None
    settings: Optional[SettingsModel] = None


class LatencyReport(BaseModel):
    latency_ms: float = Field(ge=0)


class NetworkHintReport(BaseModel):
    effective_type: Optional[str] = None
    downlink_mbps: Optional[float] = Field(default=None, ge=0)


def _outcome_json(outcome: TickOutcome) -> dict[str, Any]:
    return {
        "decision": outcome.decision.value,
        "settings": outcome.settings.to_json() if outcome.settings else None,
        "quality_score": outcome.quality_score,
    }


def create_app(container: Optional[DIContainer] = None) -> FastAPI:
    """Build the service application.

    Args:
        container: DI container (defaults to the global container)

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager (startup/shutdown)."""
        di = container or get_container()
        app.state.container = di
        app.state.startup_time = time.time()

        config = di.get_config()
        logger.info("=" * 60)
        logger.info("Starting quality controller service...")
        logger.info(f"Environment: {config.env}")
        logger.info(f"Endpoint: {config.endpoint_url or '(none)'}")

        await di.get_scheduler().start()
        logger.info("Quality controller ready!")
        logger.info("=" * 60)

        yield

        logger.info("Shutting down quality controller service...")
        await di.cleanup()
        logger.info("Quality controller stopped")

    app = FastAPI(
        title="Adaptive Quality Controller",
        version="1.0.0",
        description="Closed-loop encoder settings controller for live video streams",
        lifespan=lifespan,
    )

    @app.post("/api/telemetry")
    async def post_telemetry(report: TelemetryReport, request: Request) -> dict[str, str]:
        """Store a renderer statistics snapshot."""
        hub = request.app.state.container.get_telemetry_hub()
        hub.update_stats(
            QualityStats(**report.quality_stats.model_dump()) if report.quality_stats else None,
            FrameRateStats(**report.frames_stats.model_dump()) if report.frames_stats else None,
            VideoSettings.from_json(
                {**report.settings.extra, **report.settings.model_dump(exclude={"extra"})}
            )
            if report.settings
            else None,
        )
        return {"status": "accepted"}

    @app.post("/api/latency")
    async def post_latency(report: LatencyReport, request: Request) -> dict[str, Any]:
        """Record a control-channel round-trip sample."""
        container = request.app.state.container
        container.get_scheduler().push_latency_sample(report.latency_ms)
        score = container.get_latency_tracker().current_score()
        return {
            "mean_latency_ms": score.mean_latency_ms,
            "jitter_ms": score.jitter_ms,
            "quality_score": score.quality_score,
        }

    @app.post("/api/network-hint")
    async def post_network_hint(report: NetworkHintReport, request: Request) -> dict[str, str]:
        """Update the environment network hint."""
        hub = request.app.state.container.get_telemetry_hub()
        hub.update_network_hint(
            NetworkHint(effective_type=report.effective_type, downlink_mbps=report.downlink_mbps)
        )
        return {"status": "accepted"}

    @app.post("/api/reevaluate")
    async def post_reevaluate(request: Request) -> dict[str, Any]:
        """Re-evaluate immediately, e.g. after an orientation change."""
        outcome = request.app.state.container.get_scheduler().trigger_now()
        return _outcome_json(outcome)

    @app.get("/api/settings")
    async def get_settings(request: Request) -> dict[str, Any]:
        """Get the latest target settings."""
        hub = request.app.state.container.get_telemetry_hub()
        settings = hub.get_target_settings()
        if settings is None:
            raise HTTPException(status_code=404, detail="No settings emitted yet")
        return {"version": hub.settings_version, "settings": settings.to_json()}

    @app.get("/api/status")
    async def get_status(request: Request) -> dict[str, Any]:
        """Get controller status."""
        container = request.app.state.container
        return {
            "uptime_sec": time.time() - request.app.state.startup_time,
            "running": container.get_scheduler().is_running(),
            "controller": container.get_controller().get_state(),
            "timestamp": time.time(),
        }

    @app.get("/api/metrics")
    async def get_metrics(request: Request) -> dict[str, Any]:
        """Get controller metrics."""
        return request.app.state.container.get_metrics().get_snapshot()

    @app.get("/api/presets")
    async def get_presets() -> list[dict[str, str]]:
        """Get available controller presets."""
        return list_presets()

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "quality-controller"}

    return app


app = create_app()
