"""Periodic driver for the quality controller.

Runs one evaluation immediately on start, then ticks the controller on a
fixed interval from an asyncio task. Trusted endpoints get the one-shot
bypass only and no periodic polling, except that a failed bypass is retried
on each tick until it goes through.
"""

import asyncio
import logging
from typing import Optional

from quality.controller import QualityController
from quality.exceptions import ConfigurationError
from quality.telemetry import Decision, TickOutcome

logger = logging.getLogger(__name__)


class OptimizationScheduler:
    """Owns the start/stop lifecycle of the control loop."""

    def __init__(self, controller: QualityController, interval_ms: Optional[int] = None):
        """Initialize scheduler.

        Args:
            controller: Controller to drive
            interval_ms: Tick period (defaults to config.tick_interval_ms)
        """
        self.controller = controller
        self.interval_ms = interval_ms or controller.config.tick_interval_ms
        if self.interval_ms <= 0:
            raise ConfigurationError(f"Tick interval must be positive, got {self.interval_ms}ms")

        self._running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start the control loop.

        Evaluates once synchronously, then arms the periodic tick unless the
        endpoint is trusted and its bypass profile was applied. Calling
        start() while running is a no-op.
        """
        if self._running:
            logger.debug("Scheduler already running")
            return

        self._running = True
        logger.info(f"Starting quality optimization (interval {self.interval_ms}ms)")

        outcome = self.controller.tick()

        if self.controller.is_trusted_endpoint():
            if outcome.decision is not Decision.ERROR:
                logger.info("Trusted endpoint, periodic optimization disabled")
                return
            logger.warning("Trusted bypass profile not applied, retrying every tick until it is")

        self._task = asyncio.create_task(self._run_loop())

    async def _run_loop(self) -> None:
        """Internal tick loop."""
        try:
            while self._running:
                await asyncio.sleep(self.interval_ms / 1000.0)
                if not self._running:
                    break
                outcome = self.controller.tick()
                if outcome.decision is Decision.BYPASS:
                    logger.info("Trusted bypass profile applied, periodic optimization disabled")
                    break
        except asyncio.CancelledError:
            logger.debug("Optimization loop cancelled")
            raise

    async def stop(self) -> None:
        """Stop the control loop and discard controller state. Idempotent."""
        if not self._running:
            return

        logger.info("Stopping quality optimization")
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.controller.reset()

    def push_latency_sample(self, latency_ms: float) -> None:
        """Forward a control-channel round-trip sample to the controller."""
        self.controller.record_latency(latency_ms)

    def request_immediate_reevaluation(self) -> None:
        """Bypass the minimum-interval gate on the next tick.

        Used after a display or orientation change.
        """
        self.controller.request_override()

    def trigger_now(self) -> TickOutcome:
        """Request an override and evaluate immediately.

        Returns:
            Outcome of the triggered tick
        """
        self.controller.request_override()
        return self.controller.tick()

    def is_running(self) -> bool:
        """Check if the control loop is running.

        Returns:
            True if running, False otherwise
        """
        return self._running
