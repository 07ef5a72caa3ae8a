"""Logging configuration for the quality controller.

Each line carries the usual timestamp, level and logger, followed by the
controller's decision context when the record has one:

    2026-01-01T12:00:00 INFO quality.controller "Settings adjusted" | decision=reduce bitrate=1200000 max_fps=30
"""

import logging
import sys
from typing import Any

from quality.config import get_config

# Decision context attached via ``extra=``, rendered in this order
CONTEXT_FIELDS = ("decision", "bitrate", "max_fps", "quality_score", "latency_ms")


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(c.isspace() or c in '"=|' for c in text):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


class DecisionContextFormatter(logging.Formatter):
    """Formatter that appends the controller decision context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        head = " ".join(
            [
                self.formatTime(record, self.datefmt),
                record.levelname,
                record.name,
                _render_value(record.getMessage()),
            ]
        )

        context = [
            f"{field}={_render_value(getattr(record, field))}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        ]
        line = f"{head} | {' '.join(context)}" if context else head

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up handlers, formatters, and log levels based on configuration.
    """
    config = get_config()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, config.log_level))
    console_handler.setFormatter(DecisionContextFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(console_handler)

    # Library log levels
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger("quality").setLevel(getattr(logging, config.log_level))
