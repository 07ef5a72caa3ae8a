"""Custom exceptions for the quality controller."""


class QualityError(Exception):
    """Base exception for all quality controller errors."""

    pass


class TelemetryError(QualityError):
    """Error reading renderer or network telemetry."""

    pass


class DecisionError(QualityError):
    """Error while computing new target settings."""

    pass


class EmissionError(QualityError):
    """Error pushing settings to the sink or renderer."""

    pass


class ConfigurationError(QualityError):
    """Error in controller configuration."""

    pass
