"""Custom exceptions for the SGP30 exporter.

Provides a hierarchy of domain-specific exceptions so that per-tick failures
can be told apart from startup failures, and logged with the operation that
raised them.
"""


class Sgp30ExporterError(Exception):
    """Base exception for all application errors."""


class StartupError(Sgp30ExporterError):
    """Raised when the daemon cannot reach its telemetry loop."""


class SensorError(Sgp30ExporterError):
    """Raised when a transaction with the SGP30 fails."""

    def __init__(self, operation: str, reason: object = None) -> None:
        self.operation = operation
        self.reason = reason
        message = f"SGP30 {operation} failed"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class SensorNotInitializedError(SensorError):
    """Raised when the sensor is used before its IAQ algorithm is initialized."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, "sensor not initialized")


class FetchError(Sgp30ExporterError):
    """Base exception for humidity source failures."""


class TransportError(FetchError):
    """Raised when the humidity source request or transfer fails."""


class ParseError(FetchError):
    """Raised when the humidity source body is not valid exposition text."""


class MissingMetricError(FetchError):
    """Raised when a required sample is absent for the configured device."""

    def __init__(self, metric: str, device: str) -> None:
        self.metric = metric
        self.device = device
        super().__init__(f"No {metric!r} sample for device {device!r}")


class CompensationError(Sgp30ExporterError):
    """Raised when a humidity sample cannot be converted for the sensor."""
