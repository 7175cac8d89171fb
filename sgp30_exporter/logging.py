"""Logging configuration for the SGP30 exporter."""

import logging
import sys

_configured = False

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def configure(level: int | str = logging.INFO) -> None:
    """Configure logging for the application.

    Safe to call multiple times - only configures once.
    """
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("sgp30_exporter")
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.addHandler(handler)

    # httpx logs every request at INFO, once a minute is just noise
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the 'sgp30_exporter' namespace.

    Args:
        name: Logger name (will be prefixed with 'sgp30_exporter.')

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(f"sgp30_exporter.{name}")
