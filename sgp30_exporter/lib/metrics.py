"""Prometheus instruments and exposition endpoint.

Instruments are created once against an explicit CollectorRegistry and
handed to the telemetry loop, so tests can build their own registry instead
of touching process-wide state.
"""

import platform
import time
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from threading import Thread
from wsgiref.simple_server import WSGIServer

from prometheus_client import (
    CollectorRegistry,
    Gauge,
    PlatformCollector,
    ProcessCollector,
    start_http_server,
)

from sgp30_exporter.lib.config import MetricName
from sgp30_exporter.logging import get_logger
from sgp30_exporter.sensor.models import CalibrationBaseline, Measurement

logger = get_logger("lib.metrics")


def package_version() -> str:
    try:
        return version("sgp30-exporter")
    except PackageNotFoundError:
        return "unknown"


@dataclass(frozen=True, slots=True)
class MetricInstruments:
    """Gauges updated by the telemetry loop."""

    co2eq: Gauge
    tvoc: Gauge
    last_updated: Gauge
    absolute_humidity: Gauge
    baseline_co2eq: Gauge
    baseline_tvoc: Gauge

    def publish_measurement(
        self, measurement: Measurement, timestamp: float | None = None
    ) -> None:
        self.co2eq.set(measurement.co2eq_ppm)
        self.tvoc.set(measurement.tvoc_ppb)
        self.last_updated.set(time.time() if timestamp is None else timestamp)

    def publish_baseline(self, baseline: CalibrationBaseline) -> None:
        self.baseline_co2eq.set(baseline.co2eq_baseline)
        self.baseline_tvoc.set(baseline.tvoc_baseline)


def create_instruments(
    registry: CollectorRegistry, *, process_metrics: bool = True
) -> MetricInstruments:
    """Register the exporter's gauges, build info and process collectors.

    Args:
        registry: Registry the exposition endpoint serves.
        process_metrics: Also register process_* and python_info collectors.
    """
    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)

    build_info = Gauge(
        MetricName.BUILD_INFO,
        "Build information of the SGP30 exporter",
        ["version", "python_version", "implementation"],
        registry=registry,
    )
    build_info.labels(
        version=package_version(),
        python_version=platform.python_version(),
        implementation=platform.python_implementation(),
    ).set(1)

    return MetricInstruments(
        co2eq=Gauge(
            MetricName.CO2EQ,
            "Equivalent CO2 concentration in parts per million",
            registry=registry,
        ),
        tvoc=Gauge(
            MetricName.TVOC,
            "Total volatile organic compounds in parts per billion",
            registry=registry,
        ),
        last_updated=Gauge(
            MetricName.LAST_UPDATED,
            "Unix time of the last successful SGP30 measurement",
            registry=registry,
        ),
        absolute_humidity=Gauge(
            MetricName.ABSOLUTE_HUMIDITY,
            "Absolute humidity in g/m^3 last used for SGP30 compensation",
            registry=registry,
        ),
        baseline_co2eq=Gauge(
            MetricName.BASELINE_CO2EQ,
            "Raw eCO2 IAQ baseline word of the last snapshot",
            registry=registry,
        ),
        baseline_tvoc=Gauge(
            MetricName.BASELINE_TVOC,
            "Raw TVOC IAQ baseline word of the last snapshot",
            registry=registry,
        ),
    )


class ExpositionServer:
    """The /metrics HTTP endpoint, served from a background thread."""

    def __init__(
        self, registry: CollectorRegistry, *, host: str = "0.0.0.0", port: int = 9185
    ) -> None:
        self._registry = registry
        self._host = host
        self._port = port
        self._server: WSGIServer | None = None
        self._thread: Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        """Bind and start serving.

        Raises:
            OSError: If the port cannot be bound.
        """
        self._server, self._thread = start_http_server(
            self._port, addr=self._host, registry=self._registry
        )
        logger.info("Serving metrics on %s:%d", self._host, self._port)

    def close(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        self._thread = None
        logger.info("Metrics endpoint closed")
