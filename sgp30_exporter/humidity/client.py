"""Scrape temperature and relative humidity from a peer metrics endpoint.

The peer exposes Prometheus text format with one sample per device, keyed
by a ``device`` label. Only the configured device's temperature (°C) and
humidity ratio (0-1) samples are used.
"""

from typing import Self

import httpx
from prometheus_client.parser import text_string_to_metric_families

from sgp30_exporter.humidity.models import HumiditySample
from sgp30_exporter.lib.config import get_settings
from sgp30_exporter.lib.exceptions import (
    MissingMetricError,
    ParseError,
    TransportError,
)
from sgp30_exporter.logging import get_logger

logger = get_logger("humidity.client")

DEVICE_LABEL = "device"


def parse_device_samples(body: str, device: str) -> dict[str, float]:
    """Map sample name to value for every sample labelled with ``device``.

    Raises:
        ParseError: If the body is not valid exposition text.
    """
    values: dict[str, float] = {}
    try:
        for family in text_string_to_metric_families(body):
            for sample in family.samples:
                if sample.labels.get(DEVICE_LABEL) == device:
                    values[sample.name] = float(sample.value)
    except (ValueError, IndexError, KeyError) as e:
        raise ParseError(f"Malformed metrics body: {e}") from e
    return values


class HumiditySourceClient:
    """Fetches a HumiditySample for one device from a metrics endpoint."""

    def __init__(
        self,
        url: str,
        device: str,
        *,
        temperature_metric: str = "ble_temperature_celsius",
        humidity_metric: str = "ble_humidity_ratio",
        timeout_sec: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._device = device
        self._temperature_metric = temperature_metric
        self._humidity_metric = humidity_metric
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_sec)

    @property
    def url(self) -> str:
        return self._url

    @property
    def device(self) -> str:
        return self._device

    async def fetch(self) -> HumiditySample:
        """Scrape the endpoint once.

        Raises:
            TransportError: The request failed or returned an error status.
            ParseError: The body is not valid exposition text, or the
                humidity ratio is outside [0, 1].
            MissingMetricError: A required sample is absent for the device.
        """
        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"GET {self._url} failed: {e}") from e

        values = parse_device_samples(response.text, self._device)

        for metric in (self._temperature_metric, self._humidity_metric):
            if metric not in values:
                raise MissingMetricError(metric, self._device)

        ratio = values[self._humidity_metric]
        if not 0.0 <= ratio <= 1.0:
            raise ParseError(
                f"{self._humidity_metric}={ratio} for device {self._device!r}"
                " is not a ratio in [0, 1]"
            )

        sample = HumiditySample(
            temperature_celsius=values[self._temperature_metric],
            relative_humidity_percent=ratio * 100,
        )
        logger.debug("Fetched %s for %s", sample, self._device)
        return sample

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()


def create_humidity_client() -> HumiditySourceClient:
    """Create the humidity source client from configuration."""
    cfg = get_settings().humidity
    return HumiditySourceClient(
        cfg.url,
        cfg.device,
        temperature_metric=cfg.temperature_metric,
        humidity_metric=cfg.humidity_metric,
        timeout_sec=cfg.timeout_sec,
    )
