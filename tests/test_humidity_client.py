"""Tests for the humidity source scrape client."""

import httpx
import pytest

from sgp30_exporter.humidity.client import (
    HumiditySourceClient,
    create_humidity_client,
    parse_device_samples,
)
from sgp30_exporter.humidity.models import HumiditySample
from sgp30_exporter.lib.config import Settings
from sgp30_exporter.lib.exceptions import (
    FetchError,
    MissingMetricError,
    ParseError,
    TransportError,
)

URL = "http://peer.local:9102/metrics"
DEVICE = "A4:C1:38:11:22:33"
OTHER = "A4:C1:38:99:88:77"

TWO_DEVICES = f"""\
# HELP ble_temperature_celsius Temperature reported by the thermometer
# TYPE ble_temperature_celsius gauge
ble_temperature_celsius{{device="{OTHER}"}} 30.0
ble_temperature_celsius{{device="{DEVICE}"}} 22.5
# HELP ble_humidity_ratio Relative humidity between 0 and 1
# TYPE ble_humidity_ratio gauge
ble_humidity_ratio{{device="{OTHER}"}} 0.8
ble_humidity_ratio{{device="{DEVICE}"}} 0.45
# HELP ble_battery_ratio Battery level
# TYPE ble_battery_ratio gauge
ble_battery_ratio{{device="{DEVICE}"}} 0.91
"""

MISSING_HUMIDITY = f"""\
# TYPE ble_temperature_celsius gauge
ble_temperature_celsius{{device="{DEVICE}"}} 22.5
# TYPE ble_humidity_ratio gauge
ble_humidity_ratio{{device="{OTHER}"}} 0.8
"""


def make_client(handler) -> HumiditySourceClient:
    transport = httpx.MockTransport(handler)
    return HumiditySourceClient(
        URL, DEVICE, client=httpx.AsyncClient(transport=transport)
    )


def respond_with(body: str, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == URL
        return httpx.Response(status_code, text=body)

    return handler


class TestParseDeviceSamples:
    """Tests for label filtering of the scrape body."""

    def test_filters_by_device(self):
        values = parse_device_samples(TWO_DEVICES, DEVICE)
        assert values == {
            "ble_temperature_celsius": 22.5,
            "ble_humidity_ratio": 0.45,
            "ble_battery_ratio": 0.91,
        }

    def test_unknown_device(self):
        assert parse_device_samples(TWO_DEVICES, "00:00:00:00:00:00") == {}

    def test_samples_without_device_label_are_ignored(self):
        body = "ble_temperature_celsius 21.0\n"
        assert parse_device_samples(body, DEVICE) == {}

    def test_malformed_body(self):
        with pytest.raises(ParseError):
            parse_device_samples('ble_temperature_celsius{device="x"} not-a-number\n', "x")


class TestFetch:
    """Tests for HumiditySourceClient.fetch."""

    @pytest.mark.asyncio
    async def test_uses_configured_device_only(self):
        async with make_client(respond_with(TWO_DEVICES)) as client:
            sample = await client.fetch()
        assert sample == HumiditySample(
            temperature_celsius=22.5, relative_humidity_percent=45.0
        )

    @pytest.mark.asyncio
    async def test_missing_humidity_ratio(self):
        async with make_client(respond_with(MISSING_HUMIDITY)) as client:
            with pytest.raises(MissingMetricError) as exc:
                await client.fetch()
        assert exc.value.metric == "ble_humidity_ratio"
        assert exc.value.device == DEVICE

    @pytest.mark.asyncio
    async def test_missing_temperature(self):
        body = f'ble_humidity_ratio{{device="{DEVICE}"}} 0.5\n'
        async with make_client(respond_with(body)) as client:
            with pytest.raises(MissingMetricError, match="ble_temperature_celsius"):
                await client.fetch()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ratio", ["1.3", "-0.01", "NaN"])
    async def test_ratio_outside_unit_interval(self, ratio):
        body = (
            f'ble_temperature_celsius{{device="{DEVICE}"}} 22.5\n'
            f'ble_humidity_ratio{{device="{DEVICE}"}} {ratio}\n'
        )
        async with make_client(respond_with(body)) as client:
            with pytest.raises(ParseError, match="not a ratio"):
                await client.fetch()

    @pytest.mark.asyncio
    async def test_ratio_bounds_are_accepted(self):
        body = (
            f'ble_temperature_celsius{{device="{DEVICE}"}} 22.5\n'
            f'ble_humidity_ratio{{device="{DEVICE}"}} 1\n'
        )
        async with make_client(respond_with(body)) as client:
            sample = await client.fetch()
        assert sample.relative_humidity_percent == 100.0

    @pytest.mark.asyncio
    async def test_custom_metric_names(self):
        body = (
            f'sensor_temp{{device="{DEVICE}"}} 19.0\n'
            f'sensor_rh{{device="{DEVICE}"}} 0.5\n'
        )
        transport = httpx.MockTransport(respond_with(body))
        client = HumiditySourceClient(
            URL,
            DEVICE,
            temperature_metric="sensor_temp",
            humidity_metric="sensor_rh",
            client=httpx.AsyncClient(transport=transport),
        )
        sample = await client.fetch()
        assert sample.temperature_celsius == 19.0
        assert sample.relative_humidity_percent == 50.0

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        body = f'ble_temperature_celsius{{device="{DEVICE}"}} twenty-two\n'
        async with make_client(respond_with(body)) as client:
            with pytest.raises(ParseError):
                await client.fetch()

    @pytest.mark.asyncio
    async def test_error_status(self):
        async with make_client(respond_with("oops", status_code=503)) as client:
            with pytest.raises(TransportError, match="503"):
                await client.fetch()

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(TransportError, match="Connection refused"):
                await client.fetch()

    @pytest.mark.asyncio
    async def test_all_failures_are_fetch_errors(self):
        for handler in (respond_with("", 500), respond_with(MISSING_HUMIDITY)):
            async with make_client(handler) as client:
                with pytest.raises(FetchError):
                    await client.fetch()


class TestCreateHumidityClient:
    """Tests for building the client from settings."""

    @pytest.mark.asyncio
    async def test_from_settings(self, use_settings):
        use_settings(
            Settings(
                humidity_url=URL,
                humidity_mac=DEVICE,
                humidity_temperature_metric="t",
                humidity_ratio_metric="rh",
                humidity_timeout_sec=2.0,
            )
        )
        client = create_humidity_client()
        try:
            assert client.url == URL
            assert client.device == DEVICE
            assert client._temperature_metric == "t"
            assert client._humidity_metric == "rh"
            assert client._client.timeout.read == 2.0
        finally:
            await client.aclose()
