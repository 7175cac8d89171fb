"""Publish SGP30 air-quality readings as Prometheus metrics.

Once the sensor has warmed up, the loop ticks once per second:

- every tick, measure eCO2 and TVOC and publish them;
- every 60 ticks, scrape temperature and humidity from a peer exporter and
  push the derived absolute humidity to the sensor;
- once every 600 ticks, snapshot the IAQ baseline to disk so a restart can
  restore it instead of recalibrating for hours.

Every per-tick failure is logged and leaves the published values as they
were; the next scheduled tick is the only retry.
"""

import sys
from typing import override

from prometheus_client import CollectorRegistry

from sgp30_exporter.humidity.client import (
    HumiditySourceClient,
    create_humidity_client,
)
from sgp30_exporter.humidity.compensation import sensor_humidity
from sgp30_exporter.lib.config import (
    BASELINE_SNAPSHOT_TICK,
    HUMIDITY_EVERY_TICKS,
    TICKS_PER_CYCLE,
    get_settings,
)
from sgp30_exporter.lib.exceptions import (
    CompensationError,
    FetchError,
    SensorError,
    StartupError,
)
from sgp30_exporter.lib.metrics import (
    ExpositionServer,
    MetricInstruments,
    create_instruments,
)
from sgp30_exporter.lib.polling import FixedRateTimer, PollingService
from sgp30_exporter.lib.service import run_service
from sgp30_exporter.logging import get_logger
from sgp30_exporter.sensor.baseline import BaselineStore
from sgp30_exporter.sensor.session import (
    DRIVER_ERRORS,
    SensorSession,
    create_driver,
)

logger = get_logger("telemetry.loop")


class TelemetryService(PollingService):
    """Telemetry loop for one SGP30 sensor."""

    def __init__(
        self,
        session: SensorSession,
        store: BaselineStore,
        humidity: HumiditySourceClient,
        instruments: MetricInstruments,
        *,
        exposition: ExpositionServer | None = None,
        humidity_every: int = HUMIDITY_EVERY_TICKS,
        snapshot_tick: int = BASELINE_SNAPSHOT_TICK,
        timer: FixedRateTimer | None = None,
    ) -> None:
        super().__init__(name="SGP30", ticks_per_cycle=TICKS_PER_CYCLE, timer=timer)
        self._session = session
        self._store = store
        self._humidity = humidity
        self._instruments = instruments
        self._exposition = exposition
        self._humidity_every = humidity_every
        self._snapshot_tick = snapshot_tick

    @override
    async def initialize(self) -> None:
        """Bind the metrics endpoint, initialize the sensor and warm it up.

        Raises:
            StartupError: If the endpoint cannot be bound or the sensor
                cannot be initialized.
        """
        if self._exposition is not None:
            try:
                self._exposition.start()
            except OSError as e:
                raise StartupError(f"Cannot bind metrics endpoint: {e}") from e

        try:
            await self._session.init()
        except SensorError as e:
            raise StartupError(str(e)) from e

        baseline = self._store.load()
        if baseline is not None:
            await self._session.restore_baseline(baseline)

        measurement = await self._session.warm_up()
        self._instruments.publish_measurement(measurement)

    @override
    async def cleanup(self) -> None:
        """Close the metrics endpoint and release the sensor bus."""
        if self._exposition is not None:
            self._exposition.close()
        self._session.close()

    @override
    async def tick(self, tick: int) -> None:
        """Humidity update (every N ticks), measurement, baseline snapshot."""
        if tick % self._humidity_every == 0:
            await self.update_humidity()
        await self.measure()
        if tick == self._snapshot_tick:
            await self.snapshot_baseline()

    async def update_humidity(self) -> bool:
        """Scrape the humidity source and push compensation to the sensor."""
        try:
            sample = await self._humidity.fetch()
        except FetchError as e:
            logger.warning("Humidity fetch from %s failed: %s", self._humidity.url, e)
            return False

        try:
            absolute_humidity = sensor_humidity(sample)
        except CompensationError as e:
            logger.warning("Skipping humidity compensation: %s", e)
            return False

        try:
            await self._session.set_humidity(absolute_humidity)
        except SensorError as e:
            logger.warning("%s", e)
            return False

        self._instruments.absolute_humidity.set(absolute_humidity)
        logger.info(
            "Humidity compensation %.2f g/m^3 from %s", absolute_humidity, sample
        )
        return True

    async def measure(self) -> bool:
        """Measure and publish eCO2 and TVOC."""
        try:
            measurement = await self._session.measure()
        except SensorError as e:
            logger.warning("%s, keeping previous values", e)
            return False
        self._instruments.publish_measurement(measurement)
        logger.debug("Read %s", measurement)
        return True

    async def snapshot_baseline(self) -> bool:
        """Read the IAQ baseline from the sensor and persist it."""
        try:
            baseline = await self._session.get_baseline()
        except SensorError as e:
            logger.warning("%s, baseline not saved", e)
            return False
        self._instruments.publish_baseline(baseline)
        return self._store.save(baseline)


async def run() -> None:
    """Build the telemetry service from configuration and run it."""
    settings = get_settings()

    registry = CollectorRegistry()
    instruments = create_instruments(registry)
    exposition = ExpositionServer(
        registry, host=settings.exporter.host, port=settings.exporter.port
    )

    try:
        driver = create_driver()
    except (*DRIVER_ERRORS, ImportError, NotImplementedError) as e:
        raise StartupError(f"Cannot open SGP30: {e}") from e

    session = SensorSession(driver, warmup_rule=settings.sensor.warmup_rule)
    store = BaselineStore(settings.sensor.baseline_path)

    async with create_humidity_client() as humidity:
        service = TelemetryService(
            session, store, humidity, instruments, exposition=exposition
        )
        await service.run()


def main() -> None:
    """Main entry point for the telemetry service."""
    settings = get_settings()
    sys.exit(run_service(run, name="telemetry", log_level=settings.log_level))


if __name__ == "__main__":
    main()
