"""Session over the SGP30 air-quality sensor.

Wraps the blocking driver so that every bus transaction runs in a worker
thread and becomes a cancellable suspension point for the event loop, and
turns driver failures into SensorError. Also owns the warm-up state machine:
after iaq_init the chip reports a fixed (400 ppm, 0 ppb) placeholder for at
least 15 seconds while its algorithm settles.
"""

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

from sgp30_exporter.lib.config import TICK_PERIOD_SEC, WarmUpRule, WarmUpState
from sgp30_exporter.lib.exceptions import SensorError, SensorNotInitializedError
from sgp30_exporter.lib.polling import FixedRateTimer
from sgp30_exporter.logging import get_logger
from sgp30_exporter.sensor.models import CalibrationBaseline, Measurement

logger = get_logger("sensor.session")

# Exceptions the Adafruit driver raises for bus, CRC and argument errors
DRIVER_ERRORS: tuple[type[Exception], ...] = (OSError, RuntimeError, ValueError)

# Malformed replies: wrong word count or a non-sequence
_REPLY_ERRORS = (ValueError, TypeError)

# Get_feature_set: command word, 10 ms execution time, one reply word
_GET_FEATURE_SET = ([0x20, 0x2F], 0.01, 1)


class SGP30Driver(Protocol):
    """Protocol for the SGP30 driver interface."""

    @property
    def serial(self) -> list[int]: ...

    def get_feature_set(self) -> int: ...
    def iaq_init(self) -> None: ...
    def iaq_measure(self) -> list[int]: ...
    def get_iaq_baseline(self) -> list[int]: ...
    def set_iaq_baseline(self, co2eq: int, tvoc: int, /) -> None: ...
    def set_iaq_humidity(self, grams_pm3: float, /) -> None: ...
    def deinit(self) -> None: ...


class AdafruitSGP30Driver:
    """SGP30Driver over ``adafruit_sgp30`` that owns the I2C bus it opened."""

    def __init__(self, device: Any, i2c: Any) -> None:
        self._device = device
        self._i2c = i2c

    @property
    def serial(self) -> list[int]:
        return list(self._device.serial)

    def get_feature_set(self) -> int:
        # The driver checks the feature set on construction but does not keep it
        words = self._device._i2c_read_words_from_cmd(*_GET_FEATURE_SET)
        return int(words[0])

    def iaq_init(self) -> None:
        self._device.iaq_init()

    def iaq_measure(self) -> list[int]:
        return self._device.iaq_measure()  # type: ignore[no-any-return]

    def get_iaq_baseline(self) -> list[int]:
        return self._device.get_iaq_baseline()  # type: ignore[no-any-return]

    def set_iaq_baseline(self, co2eq: int, tvoc: int, /) -> None:
        self._device.set_iaq_baseline(co2eq, tvoc)

    def set_iaq_humidity(self, grams_pm3: float, /) -> None:
        self._device.set_iaq_humidity(grams_pm3)

    def deinit(self) -> None:
        self._i2c.deinit()


def format_serial(words: list[int]) -> str:
    """Render the 48-bit serial number as hex."""
    return "".join(f"{w:04x}" for w in words)


class SensorSession:
    """Live handle on one SGP30, used from a single task."""

    def __init__(
        self,
        driver: SGP30Driver,
        *,
        warmup_rule: WarmUpRule = WarmUpRule.BOTH,
        warmup_interval_sec: float = TICK_PERIOD_SEC,
        timer: FixedRateTimer | None = None,
    ) -> None:
        self._driver = driver
        self._warmup_rule = warmup_rule
        self._timer = timer or FixedRateTimer(warmup_interval_sec)
        self._initialized = False
        self._state = WarmUpState.COLD
        self._feature_set: int | None = None

    @property
    def state(self) -> WarmUpState:
        return self._state

    @property
    def feature_set(self) -> int | None:
        """Product type and version word, known once init() has succeeded."""
        return self._feature_set

    @property
    def is_ready(self) -> bool:
        return self._state is WarmUpState.READY

    async def _call[R](self, operation: str, fn: Callable[..., R], *args: object) -> R:
        """Run a driver call in a thread, wrapping driver errors."""
        if not self._initialized:
            raise SensorNotInitializedError(operation)
        try:
            return await asyncio.to_thread(fn, *args)
        except DRIVER_ERRORS as e:
            raise SensorError(operation, e) from e

    async def init(self) -> None:
        """Identify the chip and initialize the IAQ algorithm.

        Must succeed before any other call.

        Raises:
            SensorError: If the chip does not respond.
        """
        try:
            serial = format_serial(list(self._driver.serial))
            feature_set = await asyncio.to_thread(self._driver.get_feature_set)
            await asyncio.to_thread(self._driver.iaq_init)
        except DRIVER_ERRORS as e:
            raise SensorError("init", e) from e
        self._initialized = True
        self._state = WarmUpState.COLD
        self._feature_set = feature_set
        logger.info(
            "SGP30 serial %s feature set 0x%04x initialized", serial, feature_set
        )

    async def measure(self) -> Measurement:
        """Run one IAQ measurement.

        Raises:
            SensorError: If the bus transaction fails or the reply is malformed.
        """
        words = await self._call("measure", self._driver.iaq_measure)
        try:
            return Measurement.from_words(words)
        except _REPLY_ERRORS as e:
            raise SensorError("measure", e) from e

    async def get_baseline(self) -> CalibrationBaseline:
        """Read the current IAQ baseline.

        Raises:
            SensorError: If the bus transaction fails.
        """
        words = await self._call("get baseline", self._driver.get_iaq_baseline)
        try:
            return CalibrationBaseline.from_words(words)
        except _REPLY_ERRORS as e:
            raise SensorError("get baseline", e) from e

    async def restore_baseline(self, baseline: CalibrationBaseline) -> bool:
        """Push a stored baseline to the sensor. Failures are logged only."""
        try:
            await self._call(
                "set baseline",
                self._driver.set_iaq_baseline,
                baseline.co2eq_baseline,
                baseline.tvoc_baseline,
            )
        except SensorError as e:
            logger.warning("%s, continuing uncalibrated", e)
            return False
        logger.info("Restored baseline %s", baseline)
        return True

    async def set_humidity(self, absolute_humidity: float) -> None:
        """Set humidity compensation, in g/m^3.

        Raises:
            SensorError: If the bus transaction fails.
        """
        await self._call(
            "set humidity", self._driver.set_iaq_humidity, absolute_humidity
        )
        logger.debug("Humidity compensation set to %.2f g/m^3", absolute_humidity)

    def close(self) -> None:
        """Release the I2C bus."""
        self._initialized = False
        self._driver.deinit()

    async def warm_up(self) -> Measurement:
        """Measure once per interval until the sensor leaves its placeholder.

        Failed measurements are logged and skipped; they neither advance nor
        reset the state machine. Returns the first non-placeholder reading.
        """
        if not self._initialized:
            raise SensorNotInitializedError("warm up")

        logger.info("Waiting for SGP30 warm-up (rule: %s)", self._warmup_rule)
        self._timer.start()
        attempts = 0
        while True:
            deadline = self._timer.advance()
            attempts += 1
            try:
                measurement = await self.measure()
            except SensorError as e:
                logger.warning("Warm-up measurement %d: %s", attempts, e)
            else:
                if not measurement.is_warmup_default(self._warmup_rule):
                    self._state = WarmUpState.READY
                    logger.info(
                        "SGP30 ready after %d measurements: %s",
                        attempts,
                        measurement,
                    )
                    return measurement
                if self._state is WarmUpState.COLD:
                    self._state = WarmUpState.STABILIZING
                logger.debug("Warm-up measurement %d: %s", attempts, measurement)
            await self._timer.sleep_until(deadline)


def create_driver() -> SGP30Driver:
    """Open the SGP30 based on configuration."""
    from sgp30_exporter.lib.config import get_settings

    settings = get_settings()
    if settings.mock_sensors:
        from sgp30_exporter.lib.mock import MockSGP30

        logger.info("Using mock SGP30 sensor")
        return MockSGP30()

    import adafruit_sgp30
    import board
    import busio

    cfg = settings.sensor
    i2c = busio.I2C(board.SCL, board.SDA, frequency=cfg.i2c_frequency)
    try:
        device = adafruit_sgp30.Adafruit_SGP30(i2c, address=cfg.i2c_address)
    except Exception:
        i2c.deinit()
        raise
    return AdafruitSGP30Driver(device, i2c)
