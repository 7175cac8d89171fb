"""Mock SGP30 driver for development.

Provides a mock implementation of the SGP30 driver interface that generates
realistic data without requiring hardware. Used by the telemetry service
when MOCK_SENSORS=1 is set.

Mirrors the chip's behaviour where it matters to the exporter: readings stay
at the (400, 0) placeholder for the first 15 measurements after iaq_init,
then follow a bounded random walk.
"""

import random

from sgp30_exporter.lib.config import (
    WARMUP_DEFAULT_CO2EQ_PPM,
    WARMUP_DEFAULT_TVOC_PPB,
)

_WARMUP_MEASUREMENTS = 15
_FEATURE_SET = 0x0020


def _random_walk(
    current: float, drift: float, min_val: float, max_val: float
) -> float:
    """Generate next value using random walk with bounds."""
    change = random.gauss(0, drift)
    new_val = current + change
    return max(min_val, min(max_val, new_val))


class MockSGP30:
    """Mock SGP30 sensor that generates realistic IAQ readings.

    - eCO2: drift=15, bounds 400-2000 ppm
    - TVOC: drift=10, bounds 1-600 ppb
    """

    def __init__(self) -> None:
        self.serial = [random.getrandbits(16) for _ in range(3)]
        self._co2eq = random.uniform(450.0, 600.0)
        self._tvoc = random.uniform(20.0, 80.0)
        self._measurements = 0
        self._baseline = [0x8973, 0x8AAE]
        self.absolute_humidity: float | None = None
        self.released = False

    def get_feature_set(self) -> int:
        return _FEATURE_SET

    def iaq_init(self) -> None:
        self._measurements = 0

    def iaq_measure(self) -> list[int]:
        self._measurements += 1
        if self._measurements <= _WARMUP_MEASUREMENTS:
            return [WARMUP_DEFAULT_CO2EQ_PPM, WARMUP_DEFAULT_TVOC_PPB]
        self._co2eq = _random_walk(self._co2eq, drift=15, min_val=400, max_val=2000)
        self._tvoc = _random_walk(self._tvoc, drift=10, min_val=1, max_val=600)
        return [round(self._co2eq), round(self._tvoc)]

    def get_iaq_baseline(self) -> list[int]:
        return list(self._baseline)

    def set_iaq_baseline(self, co2eq: int, tvoc: int) -> None:
        if co2eq == 0 and tvoc == 0:
            raise ValueError("Invalid baseline")
        self._baseline = [co2eq, tvoc]

    def set_iaq_humidity(self, gramsPM3: float) -> None:  # noqa: N803
        self.absolute_humidity = gramsPM3

    def deinit(self) -> None:
        self.released = True
