"""Absolute humidity for SGP30 humidity compensation.

The SGP30 corrects its IAQ algorithm using absolute humidity in g/m^3,
while thermometers report temperature and relative humidity. The conversion
uses the Magnus formula for saturation vapour pressure; the coefficients
below must not be changed, they define what the sensor is told.
"""

import math

from sgp30_exporter.humidity.models import HumiditySample
from sgp30_exporter.lib.config import MAX_ABSOLUTE_HUMIDITY_GM3
from sgp30_exporter.lib.exceptions import CompensationError


def vapor_pressure_hpa(temperature_celsius: float) -> float:
    """Saturation vapour pressure over water in hPa."""
    t = temperature_celsius
    return 6.112 * math.exp(17.67 * t / (243.5 + t))


def absolute_humidity_gm3(
    temperature_celsius: float, relative_humidity_percent: float
) -> float:
    """Absolute humidity in g/m^3.

    Args:
        temperature_celsius: Air temperature.
        relative_humidity_percent: Relative humidity, 0-100.
    """
    t = temperature_celsius
    return (
        vapor_pressure_hpa(t)
        * relative_humidity_percent
        * 2.1674
        / (273.15 + t)
    )


def validate_sensor_humidity(value: float) -> float:
    """Check that an absolute humidity fits the driver's 8.8 fixed-point word."""
    if not math.isfinite(value) or not 0.0 <= value < MAX_ABSOLUTE_HUMIDITY_GM3:
        raise CompensationError(
            f"Absolute humidity {value!r} g/m^3 outside sensor range "
            f"[0, {MAX_ABSOLUTE_HUMIDITY_GM3:.0f})"
        )
    return value


def sensor_humidity(sample: HumiditySample) -> float:
    """Absolute humidity to push to the sensor for a scraped sample.

    Raises:
        CompensationError: If the value cannot be computed or encoded.
    """
    try:
        value = absolute_humidity_gm3(
            sample.temperature_celsius, sample.relative_humidity_percent
        )
    except ArithmeticError as e:
        raise CompensationError(
            f"Cannot compute absolute humidity for {sample}: {e}"
        ) from e
    return validate_sensor_humidity(value)
