"""Enumerations for the SGP30 exporter."""

from enum import Enum, StrEnum, auto


class WarmUpRule(StrEnum):
    """How a reading is judged to have left the warm-up placeholder."""

    BOTH = "both"  # eCO2 and TVOC must both differ from the placeholder
    EITHER = "either"  # any field differing is enough


class WarmUpState(Enum):
    COLD = auto()
    STABILIZING = auto()
    READY = auto()


class MetricName(StrEnum):
    """Gauges published on the exposition endpoint."""

    CO2EQ = "sgp30_co2eq"
    TVOC = "sgp30_tvoc"
    LAST_UPDATED = "sgp30_last_updated"
    ABSOLUTE_HUMIDITY = "sgp30_absolute_humidity"
    BASELINE_CO2EQ = "sgp30_baseline_co2eq"
    BASELINE_TVOC = "sgp30_baseline_tvoc"
    BUILD_INFO = "sgp30_exporter_build_info"
