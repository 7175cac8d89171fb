"""Centralized configuration for the SGP30 exporter.

This package provides:
- Enums for warm-up handling and published metric names
- Timing and sensor constants
- Pydantic settings models for configuration
"""

from .constants import (
    BASELINE_SNAPSHOT_TICK,
    HUMIDITY_EVERY_TICKS,
    MAX_ABSOLUTE_HUMIDITY_GM3,
    TICK_PERIOD_SEC,
    TICKS_PER_CYCLE,
    WARMUP_DEFAULT_CO2EQ_PPM,
    WARMUP_DEFAULT_TVOC_PPB,
)
from .enums import MetricName, WarmUpRule, WarmUpState
from .settings import (
    ExporterSettings,
    HumiditySourceSettings,
    SensorSettings,
    Settings,
    get_settings,
)

__all__ = [
    # Enums
    "MetricName",
    "WarmUpRule",
    "WarmUpState",
    # Settings models
    "ExporterSettings",
    "HumiditySourceSettings",
    "SensorSettings",
    "Settings",
    # Constants
    "BASELINE_SNAPSHOT_TICK",
    "HUMIDITY_EVERY_TICKS",
    "MAX_ABSOLUTE_HUMIDITY_GM3",
    "TICK_PERIOD_SEC",
    "TICKS_PER_CYCLE",
    "WARMUP_DEFAULT_CO2EQ_PPM",
    "WARMUP_DEFAULT_TVOC_PPB",
    # Functions
    "get_settings",
]
