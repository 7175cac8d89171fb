"""Settings models and configuration loading for the SGP30 exporter."""

from functools import cached_property, lru_cache
from pathlib import Path
from typing import Annotated, Any, Self

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from sgp30_exporter.lib.config.constants import SGP30_DEFAULT_I2C_ADDRESS
from sgp30_exporter.lib.config.enums import WarmUpRule

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(v: Any) -> bool:
    """Parse boolean from string '1'/'0' or actual bool."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v == "1"
    return bool(v)


def _parse_hex_int(v: Any) -> int:
    """Parse integer from string, supporting hex format (0x...)."""
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        return int(v, 0)  # base 0 auto-detects hex/octal/decimal
    return int(v)


def _validate_http_url(v: str) -> str:
    """Validate HTTP URL format, keeping the original string."""
    HttpUrl(v)
    return v


_BoolFromStr = Annotated[bool, BeforeValidator(_parse_bool)]
_HexInt = Annotated[int, BeforeValidator(_parse_hex_int)]
_HttpUrlStr = Annotated[str, AfterValidator(_validate_http_url)]


class ExporterSettings(BaseModel):
    """Exposition endpoint settings."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 9185


class HumiditySourceSettings(BaseModel):
    """Peer endpoint providing temperature and relative humidity."""

    model_config = ConfigDict(frozen=True)

    url: str
    device: str
    temperature_metric: str = "ble_temperature_celsius"
    humidity_metric: str = "ble_humidity_ratio"
    timeout_sec: float = 5.0


class SensorSettings(BaseModel):
    """SGP30 bus and calibration settings."""

    model_config = ConfigDict(frozen=True)

    i2c_address: int = SGP30_DEFAULT_I2C_ADDRESS
    i2c_frequency: int = 100_000
    baseline_path: Path = Path("sgp30_baseline.txt")
    warmup_rule: WarmUpRule = WarmUpRule.BOTH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Exposition
    port: int = Field(default=9185, ge=1, le=65535)

    # Humidity source
    humidity_url: _HttpUrlStr = "http://192.168.1.10:9102/metrics"
    humidity_mac: str = Field(default="A4:C1:38:00:00:00", min_length=1)
    humidity_temperature_metric: str = Field(
        default="ble_temperature_celsius", min_length=1
    )
    humidity_ratio_metric: str = Field(
        default="ble_humidity_ratio", min_length=1
    )
    humidity_timeout_sec: float = Field(default=5.0, gt=0)

    # Sensor
    mock_sensors: _BoolFromStr = False
    sgp30_i2c_address: _HexInt = Field(
        default=SGP30_DEFAULT_I2C_ADDRESS, ge=0x00, le=0x7F
    )
    sgp30_i2c_frequency: int = Field(default=100_000, gt=0)
    baseline_path: Path = Path("sgp30_baseline.txt")
    warmup_rule: WarmUpRule = WarmUpRule.BOTH

    # Logging
    log_level: str = "INFO"

    @cached_property
    def exporter(self) -> ExporterSettings:
        """Get exposition settings as nested object."""
        return ExporterSettings(port=self.port)

    @cached_property
    def humidity(self) -> HumiditySourceSettings:
        """Get humidity source settings as nested object."""
        return HumiditySourceSettings(
            url=self.humidity_url,
            device=self.humidity_mac,
            temperature_metric=self.humidity_temperature_metric,
            humidity_metric=self.humidity_ratio_metric,
            timeout_sec=self.humidity_timeout_sec,
        )

    @cached_property
    def sensor(self) -> SensorSettings:
        """Get SGP30 sensor settings as nested object."""
        return SensorSettings(
            i2c_address=self.sgp30_i2c_address,
            i2c_frequency=self.sgp30_i2c_frequency,
            baseline_path=self.baseline_path,
            warmup_rule=self.warmup_rule,
        )

    @model_validator(mode="after")
    def validate_settings(self) -> Self:
        """Validate cross-field configuration constraints."""
        errors: list[str] = []

        if self.log_level.upper() not in _LOG_LEVELS:
            errors.append(
                f"LOG_LEVEL ({self.log_level}) must be one of: "
                f"{', '.join(_LOG_LEVELS)}"
            )

        if self.humidity_temperature_metric == self.humidity_ratio_metric:
            errors.append(
                "HUMIDITY_TEMPERATURE_METRIC and HUMIDITY_RATIO_METRIC "
                f"must differ (both are {self.humidity_ratio_metric!r})"
            )

        if errors:
            raise ValueError(
                "Configuration validation failed:\n  - "
                + "\n  - ".join(errors)
            )

        return self


# Process-wide override; when set, get_settings() skips the environment
_settings_override: Settings | None = None


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment (cached)."""
    return Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns the override if set, otherwise loads from environment
    variables (cached after first load).
    """
    if _settings_override is not None:
        return _settings_override
    return _load_settings()
