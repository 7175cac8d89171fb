"""Domain models for the humidity source."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HumiditySample:
    temperature_celsius: float
    relative_humidity_percent: float

    def __str__(self) -> str:
        return f"{self.temperature_celsius:.1f}°C {self.relative_humidity_percent:.1f}%RH"
