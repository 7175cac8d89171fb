"""Domain models for SGP30 readings and calibration state."""

from dataclasses import dataclass
from typing import Self

from sgp30_exporter.lib.config import (
    WARMUP_DEFAULT_CO2EQ_PPM,
    WARMUP_DEFAULT_TVOC_PPB,
    WarmUpRule,
)

_U16_MAX = 0xFFFF


@dataclass(frozen=True, slots=True)
class CalibrationBaseline:
    """Raw IAQ baseline words, opaque outside the driver."""

    co2eq_baseline: int
    tvoc_baseline: int

    def __post_init__(self) -> None:
        for name in ("co2eq_baseline", "tvoc_baseline"):
            value = getattr(self, name)
            if not 0 <= value <= _U16_MAX:
                raise ValueError(f"{name} must be a 16-bit unsigned value, got {value}")

    @classmethod
    def from_words(cls, words: list[int] | tuple[int, ...]) -> Self:
        """Build from the (eCO2, TVOC) pair returned by the driver."""
        co2eq, tvoc = words
        return cls(int(co2eq), int(tvoc))

    def __str__(self) -> str:
        return f"eCO2=0x{self.co2eq_baseline:04x} TVOC=0x{self.tvoc_baseline:04x}"


@dataclass(frozen=True, slots=True)
class Measurement:
    co2eq_ppm: int
    tvoc_ppb: int

    @classmethod
    def from_words(cls, words: list[int] | tuple[int, ...]) -> Self:
        """Build from the (eCO2, TVOC) pair returned by the driver."""
        co2eq, tvoc = words
        return cls(int(co2eq), int(tvoc))

    def is_warmup_default(self, rule: WarmUpRule = WarmUpRule.BOTH) -> bool:
        """Whether this reading still counts as the warm-up placeholder.

        With ``BOTH`` the sensor is only considered warm once eCO2 and TVOC
        have both moved away from (400, 0); with ``EITHER`` one is enough.
        """
        co2eq_moved = self.co2eq_ppm != WARMUP_DEFAULT_CO2EQ_PPM
        tvoc_moved = self.tvoc_ppb != WARMUP_DEFAULT_TVOC_PPB
        if rule is WarmUpRule.BOTH:
            return not (co2eq_moved and tvoc_moved)
        return not (co2eq_moved or tvoc_moved)

    def __str__(self) -> str:
        return f"eCO2={self.co2eq_ppm}ppm TVOC={self.tvoc_ppb}ppb"
