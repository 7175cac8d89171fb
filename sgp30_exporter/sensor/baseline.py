"""Persistence of the SGP30 IAQ baseline across restarts.

The record is a single line holding the eCO2 and TVOC baseline words as
whitespace-separated unsigned integers. A missing or unreadable record means
the sensor calibrates from scratch, which is never an error.
"""

from pathlib import Path

from sgp30_exporter.logging import get_logger
from sgp30_exporter.sensor.models import CalibrationBaseline

logger = get_logger("sensor.baseline")


class BaselineStore:
    """Load and save a CalibrationBaseline to a fixed file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> CalibrationBaseline | None:
        """Read the stored baseline, or None if there is no usable record."""
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No baseline stored at %s, starting uncalibrated", self._path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read baseline from %s: %s", self._path, e)
            return None

        fields = content.split()
        if len(fields) != 2:
            logger.warning(
                "Ignoring baseline at %s: expected 2 fields, got %d",
                self._path,
                len(fields),
            )
            return None

        try:
            baseline = CalibrationBaseline(*(int(f) for f in fields))
        except ValueError as e:
            logger.warning("Ignoring invalid baseline at %s: %s", self._path, e)
            return None

        logger.info("Loaded baseline %s from %s", baseline, self._path)
        return baseline

    def save(self, baseline: CalibrationBaseline) -> bool:
        """Overwrite the stored baseline. Returns True if it was written."""
        record = f"{baseline.co2eq_baseline} {baseline.tvoc_baseline}\n"
        try:
            with self._path.open("w", encoding="utf-8") as f:
                f.write(record)
        except OSError as e:
            logger.error("Could not save baseline to %s: %s", self._path, e)
            return False
        logger.info("Saved baseline %s to %s", baseline, self._path)
        return True
