"""Shared pytest fixtures for the test suite."""

import logging
import sys
from unittest.mock import MagicMock

import pytest

# Mock hardware-specific modules before they're imported
# These are only available on Raspberry Pi hardware
sys.modules["adafruit_sgp30"] = MagicMock()
sys.modules["board"] = MagicMock()
sys.modules["busio"] = MagicMock()

from prometheus_client import CollectorRegistry

import sgp30_exporter.lib.config.settings as settings_module
from sgp30_exporter.lib.metrics import create_instruments
from sgp30_exporter.lib.polling import FixedRateTimer


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.fixture(autouse=True)
def configure_caplog(caplog):
    """Ensure caplog captures logs from the sgp30_exporter namespace."""
    caplog.set_level(logging.DEBUG, logger="sgp30_exporter")


def _install_settings(settings):
    settings_module._settings_override = settings
    settings_module._load_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset global settings after each test to avoid cross-test pollution."""
    yield
    _install_settings(None)


@pytest.fixture
def use_settings():
    """Install a Settings instance as what get_settings() returns; None clears it."""
    return _install_settings


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer(clock):
    """One-second fixed-rate timer driven by the fake clock."""
    return FixedRateTimer(1.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def instruments(registry):
    return create_instruments(registry, process_metrics=False)


@pytest.fixture
def mock_driver():
    """Create a mock SGP30 driver that is already past warm-up."""
    driver = MagicMock()
    driver.serial = [0x0000, 0x0123, 0xABCD]
    driver.get_feature_set.return_value = 0x0022
    driver.iaq_measure.return_value = [450, 12]
    driver.get_iaq_baseline.return_value = [0x8973, 0x8AAE]
    return driver
