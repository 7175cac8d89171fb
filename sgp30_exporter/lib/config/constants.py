"""Shared constants for the configuration module.

These constants are separated to avoid circular imports between settings.py
and the modules consuming the timing values.
"""

# Telemetry loop cadences, in ticks of TICK_PERIOD_SEC
TICK_PERIOD_SEC = 1.0
TICKS_PER_CYCLE = 600
HUMIDITY_EVERY_TICKS = 60
BASELINE_SNAPSHOT_TICK = TICKS_PER_CYCLE - 1  # last tick of each 10 min cycle

# Reading reported by the SGP30 until its IAQ algorithm has warmed up
WARMUP_DEFAULT_CO2EQ_PPM = 400
WARMUP_DEFAULT_TVOC_PPB = 0

# set_iaq_humidity sends int(value * 256) as a single 16-bit word
MAX_ABSOLUTE_HUMIDITY_GM3 = 256.0

SGP30_DEFAULT_I2C_ADDRESS = 0x58
