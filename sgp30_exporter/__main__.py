"""SGP30 exporter entrypoint.

Reads the SGP30 air-quality sensor, compensates it for ambient humidity
scraped from a peer exporter, and serves the readings as Prometheus
metrics.

Usage: python -m sgp30_exporter
"""

from sgp30_exporter.telemetry.loop import main

if __name__ == "__main__":
    main()
