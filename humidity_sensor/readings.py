"""Boundary parsing of raw sensor readings.

The decision logic only accepts validated floats; this module turns the
text that arrives from a sensor driver or a recorded CSV file into
:class:`Reading` objects and rejects anything that is not a number.
"""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path

from humidity_sensor.models import Reading

__all__ = ["load_readings_csv", "parse_reading", "parse_value"]

logger = logging.getLogger("humidity_sensor.readings")


def parse_value(text: str | float, name: str = "value") -> float:
    """Convert *text* to a finite float or raise ``ValueError``."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {name}: {text!r} is not a number") from None
    if not math.isfinite(value):
        raise ValueError(f"Invalid {name}: {text!r} is not finite")
    return value


def parse_reading(temperature: str | float, humidity: str | float, timestamp: str | float | None = None) -> Reading:
    """Build a :class:`Reading` from raw textual values."""
    ts = None
    if timestamp is not None and str(timestamp).strip():
        ts = parse_value(timestamp, "timestamp")
    return Reading(
        temperature=parse_value(temperature, "temperature"),
        humidity=parse_value(humidity, "humidity"),
        timestamp=ts,
    )


def load_readings_csv(path: str | Path, *, strict: bool = False) -> list[Reading]:
    """Load recorded readings from a CSV file.

    Expected CSV columns (header row required):
        ``temperature, humidity``

    Optional column:
        ``timestamp`` (Unix epoch seconds).  When the column is present every
        row must fill it.

    Example CSV::

        timestamp,temperature,humidity
        1700000000,21.3,47.2
        1700000060,21.4,47.0

    Rows that cannot be parsed are skipped with a warning, or raise
    ``ValueError`` when *strict* is set.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Readings file not found: {path}")

    readings: list[Reading] = []
    with path.open(newline="") as fh:
        reader = csv.DictReader(fh)
        missing = {"temperature", "humidity"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{path}: missing column(s) {sorted(missing)}")
        has_timestamp = "timestamp" in (reader.fieldnames or [])

        for line_no, row in enumerate(reader, start=2):
            try:
                if has_timestamp and not (row.get("timestamp") or "").strip():
                    raise ValueError("missing timestamp")
                readings.append(
                    parse_reading(row["temperature"], row["humidity"], row.get("timestamp"))
                )
            except ValueError as exc:
                if strict:
                    raise ValueError(f"{path}:{line_no}: {exc}") from exc
                logger.warning("Skipping %s line %d: %s", path.name, line_no, exc)

    logger.info("Loaded %d readings from %s", len(readings), path)
    return readings
