"""Configuration loader for a sensor's decision logic and its sinks.

Parses YAML files with the following top-level sections::

    sensor:     # calibration offsets, send diffs, timeout
    alarms:     # four alarm levels plus hysteresis
    sinks:      # list of sink configs
    log_level:  # optional logging level

Example:

.. code-block:: yaml

    sensor:
      name: livingroom
      temperature_offset: -0.4
      humidity_offset: 1.5
      temperature_diff: 0.3
      humidity_diff: 2.0
      always_send_timeout_s: 3600

    alarms:
      high_temperature: {level: 30.0, active: true}
      low_temperature: {level: 5.0, active: true}
      high_humidity: {level: 80.0, active: false}
      low_humidity: {level: 20.0, active: false}
      hysteresis:
        temperature: 5.0
        humidity: 5.0

    sinks:
      - type: console
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from humidity_sensor.alarms import AlarmLevels
from humidity_sensor.logic import (
    DEFAULT_ALWAYS_SEND_TIMEOUT,
    DEFAULT_HUMIDITY_DIFF,
    DEFAULT_HYSTERESIS,
    DEFAULT_TEMPERATURE_DIFF,
    SensorLogic,
)

__all__ = ["SensorLogicConfig", "load_yaml_config", "parse_config"]

logger = logging.getLogger("humidity_sensor.config")

_ALARM_KEYS = ("high_temperature", "low_temperature", "high_humidity", "low_humidity")


class SensorLogicConfig(BaseModel):
    """Parsed representation of the full YAML configuration.

    Attributes:
        name: Sensor identifier attached to outbound messages.
        temperature_offset: Added to every raw temperature.
        humidity_offset: Added to every raw humidity.
        temperature_diff: Temperature change that forces a send.
        humidity_diff: Humidity change that forces a send.
        always_send_timeout_s: Seconds after which a value is always sent.
        alarm_levels: The four alarm boundaries and active flags.
        hysteresis_temperature: Hysteresis for both temperature alarms.
        hysteresis_humidity: Hysteresis for both humidity alarms.
        sink_configs: Raw dicts passed to the sink factory.
        log_level: Logging level string.
    """

    name: str = "sensor"
    temperature_offset: float = 0.0
    humidity_offset: float = 0.0
    temperature_diff: float = Field(default=DEFAULT_TEMPERATURE_DIFF, ge=0)
    humidity_diff: float = Field(default=DEFAULT_HUMIDITY_DIFF, ge=0)
    always_send_timeout_s: float = Field(default=DEFAULT_ALWAYS_SEND_TIMEOUT, gt=0)
    alarm_levels: AlarmLevels = Field(default_factory=AlarmLevels)
    hysteresis_temperature: float = Field(default=DEFAULT_HYSTERESIS, ge=0)
    hysteresis_humidity: float = Field(default=DEFAULT_HYSTERESIS, ge=0)
    sink_configs: list[dict[str, Any]] = Field(default_factory=list)
    log_level: str = "INFO"

    def build_logic(self, clock: Callable[[], float] | None = None) -> SensorLogic:
        """Create a :class:`SensorLogic` configured from this model."""
        logic = SensorLogic(clock=clock) if clock is not None else SensorLogic()
        logic.set_value_offset(self.temperature_offset, self.humidity_offset)
        logic.set_diff_to_send(self.temperature_diff, self.humidity_diff)
        logic.set_always_send_timeout(self.always_send_timeout_s)
        logic.set_alarm_hysteresis(self.hysteresis_temperature, self.hysteresis_humidity)
        logic.apply_alarm_levels(self.alarm_levels)
        return logic


def load_yaml_config(path: str | Path) -> SensorLogicConfig:
    """Load and validate a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    config = parse_config(raw)
    logger.info(
        "Loaded config for '%s': %d active alarms, %d sinks",
        config.name,
        sum(getattr(config.alarm_levels, f"{key}_active") for key in _ALARM_KEYS),
        len(config.sink_configs),
    )
    return config


def parse_config(raw: dict[str, Any]) -> SensorLogicConfig:
    """Build a :class:`SensorLogicConfig` from an already-parsed mapping."""
    sensor = raw.get("sensor") or {}
    alarms = raw.get("alarms") or {}
    hysteresis = alarms.get("hysteresis") or {}

    optional: dict[str, Any] = {}
    for key in (
        "name",
        "temperature_offset",
        "humidity_offset",
        "temperature_diff",
        "humidity_diff",
        "always_send_timeout_s",
    ):
        if key in sensor:
            optional[key] = sensor[key]
    if "temperature" in hysteresis:
        optional["hysteresis_temperature"] = hysteresis["temperature"]
    if "humidity" in hysteresis:
        optional["hysteresis_humidity"] = hysteresis["humidity"]
    if "log_level" in raw:
        optional["log_level"] = raw["log_level"]

    return SensorLogicConfig(
        alarm_levels=_parse_alarm_levels(alarms),
        sink_configs=raw.get("sinks") or [],
        **optional,
    )


def _parse_alarm_levels(alarms: dict[str, Any]) -> AlarmLevels:
    """Convert ``{high_temperature: {level: 30, active: true}, ...}`` into ``AlarmLevels``."""
    fields: dict[str, Any] = {}
    for key in _ALARM_KEYS:
        entry = alarms.get(key)
        if entry is None:
            continue
        if not isinstance(entry, dict):
            # Bare number: level given, alarm switched on
            entry = {"level": entry, "active": True}
        if "level" in entry:
            fields[key] = entry["level"]
        if "active" in entry:
            val = entry["active"]
            fields[f"{key}_active"] = val if isinstance(val, bool) else str(val).lower() in ("true", "1", "yes")
    return AlarmLevels(**fields)
