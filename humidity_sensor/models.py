"""Common data models for the humidity sensor library.

Defines the records that flow between the decision logic, the monitor
and the sinks: ``Reading`` (input), ``AlarmReport`` (alarm check result)
and ``OutboundMessage`` (what every sink receives).
"""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

__all__ = [
    "AlarmReport",
    "MessageKind",
    "OutboundMessage",
    "Reading",
    "format_payload",
]


def format_payload(temperature: float, humidity: float) -> str:
    """Format calibrated values as ``temperature=21.34 ; rh=47.20%``."""
    return f"temperature={temperature:.2f} ; rh={humidity:.2f}%"


class Reading(BaseModel):
    """One raw sample from the sensor.

    Attributes:
        temperature: Raw temperature in degrees C (before calibration).
        humidity: Raw relative humidity in 0..100 % (before calibration).
        timestamp: Unix epoch seconds of the sample.  ``None`` means
            "use the clock of the evaluating :class:`SensorLogic`".
    """

    temperature: float
    humidity: float
    timestamp: float | None = None


class AlarmReport(BaseModel):
    """Result of one :meth:`SensorLogic.check_alarms` call.

    ``triggered`` is ``True`` only if at least one alarm latched during
    this call; ``clauses`` holds one entry per newly latched alarm in the
    fixed evaluation order.  Callers must not transmit ``message`` when
    ``triggered`` is ``False``.
    """

    triggered: bool = False
    clauses: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return "Alarm" + "".join(self.clauses)


class MessageKind(StrEnum):
    """What an outbound message carries."""

    VALUE = "value"
    ALARM = "alarm"


class OutboundMessage(BaseModel):
    """A single text message handed to the sinks.

    Attributes:
        kind: ``value`` for periodic/changed readings, ``alarm`` for alarms.
        text: Payload text, e.g. ``"temperature=21.34 ; rh=47.20%"``.
        sensor_name: Identifier of the physical sensor.
        timestamp: Unix epoch seconds of the evaluation that produced it.
    """

    kind: MessageKind
    text: str
    sensor_name: str = "sensor"
    timestamp: float = Field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` representation (JSON-safe types)."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Return a compact JSON string."""
        return self.model_dump_json()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OutboundMessage:
        return cls.model_validate(data)
