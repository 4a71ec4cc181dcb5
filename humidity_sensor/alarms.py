"""Threshold alarms with hysteresis and a "sent" latch.

Defines the core alarm types (``Quantity``, ``AlarmSide``,
``ThresholdAlarm``) and the ``AlarmLevels`` model that carries the eight
boundary / active values configured together on a :class:`SensorLogic`.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

__all__ = [
    "AlarmLevels",
    "AlarmSide",
    "Quantity",
    "ThresholdAlarm",
]


class Quantity(StrEnum):
    """Measured quantities that can carry an alarm."""

    TEMPERATURE = "Temperature"
    HUMIDITY = "Humidity"


class AlarmSide(StrEnum):
    """Which side of the boundary is the violation."""

    HIGH = "High"
    LOW = "Low"


class AlarmLevels(BaseModel):
    """Boundaries and active flags for all four alarms.

    Always applied as one unit - see :meth:`SensorLogic.set_alarm_levels`.
    """

    model_config = {"frozen": True}

    high_temperature: float = 30.0
    high_temperature_active: bool = False
    low_temperature: float = 5.0
    low_temperature_active: bool = False
    high_humidity: float = 80.0
    high_humidity_active: bool = False
    low_humidity: float = 20.0
    low_humidity_active: bool = False


class ThresholdAlarm:
    """A single boundary alarm with hysteresis.

    The alarm is either idle or latched.  It latches when the value
    crosses ``boundary`` (above for :attr:`AlarmSide.HIGH`, below for
    :attr:`AlarmSide.LOW`) while ``active``; the latch suppresses repeated
    notifications until the value moves back past the boundary by more
    than ``hysteresis``.  An inactive alarm never latches but can still
    unlatch.

    Parameters:
        quantity: What is measured (used in the alarm clause).
        side: High or low boundary.
        boundary: Alarm level.
        hysteresis: Margin the value must clear before the latch resets.
        active: Whether the alarm may fire.
    """

    def __init__(
        self,
        quantity: Quantity,
        side: AlarmSide,
        boundary: float,
        hysteresis: float,
        active: bool = False,
    ) -> None:
        self.quantity = quantity
        self.side = side
        self.boundary = boundary
        self.hysteresis = hysteresis
        self.active = active
        self.latched = False

    def breached(self, value: float) -> bool:
        """True when *value* is strictly on the wrong side of the boundary."""
        if self.side is AlarmSide.HIGH:
            return value > self.boundary
        return value < self.boundary

    def cleared(self, value: float) -> bool:
        """True when *value* is back in the safe zone beyond the hysteresis band."""
        if self.side is AlarmSide.HIGH:
            return value < self.boundary - self.hysteresis
        return value > self.boundary + self.hysteresis

    def evaluate(self, value: float) -> str | None:
        """Advance the state machine with a new value.

        Returns the alarm clause when this call latches the alarm,
        otherwise ``None``.
        """
        if self.breached(value):
            if self.active and not self.latched:
                self.latched = True
                return self.clause(value)
        elif self.cleared(value):
            self.latched = False
        return None

    def clause(self, value: float) -> str:
        return f" : {self.side} {self.quantity}={value:.2f}({self.boundary:.2f})"

    def reset(self) -> None:
        """Forget that a notification was sent."""
        self.latched = False

    def __repr__(self) -> str:
        return (
            f"ThresholdAlarm({self.side} {self.quantity}, boundary={self.boundary}, "
            f"hysteresis={self.hysteresis}, active={self.active}, latched={self.latched})"
        )
