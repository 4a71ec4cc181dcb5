"""Humidity sensor logic - decide when temperature / humidity readings are
worth sending and raise threshold alarms with hysteresis.

Quick start::

    from humidity_sensor import Monitor, SensorLogic
    from humidity_sensor.sinks import ConsoleSink

    logic = SensorLogic()
    logic.set_alarm_levels(30.0, True, 5.0, True, 80.0, False, 20.0, False)

    monitor = Monitor(logic, name="livingroom")
    monitor.add_sink(ConsoleSink())
    monitor.run(readings)
"""

from __future__ import annotations

from humidity_sensor.alarms import AlarmLevels, AlarmSide, Quantity, ThresholdAlarm
from humidity_sensor.logic import SensorLogic
from humidity_sensor.models import AlarmReport, MessageKind, OutboundMessage, Reading, format_payload
from humidity_sensor.monitor import Monitor

__all__ = [
    "AlarmLevels",
    "AlarmReport",
    "AlarmSide",
    "MessageKind",
    "Monitor",
    "OutboundMessage",
    "Quantity",
    "Reading",
    "SensorLogic",
    "ThresholdAlarm",
    "format_payload",
]

__version__ = "0.1.0"
