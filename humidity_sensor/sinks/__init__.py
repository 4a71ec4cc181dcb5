"""Pluggable sinks that receive value and alarm messages.

Import any sink you need directly from this package::

    from humidity_sensor.sinks import ConsoleSink, CallbackSink, FileSink
"""

from __future__ import annotations

from humidity_sensor.sinks.base import Sink, SinkConfig, SinkRunner
from humidity_sensor.sinks.callback import CallbackSink
from humidity_sensor.sinks.console import ConsoleSink
from humidity_sensor.sinks.file import FileSink

__all__ = [
    "CallbackSink",
    "ConsoleSink",
    "FileSink",
    "Sink",
    "SinkConfig",
    "SinkRunner",
]
