"""Monitor - top-level orchestrator that feeds readings through a
:class:`SensorLogic` and delivers the resulting messages to sinks.

Per reading the monitor:

1. sends the formatted values when the logic decides they are worth sending,
2. checks the alarms and sends the alarm message only if one triggered,
3. tells the logic when no sink accepted the alarm, so it fires again.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterable, Callable, Iterable
from typing import Any

from humidity_sensor.logic import SensorLogic
from humidity_sensor.models import MessageKind, OutboundMessage, Reading
from humidity_sensor.sinks.base import Sink, SinkRunner
from humidity_sensor.sinks.callback import CallbackSink

__all__ = ["Monitor"]

logger = logging.getLogger("humidity_sensor")


class Monitor:
    """High-level API for running one sensor's logic against its sinks.

    Example::

        from humidity_sensor import Monitor, SensorLogic
        from humidity_sensor.sinks import ConsoleSink

        monitor = Monitor(SensorLogic(), name="livingroom")
        monitor.add_sink(ConsoleSink())
        monitor.run(readings)

    Parameters:
        logic:
            The decision logic for this sensor.  A fresh default
            :class:`SensorLogic` is created when omitted.
        name:
            Sensor identifier copied onto every outbound message.
    """

    def __init__(self, logic: SensorLogic | None = None, *, name: str = "sensor") -> None:
        self.logic = logic if logic is not None else SensorLogic()
        self.name = name
        self._runners: list[SinkRunner] = []

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def add_sink(
        self,
        sink: Sink | Callable[[OutboundMessage], Any],
        *,
        retry_count: int | None = None,
        max_message_size: int | None = None,
    ) -> None:
        """Register a sink (or callable) to receive messages.

        Parameters:
            sink:
                A :class:`Sink` instance **or** any callable that accepts
                an :class:`OutboundMessage`.
            retry_count:
                Override the sink's ``retry_count``.
            max_message_size:
                Override the sink's ``max_message_size``.
        """
        if not isinstance(sink, Sink):
            # Wrap bare callable in a CallbackSink
            sink = CallbackSink(sink)
        if retry_count is not None:
            sink.sink_config.retry_count = retry_count
        if max_message_size is not None:
            sink.sink_config.max_message_size = max_message_size

        self._runners.append(SinkRunner(sink))

    @property
    def sink_count(self) -> int:
        return len(self._runners)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect all sinks."""
        for runner in self._runners:
            await runner.start()

    async def stop(self) -> None:
        """Flush and close all sinks."""
        logger.info("Stopping %d sinks...", len(self._runners))
        for runner in self._runners:
            await runner.stop()

    # ------------------------------------------------------------------
    # Per-reading processing
    # ------------------------------------------------------------------

    async def process(self, reading: Reading) -> list[OutboundMessage]:
        """Evaluate one reading and deliver whatever it produces.

        Returns the messages that were produced (delivered or not).
        """
        now = reading.timestamp if reading.timestamp is not None else self.logic.now()
        produced: list[OutboundMessage] = []

        payload = self.logic.time_to_send(reading.temperature, reading.humidity, now)
        if payload is not None:
            message = OutboundMessage(kind=MessageKind.VALUE, text=payload, sensor_name=self.name, timestamp=now)
            produced.append(message)
            await self._deliver(message)

        report = self.logic.check_alarms()
        if report.triggered:
            message = OutboundMessage(
                kind=MessageKind.ALARM, text=report.message, sensor_name=self.name, timestamp=now
            )
            produced.append(message)
            if not await self._deliver(message):
                logger.warning("Alarm for '%s' not delivered - will fire again: %s", self.name, report.message)
                self.logic.alarm_delivery_failed()

        return produced

    async def _deliver(self, message: OutboundMessage) -> bool:
        """Deliver to every sink; ``True`` if at least one accepted it."""
        results = [await runner.deliver(message) for runner in self._runners]
        return any(results)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, readings: Iterable[Reading], interval_s: float = 0.0) -> None:
        """Blocking entry point - processes *readings* in order.

        Works inside environments that already have a running event loop
        (Jupyter, IPython) by spawning a dedicated background thread with
        its own loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None and loop.is_running():
            exc: list[BaseException | None] = [None]

            def _target() -> None:
                try:
                    asyncio.run(self.run_async(readings, interval_s=interval_s))
                except BaseException as e:
                    exc[0] = e

            t = threading.Thread(target=_target, daemon=True)
            t.start()
            t.join()
            if exc[0] is not None:
                raise exc[0]
        else:
            try:
                asyncio.run(self.run_async(readings, interval_s=interval_s))
            except KeyboardInterrupt:
                logger.info("Interrupted by user")

    async def run_async(
        self,
        readings: Iterable[Reading] | AsyncIterable[Reading],
        interval_s: float = 0.0,
    ) -> int:
        """Async entry point - processes readings until the source is exhausted.

        Parameters:
            readings: Sync or async iterable of readings.
            interval_s: Pause between readings (``0`` for replay at full speed).

        Returns:
            The number of readings processed.
        """
        if not self._runners:
            logger.warning("No sinks registered - nothing to do. Call add_sink() first.")
            return 0

        logger.info("Starting monitor '%s' with %d sinks", self.name, len(self._runners))
        await self.start()

        count = 0
        try:
            if isinstance(readings, AsyncIterable):
                async for reading in readings:
                    await self.process(reading)
                    count += 1
                    if interval_s > 0:
                        await asyncio.sleep(interval_s)
            else:
                for reading in readings:
                    await self.process(reading)
                    count += 1
                    if interval_s > 0:
                        await asyncio.sleep(interval_s)
        except asyncio.CancelledError:
            logger.info("Monitor cancelled")
        finally:
            await self.stop()

        logger.info("Processed %d readings", count)
        return count
