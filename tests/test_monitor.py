"""Tests for humidity_sensor.monitor - Monitor wiring, per-reading delivery, run."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from humidity_sensor.logic import SensorLogic
from humidity_sensor.models import MessageKind, OutboundMessage, Reading
from humidity_sensor.monitor import Monitor
from humidity_sensor.readings import load_readings_csv
from humidity_sensor.sinks.callback import CallbackSink
from humidity_sensor.sinks.console import ConsoleSink


def _alarming_logic() -> SensorLogic:
    logic = SensorLogic(clock=lambda: 1_700_000_000.0)
    logic.set_alarm_levels(30.0, True, 5.0, False, 80.0, False, 20.0, False)
    return logic


# -----------------------------------------------------------------------
# Sink registration
# -----------------------------------------------------------------------


class TestMonitorSinks:
    """add_sink with Sink instances and bare callables."""

    def test_add_sink_with_sink_instance(self) -> None:
        monitor = Monitor()
        monitor.add_sink(ConsoleSink(stream=io.StringIO()))
        assert monitor.sink_count == 1

    def test_add_sink_with_callable(self) -> None:
        monitor = Monitor()
        monitor.add_sink(lambda message: None)
        assert isinstance(monitor._runners[0].sink, CallbackSink)

    def test_overrides(self) -> None:
        monitor = Monitor()
        monitor.add_sink(lambda message: None, retry_count=1, max_message_size=20)
        assert monitor._runners[0].cfg.retry_count == 1
        assert monitor._runners[0].cfg.max_message_size == 20


# -----------------------------------------------------------------------
# process()
# -----------------------------------------------------------------------


class TestMonitorProcess:
    """The caller contract: payload on send, alarm only when triggered."""

    @pytest.mark.asyncio
    async def test_first_reading_sends_value(self) -> None:
        received: list[OutboundMessage] = []
        monitor = Monitor(SensorLogic(), name="attic")
        monitor.add_sink(received.append)

        produced = await monitor.process(Reading(temperature=21.34, humidity=47.2, timestamp=100.0))

        assert produced == received
        assert len(received) == 1
        assert received[0].kind is MessageKind.VALUE
        assert received[0].text == "temperature=21.34 ; rh=47.20%"
        assert received[0].sensor_name == "attic"
        assert received[0].timestamp == 100.0

    @pytest.mark.asyncio
    async def test_unchanged_reading_sends_nothing(self) -> None:
        received: list[OutboundMessage] = []
        monitor = Monitor(SensorLogic())
        monitor.add_sink(received.append)

        await monitor.process(Reading(temperature=21.0, humidity=47.0, timestamp=100.0))
        produced = await monitor.process(Reading(temperature=21.1, humidity=47.5, timestamp=160.0))

        assert produced == []
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_alarm_delivered_once(self) -> None:
        received: list[OutboundMessage] = []
        monitor = Monitor(_alarming_logic())
        monitor.add_sink(received.append)

        await monitor.process(Reading(temperature=31.0, humidity=50.0))
        await monitor.process(Reading(temperature=31.0, humidity=50.0))

        alarms = [m for m in received if m.kind is MessageKind.ALARM]
        assert len(alarms) == 1
        assert alarms[0].text == "Alarm : High Temperature=31.00(30.00)"

    @pytest.mark.asyncio
    async def test_failed_alarm_refires(self) -> None:
        attempts: list[OutboundMessage] = []
        fail = [True]

        async def transport(message: OutboundMessage) -> None:
            attempts.append(message)
            if fail[0] and message.kind is MessageKind.ALARM:
                raise ConnectionError("uplink down")

        logic = _alarming_logic()
        monitor = Monitor(logic)
        monitor.add_sink(CallbackSink(transport, retry_count=1, retry_delay_s=0.0))

        await monitor.process(Reading(temperature=31.0, humidity=50.0))
        assert logic.high_temperature.latched is False

        fail[0] = False
        await monitor.process(Reading(temperature=31.0, humidity=50.0))
        assert logic.high_temperature.latched is True

        alarm_texts = [m.text for m in attempts if m.kind is MessageKind.ALARM]
        assert alarm_texts == ["Alarm : High Temperature=31.00(30.00)"] * 2

    @pytest.mark.asyncio
    async def test_one_working_sink_is_enough(self) -> None:
        received: list[OutboundMessage] = []

        def broken(message: OutboundMessage) -> None:
            raise ConnectionError("down")

        logic = _alarming_logic()
        monitor = Monitor(logic)
        monitor.add_sink(CallbackSink(broken, retry_count=1, retry_delay_s=0.0))
        monitor.add_sink(received.append)

        await monitor.process(Reading(temperature=31.0, humidity=50.0))
        assert logic.high_temperature.latched is True
        assert any(m.kind is MessageKind.ALARM for m in received)


# -----------------------------------------------------------------------
# run / run_async
# -----------------------------------------------------------------------


class TestMonitorRun:
    """Monitor.run / run_async over a finite list of readings."""

    _READINGS = [
        Reading(temperature=21.0, humidity=50.0, timestamp=0.5),
        Reading(temperature=21.1, humidity=50.0, timestamp=60.0),
        Reading(temperature=22.0, humidity=50.0, timestamp=120.0),
        Reading(temperature=31.0, humidity=50.0, timestamp=180.0),
    ]

    def test_run_with_callback(self) -> None:
        received: list[OutboundMessage] = []
        monitor = Monitor(_alarming_logic())
        monitor.add_sink(received.append)
        monitor.run(self._READINGS)

        assert [m.kind for m in received] == [
            MessageKind.VALUE,
            MessageKind.VALUE,
            MessageKind.VALUE,
            MessageKind.ALARM,
        ]

    @pytest.mark.asyncio
    async def test_run_async_counts_readings(self) -> None:
        monitor = Monitor()
        monitor.add_sink(lambda message: None)
        assert await monitor.run_async(self._READINGS) == 4

    @pytest.mark.asyncio
    async def test_run_async_with_async_source(self) -> None:
        async def source():
            for reading in self._READINGS:
                yield reading

        received: list[OutboundMessage] = []
        monitor = Monitor()
        monitor.add_sink(received.append)
        assert await monitor.run_async(source()) == 4
        assert len(received) == 3

    @pytest.mark.asyncio
    async def test_run_inside_running_loop(self) -> None:
        received: list[OutboundMessage] = []
        monitor = Monitor(_alarming_logic())
        monitor.add_sink(received.append)
        monitor.run(self._READINGS)

        assert [m.kind for m in received] == [
            MessageKind.VALUE,
            MessageKind.VALUE,
            MessageKind.VALUE,
            MessageKind.ALARM,
        ]

    @pytest.mark.asyncio
    async def test_run_inside_running_loop_reraises(self) -> None:
        def broken_source():
            yield Reading(temperature=21.0, humidity=50.0, timestamp=1.0)
            raise RuntimeError("sensor gone")

        monitor = Monitor()
        monitor.add_sink(lambda message: None)
        with pytest.raises(RuntimeError, match="sensor gone"):
            monitor.run(broken_source())

    def test_replay_csv_with_blank_timestamp(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text(
            "timestamp,temperature,humidity\n100,21.0,50.0\n,21.0,50.0\n5000,21.0,50.0\n10000,21.0,50.0\n"
        )
        received: list[OutboundMessage] = []
        monitor = Monitor(SensorLogic(clock=lambda: 1_792_206_866.0, always_send_timeout=3600.0))
        monitor.add_sink(received.append)
        monitor.run(load_readings_csv(csv_file))

        assert [m.timestamp for m in received] == [100.0, 5000.0, 10000.0]

    def test_run_no_sinks_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        monitor = Monitor()
        monitor.run(self._READINGS)
        assert "No sinks registered" in caplog.text
