"""Tests for humidity_sensor.alarms – ThresholdAlarm state machine and AlarmLevels."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from humidity_sensor.alarms import AlarmLevels, AlarmSide, Quantity, ThresholdAlarm

# -----------------------------------------------------------------------
# High-side alarm
# -----------------------------------------------------------------------


class TestHighAlarm:
    """Latching above the boundary and clearing below boundary - hysteresis."""

    @pytest.fixture()
    def alarm(self) -> ThresholdAlarm:
        return ThresholdAlarm(Quantity.TEMPERATURE, AlarmSide.HIGH, 30.0, 5.0, active=True)

    def test_starts_idle(self, alarm: ThresholdAlarm) -> None:
        assert alarm.latched is False

    def test_latches_above_boundary(self, alarm: ThresholdAlarm) -> None:
        clause = alarm.evaluate(31.0)
        assert clause == " : High Temperature=31.00(30.00)"
        assert alarm.latched is True

    def test_value_at_boundary_does_not_latch(self, alarm: ThresholdAlarm) -> None:
        assert alarm.evaluate(30.0) is None
        assert alarm.latched is False

    def test_latched_alarm_is_silent(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(31.0)
        assert alarm.evaluate(35.0) is None
        assert alarm.latched is True

    def test_stays_latched_inside_band(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(31.0)
        assert alarm.evaluate(29.0) is None
        assert alarm.evaluate(25.0) is None
        assert alarm.latched is True

    def test_clears_below_band(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(31.0)
        assert alarm.evaluate(24.0) is None
        assert alarm.latched is False

    def test_relatches_after_clearing(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(31.0)
        alarm.evaluate(24.0)
        assert alarm.evaluate(31.0) == " : High Temperature=31.00(30.00)"


# -----------------------------------------------------------------------
# Low-side alarm
# -----------------------------------------------------------------------


class TestLowAlarm:
    """Mirror image of the high-side alarm."""

    @pytest.fixture()
    def alarm(self) -> ThresholdAlarm:
        return ThresholdAlarm(Quantity.HUMIDITY, AlarmSide.LOW, 20.0, 5.0, active=True)

    def test_latches_below_boundary(self, alarm: ThresholdAlarm) -> None:
        assert alarm.evaluate(19.5) == " : Low Humidity=19.50(20.00)"
        assert alarm.latched is True

    def test_stays_latched_inside_band(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(10.0)
        assert alarm.evaluate(25.0) is None
        assert alarm.latched is True

    def test_clears_above_band(self, alarm: ThresholdAlarm) -> None:
        alarm.evaluate(10.0)
        alarm.evaluate(25.5)
        assert alarm.latched is False


# -----------------------------------------------------------------------
# Inactive alarms and reset
# -----------------------------------------------------------------------


class TestInactiveAlarm:
    """An inactive alarm never latches but still clears a stale latch."""

    def test_inactive_never_latches(self) -> None:
        alarm = ThresholdAlarm(Quantity.TEMPERATURE, AlarmSide.HIGH, 30.0, 5.0, active=False)
        assert alarm.evaluate(40.0) is None
        assert alarm.latched is False

    def test_inactive_clears_stale_latch(self) -> None:
        alarm = ThresholdAlarm(Quantity.TEMPERATURE, AlarmSide.HIGH, 30.0, 5.0, active=True)
        alarm.evaluate(31.0)
        alarm.active = False
        alarm.evaluate(20.0)
        assert alarm.latched is False

    def test_reset_unlatches(self) -> None:
        alarm = ThresholdAlarm(Quantity.TEMPERATURE, AlarmSide.LOW, 5.0, 5.0, active=True)
        alarm.evaluate(0.0)
        alarm.reset()
        assert alarm.latched is False
        assert alarm.evaluate(0.0) == " : Low Temperature=0.00(5.00)"


# -----------------------------------------------------------------------
# AlarmLevels
# -----------------------------------------------------------------------


class TestAlarmLevels:
    """AlarmLevels defaults and immutability."""

    def test_defaults_are_inactive(self) -> None:
        levels = AlarmLevels()
        assert not levels.high_temperature_active
        assert not levels.low_temperature_active
        assert not levels.high_humidity_active
        assert not levels.low_humidity_active

    def test_frozen(self) -> None:
        levels = AlarmLevels()
        with pytest.raises(ValidationError, match="frozen"):
            levels.high_temperature = 10.0  # type: ignore[misc]
