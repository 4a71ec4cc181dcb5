"""Change detection and alarm logic for a temperature / humidity sensor.

:class:`SensorLogic` decides when a fresh reading is worth sending
upstream and when a value crosses one of the four configured alarm
boundaries.  It performs no I/O: the caller feeds it raw readings and
transmits whatever it returns.

Example::

    logic = SensorLogic()
    logic.set_alarm_levels(30.0, True, 5.0, False, 80.0, False, 20.0, False)

    payload = logic.time_to_send(21.3, 47.2)
    if payload is not None:
        transport.send(payload)

    report = logic.check_alarms()
    if report.triggered and not transport.send(report.message):
        logic.alarm_delivery_failed()
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from humidity_sensor.alarms import AlarmLevels, AlarmSide, Quantity, ThresholdAlarm
from humidity_sensor.models import AlarmReport, format_payload

__all__ = [
    "DEFAULT_ALWAYS_SEND_TIMEOUT",
    "DEFAULT_HUMIDITY_DIFF",
    "DEFAULT_HYSTERESIS",
    "DEFAULT_TEMPERATURE_DIFF",
    "SensorLogic",
]

logger = logging.getLogger("humidity_sensor.logic")

DEFAULT_TEMPERATURE_DIFF = 0.3
DEFAULT_HUMIDITY_DIFF = 2.0
DEFAULT_HYSTERESIS = 5.0
DEFAULT_ALWAYS_SEND_TIMEOUT = 3600.0


class SensorLogic:
    """Send decision and alarm state for one physical sensor.

    All alarms are disabled after construction.

    Parameters:
        clock:
            Returns seconds since an epoch.  Read once per
            :meth:`should_send` call when no explicit ``now`` is given.
        always_send_timeout:
            Seconds after which a reading is sent even if unchanged.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        always_send_timeout: float = DEFAULT_ALWAYS_SEND_TIMEOUT,
    ) -> None:
        self._clock = clock

        self.temperature_offset = 0.0
        self.humidity_offset = 0.0

        self.temperature_diff_max = DEFAULT_TEMPERATURE_DIFF
        self.humidity_diff_max = DEFAULT_HUMIDITY_DIFF
        self.always_send_timeout = always_send_timeout

        self.temperature_work = 0.0
        self.humidity_work = 0.0

        self.temperature_sent = 0.0
        self.humidity_sent = 0.0
        self.last_send_time = 0.0

        levels = AlarmLevels()
        # Evaluation order is also the order of clauses in the alarm message.
        self.high_temperature = ThresholdAlarm(
            Quantity.TEMPERATURE, AlarmSide.HIGH, levels.high_temperature, DEFAULT_HYSTERESIS
        )
        self.low_temperature = ThresholdAlarm(
            Quantity.TEMPERATURE, AlarmSide.LOW, levels.low_temperature, DEFAULT_HYSTERESIS
        )
        self.high_humidity = ThresholdAlarm(
            Quantity.HUMIDITY, AlarmSide.HIGH, levels.high_humidity, DEFAULT_HYSTERESIS
        )
        self.low_humidity = ThresholdAlarm(
            Quantity.HUMIDITY, AlarmSide.LOW, levels.low_humidity, DEFAULT_HYSTERESIS
        )

    # ------------------------------------------------------------------
    # Send decision
    # ------------------------------------------------------------------

    def now(self) -> float:
        """One read of the clock."""
        return self._clock()

    def should_send(self, raw_temperature: float, raw_humidity: float, now: float | None = None) -> bool:
        """Is it time to send a new value to the server?

        Triggered either by timeout or by a change larger than the
        configured diff since the last sent value.  The calibrated working
        values are updated on every call; the sent snapshot only when the
        answer is ``True``.

        Parameters:
            raw_temperature: New temperature in deg C.
            raw_humidity: New relative humidity in 0..100 %.
            now: Evaluation timestamp; defaults to one read of the clock.
        """
        self.temperature_work = raw_temperature + self.temperature_offset
        self.humidity_work = raw_humidity + self.humidity_offset

        if now is None:
            now = self.now()

        reason = self._send_reason(now)
        if reason is None:
            return False

        logger.debug(
            "Sending temperature=%.2f rh=%.2f (%s)",
            self.temperature_work,
            self.humidity_work,
            reason,
        )
        self.temperature_sent = self.temperature_work
        self.humidity_sent = self.humidity_work
        # Never move backwards, even if the clock does.
        self.last_send_time = max(self.last_send_time, now)
        return True

    def time_to_send(self, raw_temperature: float, raw_humidity: float, now: float | None = None) -> str | None:
        """Return the formatted payload if the reading should be sent, else ``None``."""
        if self.should_send(raw_temperature, raw_humidity, now):
            return self.payload()
        return None

    def payload(self) -> str:
        """Format the current calibrated working values."""
        return format_payload(self.temperature_work, self.humidity_work)

    def _send_reason(self, now: float) -> str | None:
        if self.last_send_time == 0 or now - self.last_send_time >= self.always_send_timeout:
            return "timeout"

        if self.temperature_work > self.temperature_sent:
            if _exceeds(self.temperature_work - self.temperature_sent, self.temperature_diff_max):
                return "temperature rise"

        if self.humidity_work > self.humidity_sent:
            if _exceeds(self.humidity_work - self.humidity_sent, self.humidity_diff_max):
                return "humidity rise"

        if self.temperature_work < self.temperature_sent:
            if _exceeds(self.temperature_sent - self.temperature_work, self.temperature_diff_max):
                return "temperature drop"

        if self.humidity_work < self.humidity_sent:
            if _exceeds(self.humidity_sent - self.humidity_work, self.humidity_diff_max):
                return "humidity drop"

        return None

    # ------------------------------------------------------------------
    # Alarms
    # ------------------------------------------------------------------

    @property
    def alarms(self) -> tuple[ThresholdAlarm, ThresholdAlarm, ThresholdAlarm, ThresholdAlarm]:
        """The four alarms in evaluation order."""
        return (self.high_temperature, self.low_temperature, self.high_humidity, self.low_humidity)

    def check_alarms(self) -> AlarmReport:
        """Check the current working values against all alarms.

        Uses the values from the most recent :meth:`should_send` call,
        whether or not that call decided to send.
        """
        clauses: list[str] = []
        for alarm in self.alarms:
            value = self.temperature_work if alarm.quantity is Quantity.TEMPERATURE else self.humidity_work
            clause = alarm.evaluate(value)
            if clause is not None:
                logger.info("%s %s alarm latched at %.2f", alarm.side, alarm.quantity, value)
                clauses.append(clause)

        return AlarmReport(triggered=bool(clauses), clauses=clauses)

    def alarm_delivery_failed(self) -> None:
        """Tell the logic that the last alarm was not delivered.

        Every latch is reset so that alarms whose condition still holds
        fire again on the next evaluation.
        """
        for alarm in self.alarms:
            alarm.reset()
        logger.debug("Alarm delivery failed - all alarm latches reset")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_alarm_levels(
        self,
        high_temperature: float,
        high_temperature_active: bool,
        low_temperature: float,
        low_temperature_active: bool,
        high_humidity: float,
        high_humidity_active: bool,
        low_humidity: float,
        low_humidity_active: bool,
    ) -> None:
        """Activate and set levels for the high and low alarms.

        All eight values are replaced together and every latch is reset,
        even if nothing changed.
        """
        self.apply_alarm_levels(
            AlarmLevels(
                high_temperature=high_temperature,
                high_temperature_active=high_temperature_active,
                low_temperature=low_temperature,
                low_temperature_active=low_temperature_active,
                high_humidity=high_humidity,
                high_humidity_active=high_humidity_active,
                low_humidity=low_humidity,
                low_humidity_active=low_humidity_active,
            )
        )

    def apply_alarm_levels(self, levels: AlarmLevels) -> None:
        """Same as :meth:`set_alarm_levels`, from an :class:`AlarmLevels` model."""
        for alarm, boundary, active in (
            (self.high_temperature, levels.high_temperature, levels.high_temperature_active),
            (self.low_temperature, levels.low_temperature, levels.low_temperature_active),
            (self.high_humidity, levels.high_humidity, levels.high_humidity_active),
            (self.low_humidity, levels.low_humidity, levels.low_humidity_active),
        ):
            alarm.reset()
            alarm.boundary = boundary
            alarm.active = active
        logger.info("Alarm levels set: %s", levels)

    @property
    def alarm_levels(self) -> AlarmLevels:
        """The current boundaries and active flags as one model."""
        return AlarmLevels(
            high_temperature=self.high_temperature.boundary,
            high_temperature_active=self.high_temperature.active,
            low_temperature=self.low_temperature.boundary,
            low_temperature_active=self.low_temperature.active,
            high_humidity=self.high_humidity.boundary,
            high_humidity_active=self.high_humidity.active,
            low_humidity=self.low_humidity.boundary,
            low_humidity_active=self.low_humidity.active,
        )

    def set_alarm_hysteresis(self, temperature: float, humidity: float) -> None:
        """Set the hysteresis margin shared by each high/low pair."""
        self.high_temperature.hysteresis = temperature
        self.low_temperature.hysteresis = temperature
        self.high_humidity.hysteresis = humidity
        self.low_humidity.hysteresis = humidity

    def set_diff_to_send(self, temperature: float, humidity: float) -> None:
        """How much must the value change before we send it?

        A reading is sent directly when it differs from the last sent
        value by more than the given amount.
        """
        self.temperature_diff_max = temperature
        self.humidity_diff_max = humidity

    def set_value_offset(self, temperature: float, humidity: float) -> None:
        """Offsets added to every raw reading, to correct a static measurement error."""
        self.temperature_offset = temperature
        self.humidity_offset = humidity

    def set_always_send_timeout(self, seconds: float) -> None:
        """Send at least once every *seconds*, even if nothing changed."""
        self.always_send_timeout = seconds


def _exceeds(delta: float, limit: float) -> bool:
    """Strict ``delta > limit`` where a delta equal to the limit up to rounding does not count."""
    return delta > limit and not math.isclose(delta, limit, rel_tol=1e-9)
