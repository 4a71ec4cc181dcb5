#!/usr/bin/env python3
"""Alarm delivery examples -- 3 cases showing hysteresis, combined alarms,
and re-firing after a failed delivery.

Directly runnable (no external services required).

Usage::

    python examples/alarm_delivery_example.py           # Case 1 (default)
    python examples/alarm_delivery_example.py --case 2   # Combined alarms
    python examples/alarm_delivery_example.py --case 3   # Flaky uplink
"""

from __future__ import annotations

import argparse

# ---------------------------------------------------------------------------
# Case 1: Hysteresis -- one alarm per excursion
# ---------------------------------------------------------------------------


def run_case_1() -> None:
    """A slow warm-up, a dip inside the hysteresis band and a second peak.

    Knobs demonstrated:
      - set_alarm_levels      -> only the high temperature alarm is active
      - set_alarm_hysteresis  -> 2 degrees: the latch clears below 28
    """
    from humidity_sensor import Monitor, Reading, SensorLogic
    from humidity_sensor.sinks import ConsoleSink

    print("=== Case 1: Hysteresis ===\n")

    logic = SensorLogic()
    logic.set_alarm_levels(30.0, True, 5.0, False, 80.0, False, 20.0, False)
    logic.set_alarm_hysteresis(2.0, 5.0)

    temperatures = [27.0, 29.5, 30.4, 31.0, 29.0, 30.6, 27.5, 30.2]
    readings = [Reading(temperature=t, humidity=45.0, timestamp=60.0 * (i + 1)) for i, t in enumerate(temperatures)]

    monitor = Monitor(logic, name="greenhouse")
    monitor.add_sink(ConsoleSink())
    monitor.run(readings)


# ---------------------------------------------------------------------------
# Case 2: Combined alarms -- several clauses in one message
# ---------------------------------------------------------------------------


def run_case_2() -> None:
    """Hot and dry at the same time produces one message with both clauses.

    Knobs demonstrated:
      - all four alarms active
      - max_message_size=40  -> a small transport frame drops trailing clauses
    """
    from humidity_sensor import Monitor, Reading, SensorLogic
    from humidity_sensor.sinks import ConsoleSink

    print("=== Case 2: Combined alarms ===\n")

    logic = SensorLogic()
    logic.set_alarm_levels(30.0, True, 5.0, True, 80.0, True, 20.0, True)

    monitor = Monitor(logic, name="attic")
    monitor.add_sink(ConsoleSink())
    monitor.add_sink(ConsoleSink(), max_message_size=40)
    monitor.run([Reading(temperature=34.2, humidity=12.5, timestamp=60.0)])


# ---------------------------------------------------------------------------
# Case 3: Flaky uplink -- alarms fire again until delivered
# ---------------------------------------------------------------------------


def run_case_3() -> None:
    """The first two alarm deliveries fail; the alarm repeats until one succeeds.

    Knobs demonstrated:
      - CallbackSink raising  -> delivery failure
      - retry_count=1         -> no in-place retries, rely on re-firing
    """
    from humidity_sensor import MessageKind, Monitor, Reading, SensorLogic
    from humidity_sensor.sinks.callback import CallbackSink

    print("=== Case 3: Flaky uplink ===\n")

    failures = {"left": 2}

    def uplink(message):
        if message.kind is MessageKind.ALARM and failures["left"] > 0:
            failures["left"] -= 1
            print(f"  uplink down, lost: {message.text}")
            raise ConnectionError("uplink down")
        print(f"  sent: {message.text}")

    logic = SensorLogic()
    logic.set_alarm_levels(30.0, False, 5.0, False, 80.0, True, 20.0, False)

    readings = [Reading(temperature=21.0, humidity=85.0, timestamp=60.0 * (i + 1)) for i in range(4)]

    monitor = Monitor(logic, name="bathroom")
    monitor.add_sink(CallbackSink(uplink, retry_count=1))
    monitor.run(readings)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(description="Alarm delivery examples")
    parser.add_argument(
        "--case", type=int, default=1, choices=[1, 2, 3], help="Which example case to run (default: 1)"
    )
    args = parser.parse_args()

    cases = {
        1: run_case_1,
        2: run_case_2,
        3: run_case_3,
    }
    cases[args.case]()


if __name__ == "__main__":
    main()
