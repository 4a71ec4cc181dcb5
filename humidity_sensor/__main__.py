"""CLI entry point for the humidity sensor logic.

Usage::

    humidity-sensor replay readings.csv
    humidity-sensor replay readings.csv --config sensor.yaml -s console -s file -o ./out
    humidity-sensor check 31.2 45.0 --high-temperature 30
    humidity-sensor list-sinks
    humidity-sensor init-config --output sensor.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap

# ---------------------------------------------------------------------------
# Sample YAML config template for init-config
# ---------------------------------------------------------------------------
_SAMPLE_CONFIG = """\
# Humidity sensor configuration

sensor:
  name: livingroom
  temperature_offset: 0.0             # added to every raw temperature (deg C)
  humidity_offset: 0.0                # added to every raw humidity (%RH)
  temperature_diff: 0.3               # send when temperature moves more than this
  humidity_diff: 2.0                  # send when humidity moves more than this
  always_send_timeout_s: 3600         # send at least this often (seconds)

alarms:
  high_temperature: {level: 30.0, active: true}
  low_temperature:  {level: 5.0,  active: false}
  high_humidity:    {level: 80.0, active: false}
  low_humidity:     {level: 20.0, active: false}
  hysteresis:
    temperature: 5.0                  # shared by high/low temperature alarms
    humidity: 5.0                     # shared by high/low humidity alarms

# Sinks receive value and alarm messages.
sinks:
  - type: console
    fmt: text                         # text or json

  # - type: file
  #   path: ./output
  #   format: csv                     # csv or json
  #   rotation: 1d                    # rotate files: 30s, 5m, 1h, 1d
  #   max_message_size: 128           # truncate long alarm messages

# log_level: INFO                     # DEBUG, INFO, WARNING, ERROR
"""


# ======================================================================
# Main entry point
# ======================================================================


def main(argv: list[str] | None = None) -> None:
    epilog = textwrap.dedent("""\
        examples:
          humidity-sensor replay readings.csv
          humidity-sensor replay readings.csv --config sensor.yaml
          humidity-sensor replay readings.csv -s console -s file -o ./out --output-format json
          humidity-sensor check 31.2 45.0 --high-temperature 30
          humidity-sensor list-sinks
          humidity-sensor init-config --output sensor.yaml
    """)

    parser = argparse.ArgumentParser(
        prog="humidity-sensor",
        description="Change detection and threshold alarms for temperature / humidity readings.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    # -- replay ------------------------------------------------------------
    replay_parser = subparsers.add_parser(
        "replay",
        help="Feed recorded readings from a CSV file through the logic.",
    )
    replay_parser.add_argument(
        "readings",
        type=str,
        help="CSV file with columns temperature, humidity and optional timestamp.",
    )
    replay_parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML config file. When set, --sink/--output-* flags are ignored.",
    )
    replay_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first malformed row instead of skipping it.",
    )
    replay_parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )
    replay_parser.add_argument(
        "--sink",
        "-s",
        action="append",
        dest="sinks",
        choices=["console", "file"],
        help="Sink(s) to enable (repeatable). Default: console.",
    )
    replay_parser.add_argument(
        "--format",
        type=str,
        default="text",
        choices=["text", "json"],
        help="Console sink output format (default: text).",
    )
    replay_parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        default="./output",
        help="Output directory for the file sink (default: ./output).",
    )
    replay_parser.add_argument(
        "--output-format",
        type=str,
        default="csv",
        choices=["csv", "json"],
        help="File sink format (default: csv).",
    )

    # -- check -------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        help="Evaluate a single reading against the alarm levels.",
    )
    check_parser.add_argument("temperature", type=str, help="Raw temperature (deg C).")
    check_parser.add_argument("humidity", type=str, help="Raw relative humidity (%%).")
    check_parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML config file.")
    for flag in ("high-temperature", "low-temperature", "high-humidity", "low-humidity"):
        check_parser.add_argument(
            f"--{flag}",
            type=float,
            default=None,
            help=f"Activate the {flag.replace('-', ' ')} alarm at this level.",
        )

    # -- list-sinks --------------------------------------------------------
    subparsers.add_parser(
        "list-sinks",
        help="List all available sink types.",
    )

    # -- init-config -------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init-config",
        help="Generate a sample YAML configuration file.",
    )
    init_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write config to this file instead of stdout.",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return

    # -- Dispatch ----------------------------------------------------------
    if args.command == "replay":
        _cmd_replay(args)
    elif args.command == "check":
        _cmd_check(args)
    elif args.command == "list-sinks":
        _cmd_list_sinks()
    elif args.command == "init-config":
        _cmd_init_config(args.output)
    else:
        parser.print_help()


# ======================================================================
# Command implementations
# ======================================================================


def _cmd_replay(args: argparse.Namespace) -> None:
    """Replay a CSV file of readings through a monitor."""
    from humidity_sensor.config import SensorLogicConfig, load_yaml_config
    from humidity_sensor.monitor import Monitor
    from humidity_sensor.readings import load_readings_csv
    from humidity_sensor.sinks.factory import create_sink

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)-30s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        readings = load_readings_csv(args.readings, strict=args.strict)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    if args.config:
        cfg = load_yaml_config(args.config)
        logging.getLogger().setLevel(getattr(logging, cfg.log_level, logging.INFO))
        sink_dicts = cfg.sink_configs or [{"type": "console"}]
    else:
        cfg = SensorLogicConfig()
        sink_dicts = []
        for name in args.sinks or ["console"]:
            if name == "console":
                sink_dicts.append({"type": "console", "fmt": args.format})
            elif name == "file":
                sink_dicts.append({"type": "file", "path": args.output_dir, "format": args.output_format})

    monitor = Monitor(cfg.build_logic(), name=cfg.name)
    for sink_dict in sink_dicts:
        monitor.add_sink(create_sink(sink_dict))

    monitor.run(readings)


def _cmd_check(args: argparse.Namespace) -> None:
    """Evaluate one reading and print the payload and alarm result."""
    from humidity_sensor.alarms import AlarmLevels
    from humidity_sensor.config import SensorLogicConfig, load_yaml_config
    from humidity_sensor.readings import parse_reading

    try:
        reading = parse_reading(args.temperature, args.humidity)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    cfg = load_yaml_config(args.config) if args.config else SensorLogicConfig()

    overrides = {}
    for key in ("high_temperature", "low_temperature", "high_humidity", "low_humidity"):
        level = getattr(args, key)
        if level is not None:
            overrides[key] = level
            overrides[f"{key}_active"] = True
    if overrides:
        levels = AlarmLevels(**{**cfg.alarm_levels.model_dump(), **overrides})
        cfg = cfg.model_copy(update={"alarm_levels": levels})

    logic = cfg.build_logic()
    print(logic.time_to_send(reading.temperature, reading.humidity))
    report = logic.check_alarms()
    if report.triggered:
        print(report.message)
    else:
        print("No alarm")


# -- list-sinks ------------------------------------------------------------


def _cmd_list_sinks() -> None:
    from humidity_sensor.sinks.factory import _SINK_REGISTRY

    print(f"\n{'Sink Type':<14} {'Class'}")
    print("-" * 34)
    for name, (_module_path, class_name) in _SINK_REGISTRY.items():
        print(f"{name:<14} {class_name}")
    print()


# -- init-config ------------------------------------------------------------


def _cmd_init_config(output_path: str | None) -> None:
    if output_path:
        from pathlib import Path

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(_SAMPLE_CONFIG)
        print(f"Sample config written to {output_path}")
    else:
        print(_SAMPLE_CONFIG)


# ======================================================================
if __name__ == "__main__":
    main()
