"""Tests for humidity_sensor.readings – value parsing and CSV loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from humidity_sensor.readings import load_readings_csv, parse_reading, parse_value


class TestParseValue:
    def test_valid(self) -> None:
        assert parse_value(" 21.5 ") == 21.5

    def test_not_a_number(self) -> None:
        with pytest.raises(ValueError, match="not a number"):
            parse_value("warm", "temperature")

    def test_nan_rejected(self) -> None:
        with pytest.raises(ValueError, match="not finite"):
            parse_value("nan")


class TestParseReading:
    def test_without_timestamp(self) -> None:
        reading = parse_reading("21.3", "47.2")
        assert reading.temperature == 21.3
        assert reading.humidity == 47.2
        assert reading.timestamp is None

    def test_blank_timestamp_ignored(self) -> None:
        assert parse_reading("21.3", "47.2", "").timestamp is None

    def test_with_timestamp(self) -> None:
        assert parse_reading("21.3", "47.2", "1700000000").timestamp == 1_700_000_000.0


class TestLoadReadingsCSV:
    """load_readings_csv with good, bad and missing input."""

    def test_loads_rows(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("timestamp,temperature,humidity\n1700000000,21.3,47.2\n1700000060,21.4,47.0\n")
        readings = load_readings_csv(csv_file)
        assert len(readings) == 2
        assert readings[1].timestamp == 1_700_000_060.0

    def test_timestamp_column_optional(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("temperature,humidity\n21.3,47.2\n")
        readings = load_readings_csv(csv_file)
        assert readings[0].timestamp is None

    def test_bad_row_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("temperature,humidity\n21.3,47.2\nerr,47.0\n21.5,47.1\n")
        readings = load_readings_csv(csv_file)
        assert len(readings) == 2
        assert "line 3" in caplog.text

    def test_bad_row_strict(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("temperature,humidity\nerr,47.0\n")
        with pytest.raises(ValueError, match=":2:"):
            load_readings_csv(csv_file, strict=True)

    def test_blank_timestamp_row_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("timestamp,temperature,humidity\n100,21.0,50.0\n,21.0,50.0\n5000,21.0,50.0\n")
        readings = load_readings_csv(csv_file)
        assert [r.timestamp for r in readings] == [100.0, 5000.0]
        assert "line 3: missing timestamp" in caplog.text

    def test_blank_timestamp_row_strict(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("timestamp,temperature,humidity\n100,21.0,50.0\n  ,21.0,50.0\n")
        with pytest.raises(ValueError, match=":3: missing timestamp"):
            load_readings_csv(csv_file, strict=True)

    def test_missing_column(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "readings.csv"
        csv_file.write_text("temperature\n21.3\n")
        with pytest.raises(ValueError, match="humidity"):
            load_readings_csv(csv_file)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_readings_csv(tmp_path / "nope.csv")
