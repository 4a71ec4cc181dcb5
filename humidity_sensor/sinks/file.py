"""File sink - appends outbound messages to CSV or JSON Lines files
with optional time-based rotation.
"""

from __future__ import annotations

import csv
import logging
import time
from pathlib import Path
from typing import IO, Any, ClassVar

from humidity_sensor.models import OutboundMessage
from humidity_sensor.sinks.base import Sink

__all__ = ["FileSink"]

logger = logging.getLogger("humidity_sensor.sinks.file")


def _parse_rotation(rotation: str | None) -> float | None:
    """Convert a human-readable rotation interval to seconds.

    Accepted formats: ``"30s"``, ``"5m"``, ``"1h"``, ``"1d"``.
    Returns ``None`` if rotation is disabled.
    """
    if not rotation:
        return None
    rotation = rotation.strip().lower()
    if rotation.endswith("s"):
        return float(rotation[:-1])
    if rotation.endswith("m"):
        return float(rotation[:-1]) * 60
    if rotation.endswith("h"):
        return float(rotation[:-1]) * 3600
    if rotation.endswith("d"):
        return float(rotation[:-1]) * 86400
    return float(rotation)  # assume seconds


class FileSink(Sink):
    """Write messages to local files (CSV or JSON Lines).

    Parameters:
        path: Output directory (created automatically).
        format: ``"csv"`` or ``"json"``.
        rotation: Rotate to a new file periodically - e.g. ``"1h"``,
                  ``"30m"``, ``"60s"``.  ``None`` means single file.
        **kwargs: Forwarded to :class:`Sink`.
    """

    _EXTENSIONS: ClassVar[dict[str, str]] = {"csv": "csv", "json": "jsonl"}
    _CSV_FIELDS: ClassVar[list[str]] = ["timestamp", "sensor_name", "kind", "text"]

    def __init__(
        self,
        *,
        path: str = "./output",
        format: str = "csv",
        rotation: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._dir = Path(path)
        self._format = format.lower()
        if self._format not in self._EXTENSIONS:
            raise ValueError(f"Unknown file format: {format}")
        self._rotation_s = _parse_rotation(rotation)
        self._current_file: IO[str] | None = None
        self._csv_writer: csv.DictWriter[str] | None = None
        self._file_start_time: float = 0.0

    @property
    def current_path(self) -> Path | None:
        if self._current_file is None:
            return None
        return Path(self._current_file.name)

    async def connect(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        self._open_new_file()
        logger.info("FileSink writing %s to %s", self._format, self._dir)

    async def write(self, message: OutboundMessage) -> None:
        if self._current_file is None:
            raise RuntimeError("FileSink is not connected")

        if self._rotation_s and (time.time() - self._file_start_time >= self._rotation_s):
            self._close_current_file()
            self._open_new_file()

        if self._format == "csv":
            self._write_csv(message)
        else:
            self._current_file.write(message.to_json() + "\n")
        self._current_file.flush()

    async def flush(self) -> None:
        if self._current_file and not self._current_file.closed:
            self._current_file.flush()

    async def close(self) -> None:
        await self.flush()
        self._close_current_file()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _timestamp_suffix(self) -> str:
        return time.strftime("%Y%m%d_%H%M%S", time.localtime())

    def _open_new_file(self) -> None:
        name = f"sensor_messages_{self._timestamp_suffix()}.{self._EXTENSIONS[self._format]}"
        filepath = self._dir / name
        self._current_file = open(filepath, "a", newline="", encoding="utf-8")  # noqa: SIM115
        self._csv_writer = None  # will init on first write
        self._file_start_time = time.time()
        logger.debug("Opened file: %s", filepath)

    def _close_current_file(self) -> None:
        if self._current_file and not self._current_file.closed:
            self._current_file.close()
        self._current_file = None
        self._csv_writer = None

    def _write_csv(self, message: OutboundMessage) -> None:
        if self._csv_writer is None:
            self._csv_writer = csv.DictWriter(
                self._current_file,
                fieldnames=self._CSV_FIELDS,
                extrasaction="ignore",
            )
            if self._current_file.tell() == 0:
                self._csv_writer.writeheader()
        self._csv_writer.writerow(message.to_dict())
