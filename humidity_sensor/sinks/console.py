"""Console sink - prints outbound messages to stdout.

Useful for debugging, demos, and replaying recorded readings.
"""

from __future__ import annotations

import sys
from typing import IO

from humidity_sensor.models import OutboundMessage
from humidity_sensor.sinks.base import Sink

__all__ = ["ConsoleSink"]


class ConsoleSink(Sink):
    """Writes messages to the console (stdout by default).

    Parameters:
        fmt: Output format - ``"text"`` (human-readable) or ``"json"``
             (one JSON object per message).
        stream: Writable file-like object (defaults to ``sys.stdout``).
        **kwargs: Forwarded to :class:`Sink`.
    """

    def __init__(
        self,
        *,
        fmt: str = "text",
        stream: IO[str] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._fmt = fmt
        self._stream = stream or sys.stdout

    async def connect(self) -> None:
        """No-op - stdout is always available."""

    async def write(self, message: OutboundMessage) -> None:
        if self._fmt == "json":
            self._stream.write(message.to_json() + "\n")
        else:
            self._stream.write(f"[{message.sensor_name}] {message.kind:<5s} {message.text}\n")
        self._stream.flush()

    async def flush(self) -> None:
        self._stream.flush()

    async def close(self) -> None:
        """No-op - we do not own stdout."""
