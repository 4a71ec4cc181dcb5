"""Sink abstraction layer with per-sink delivery control.

Provides:
- ``Sink``       - abstract base class that every concrete sink implements.
- ``SinkConfig`` - per-sink retry / message size knobs.
- ``SinkRunner`` - internal async helper that delivers one message to
                   its sink with retries and reports whether it arrived.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from humidity_sensor.models import OutboundMessage

__all__ = ["Sink", "SinkConfig", "SinkRunner", "truncate_text"]

logger = logging.getLogger("humidity_sensor.sinks")


def truncate_text(text: str, max_size: int | None) -> str:
    """Cap *text* at *max_size* characters (``None`` means unlimited)."""
    if max_size is None or len(text) <= max_size:
        return text
    return text[:max_size]


# -----------------------------------------------------------------------
# Delivery configuration
# -----------------------------------------------------------------------


class SinkConfig(BaseModel):
    """Per-sink delivery knobs.

    Attributes:
        retry_count:
            How many times to attempt a failed ``write()`` call.
        retry_delay_s:
            Seconds to wait between retries.
        max_message_size:
            Truncate message text to this many characters before writing.
            Trailing alarm clauses are lost when an alarm message is cut.
            ``None`` means unlimited.
    """

    retry_count: int = 3
    retry_delay_s: float = 1.0
    max_message_size: int | None = None


# -----------------------------------------------------------------------
# Sink ABC
# -----------------------------------------------------------------------


class Sink(ABC):
    """Abstract base class for all sinks.

    Concrete sinks must implement ``connect``, ``write``, ``flush`` and
    ``close``.  Delivery parameters are accepted in ``__init__`` and
    stored in ``self.sink_config``.  ``write`` signals failure by raising.
    """

    def __init__(
        self,
        *,
        retry_count: int = 3,
        retry_delay_s: float = 1.0,
        max_message_size: int | None = None,
    ) -> None:
        self.sink_config = SinkConfig(
            retry_count=retry_count,
            retry_delay_s=retry_delay_s,
            max_message_size=max_message_size,
        )

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection / open resources."""

    @abstractmethod
    async def write(self, message: OutboundMessage) -> None:
        """Deliver one message to the destination."""

    @abstractmethod
    async def flush(self) -> None:
        """Flush any internal buffers the sink may hold."""

    @abstractmethod
    async def close(self) -> None:
        """Release resources / close connections."""


# -----------------------------------------------------------------------
# SinkRunner - retrying delivery (one per registered sink)
# -----------------------------------------------------------------------


class SinkRunner:
    """Delivers messages to a ``Sink`` according to its ``SinkConfig``.

    The Monitor creates one ``SinkRunner`` per ``add_sink()`` call.
    """

    def __init__(self, sink: Sink) -> None:
        self.sink = sink
        self.cfg = sink.sink_config
        self.delivered = 0
        self.failed = 0

    async def start(self) -> None:
        await self.sink.connect()

    async def stop(self) -> None:
        await self.sink.flush()
        await self.sink.close()

    async def deliver(self, message: OutboundMessage) -> bool:
        """Write *message* with retries.  Returns ``False`` if every attempt failed."""
        text = truncate_text(message.text, self.cfg.max_message_size)
        if text != message.text:
            logger.debug(
                "%s truncated message from %d to %d characters",
                type(self.sink).__name__,
                len(message.text),
                len(text),
            )
            message = message.model_copy(update={"text": text})

        attempts = max(1, self.cfg.retry_count)
        for attempt in range(1, attempts + 1):
            try:
                await self.sink.write(message)
                self.delivered += 1
                return True
            except Exception as exc:
                if attempt < attempts:
                    logger.warning(
                        "%s write failed (attempt %d/%d): %s - retrying in %.1fs",
                        type(self.sink).__name__,
                        attempt,
                        attempts,
                        exc,
                        self.cfg.retry_delay_s,
                    )
                    await asyncio.sleep(self.cfg.retry_delay_s)
                else:
                    logger.error(
                        "%s write failed after %d attempts: %s - dropping %s message",
                        type(self.sink).__name__,
                        attempts,
                        exc,
                        message.kind,
                    )
        self.failed += 1
        return False
