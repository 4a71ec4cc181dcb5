"""Callback sink – delegates writes to a user-provided Python callable.

This allows users to hook any custom transport into the monitor without
having to subclass :class:`Sink`::

    monitor.add_sink(lambda message: mqtt.publish("sensor/rh", message.text))

Raising from the callable marks the delivery as failed.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Callable, Any

from humidity_sensor.models import OutboundMessage
from humidity_sensor.sinks.base import Sink

__all__ = ["CallbackSink"]


class CallbackSink(Sink):
    """Wraps a user-supplied function as a sink.

    The callable receives one :class:`OutboundMessage` per delivery.  It
    can be a regular function, a coroutine function, or a lambda.

    Parameters:
        callback: ``(message: OutboundMessage) -> None`` or async variant.
        **kwargs: Forwarded to :class:`Sink`.
    """

    def __init__(
        self,
        callback: Callable[[OutboundMessage], Any],
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._callback = callback
        self._is_async = inspect.iscoroutinefunction(callback)

    async def connect(self) -> None:
        """No-op."""

    async def write(self, message: OutboundMessage) -> None:
        if self._is_async:
            await self._callback(message)
        else:
            # Run sync callback in executor to avoid blocking the event loop
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._callback, message)

    async def flush(self) -> None:
        """No-op."""

    async def close(self) -> None:
        """No-op."""
