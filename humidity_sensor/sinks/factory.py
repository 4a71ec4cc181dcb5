"""Sink factory – creates sink instances from configuration dicts.

Used by the config-driven (YAML) mode to instantiate sinks declaratively::

    sinks:
      - type: console
        fmt: json
      - type: file
        path: ./messages
        retry_count: 1
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from humidity_sensor.sinks.base import Sink

__all__ = ["create_sink", "register_sink"]

logger = logging.getLogger("humidity_sensor.sinks.factory")

# Registry of type names → (module_path, class_name)
_SINK_REGISTRY: dict[str, tuple[str, str]] = {
    "console": ("humidity_sensor.sinks.console", "ConsoleSink"),
    "callback": ("humidity_sensor.sinks.callback", "CallbackSink"),
    "file": ("humidity_sensor.sinks.file", "FileSink"),
}


def create_sink(config: dict[str, Any]) -> Sink:
    """Create a sink instance from a configuration dict.

    The dict must contain a ``"type"`` key matching a registered sink
    name.  All other keys are forwarded as keyword arguments to the
    sink constructor.

    Example::

        sink = create_sink({"type": "file", "path": "./out", "format": "json"})

    Returns:
        A fully-constructed :class:`Sink` instance (not yet connected).
    """
    config = dict(config)  # shallow copy
    sink_type = config.pop("type", None)

    if sink_type is None:
        raise ValueError("Sink config must include a 'type' key")

    sink_type = sink_type.lower().strip()

    if sink_type not in _SINK_REGISTRY:
        raise ValueError(
            f"Unknown sink type '{sink_type}'.  "
            f"Available: {sorted(_SINK_REGISTRY)}"
        )

    module_path, class_name = _SINK_REGISTRY[sink_type]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)

    logger.debug("Creating %s with config: %s", class_name, config)
    return cls(**config)


def register_sink(name: str, module_path: str, class_name: str) -> None:
    """Register a custom sink type for config-driven instantiation.

    Example::

        from humidity_sensor.sinks.factory import register_sink
        register_sink("mqtt", "mypackage.sinks", "MqttSink")

    Then in YAML::

        sinks:
          - type: mqtt
            topic: home/livingroom
    """
    _SINK_REGISTRY[name.lower().strip()] = (module_path, class_name)
