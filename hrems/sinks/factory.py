"""Sink factory – creates sink instances from configuration dicts.

Used by the YAML configuration to instantiate sinks declaratively::

    sinks:
      - type: console
        fmt: text
      - type: webhook
        url: https://example.com/hrems
        min_interval_s: 10
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from hrems.sinks.base import Sink

__all__ = ["create_sink", "register_sink"]

logger = logging.getLogger("hrems.sinks.factory")

# Registry of type names → (module_path, class_name)
_SINK_REGISTRY: dict[str, tuple[str, str]] = {
    "console": ("hrems.sinks.console", "ConsoleSink"),
    "webhook": ("hrems.sinks.webhook", "WebhookSink"),
}


def create_sink(config: dict[str, Any]) -> Sink:
    """Create a sink instance from a configuration dict.

    The dict must contain a ``"type"`` key matching a registered sink
    name.  All other keys are forwarded as keyword arguments to the
    sink constructor.

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

        from hrems.sinks.factory import register_sink
        register_sink("mqtt", "mypackage.sinks", "MqttSink")
    """
    _SINK_REGISTRY[name.lower().strip()] = (module_path, class_name)
