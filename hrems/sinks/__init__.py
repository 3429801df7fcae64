"""Presentation-boundary sinks for the HREMS dashboard.

Import any sink you need directly from this package::

    from hrems.sinks import ConsoleSink, CallbackSink, WebhookSink
"""

from __future__ import annotations

from hrems.sinks.base import Sink, SinkConfig, SinkRunner
from hrems.sinks.callback import CallbackSink
from hrems.sinks.console import ConsoleSink
from hrems.sinks.factory import create_sink, register_sink
from hrems.sinks.webhook import WebhookSink

__all__ = [
    "CallbackSink",
    "ConsoleSink",
    "Sink",
    "SinkConfig",
    "SinkRunner",
    "WebhookSink",
    "create_sink",
    "register_sink",
]
