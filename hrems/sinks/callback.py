"""Callback sink – delegates writes to a user-provided Python callable.

This lets callers hook custom presentation logic in without subclassing
:class:`Sink`::

    dashboard.add_sink(lambda view: print(view.snapshot.load.active))
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from hrems.models import DashboardView
from hrems.sinks.base import Sink

__all__ = ["CallbackSink"]


class CallbackSink(Sink):
    """Wraps a user-supplied function as a sink.

    The callable receives a :class:`DashboardView` on each delivery.  It
    can be a regular function, a coroutine function, or a lambda.

    Parameters:
        callback: ``(view: DashboardView) -> None`` or async variant.
        **kwargs: Forwarded to :class:`Sink`.
    """

    def __init__(self, callback: Callable[[DashboardView], Any], **kwargs) -> None:
        super().__init__(**kwargs)
        self._callback = callback
        self._is_async = inspect.iscoroutinefunction(callback)

    async def connect(self) -> None:
        """No-op."""

    async def write(self, view: DashboardView) -> None:
        if self._is_async:
            await self._callback(view)
        else:
            # Run sync callback in executor to avoid blocking the event loop
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._callback, view)

    async def flush(self) -> None:
        """No-op."""

    async def close(self) -> None:
        """No-op."""
