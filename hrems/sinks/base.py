"""Sink abstraction for the presentation boundary.

Provides:
- ``Sink``       - abstract base class every concrete sink implements.
- ``SinkConfig`` - per-sink delivery throttle.
- ``SinkRunner`` - wraps a sink, applies the throttle and isolates the
                   dashboard from sink failures.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel, Field

from hrems.models import DashboardView

__all__ = ["Sink", "SinkConfig", "SinkRunner"]

logger = logging.getLogger("hrems.sinks")


class SinkConfig(BaseModel):
    """Per-sink delivery knobs.

    Attributes:
        min_interval_s:
            Minimum seconds between two views delivered to the sink.
            ``None`` means every view (every tick and every advisory
            update).
    """

    min_interval_s: float | None = Field(default=None, ge=0)


class Sink(ABC):
    """Abstract base class for all sinks.

    Concrete sinks implement ``connect``, ``write``, ``flush`` and
    ``close``.  ``write`` receives a complete :class:`DashboardView`.
    """

    def __init__(self, *, min_interval_s: float | None = None) -> None:
        self.sink_config = SinkConfig(min_interval_s=min_interval_s)

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection / open resources."""

    @abstractmethod
    async def write(self, view: DashboardView) -> None:
        """Deliver one dashboard view."""

    @abstractmethod
    async def flush(self) -> None:
        """Flush any internal buffers the sink may hold."""

    @abstractmethod
    async def close(self) -> None:
        """Release resources / close connections."""


class SinkRunner:
    """Delivers views to one ``Sink`` according to its ``SinkConfig``.

    A failing ``write`` is logged and dropped; it never reaches the
    dashboard.
    """

    def __init__(self, sink: Sink, clock: Callable[[], float] = time.monotonic) -> None:
        self.sink = sink
        self.cfg = sink.sink_config
        self._clock = clock
        self._last_sent: float | None = None
        self.failures = 0

    async def start(self) -> None:
        await self.sink.connect()

    async def push(self, view: DashboardView) -> bool:
        """Write *view* unless throttled; returns ``True`` when delivered."""
        now = self._clock()
        if (
            self.cfg.min_interval_s is not None
            and self._last_sent is not None
            and now - self._last_sent < self.cfg.min_interval_s
        ):
            return False

        try:
            await self.sink.write(view)
        except Exception as exc:
            self.failures += 1
            logger.error("%s write failed: %s - dropping view", self.sink.name, exc)
            return False

        self._last_sent = now
        return True

    async def stop(self) -> None:
        """Flush and close the sink."""
        try:
            await self.sink.flush()
        finally:
            await self.sink.close()
