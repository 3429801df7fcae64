"""Dashboard - the state container that owns the current telemetry, the
rolling history, the operating mode, the simulation timer and the advisory
adapter, and fans every change out to the registered sinks.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import signal
import threading
import time
from collections.abc import Callable
from typing import Any

from hrems.advisory import Advisor, AdvisoryAdapter, AdvisoryClient
from hrems.classifier import classify
from hrems.config import DashboardConfig
from hrems.engine import RandomSource, advance
from hrems.history import record, sample_from_snapshot
from hrems.models import (
    DashboardView,
    FlowState,
    HistorySample,
    SystemMode,
    TelemetrySnapshot,
    initial_snapshot,
)
from hrems.sinks.base import Sink, SinkRunner
from hrems.sinks.callback import CallbackSink

__all__ = ["Dashboard"]

logger = logging.getLogger("hrems")


class Dashboard:
    """Owns all mutable dashboard state and the timers that drive it.

    Example::

        from hrems import Dashboard
        from hrems.sinks import ConsoleSink

        dash = Dashboard()
        dash.add_sink(ConsoleSink())
        dash.run(duration_s=30)

    The current snapshot and the history buffer are replaced as whole
    values; readers always see a complete snapshot.  Simulation ticks run
    one at a time inside a single task.  The advisory request runs in its
    own task and reads whichever snapshot is current when it starts.

    Parameters:
        config:
            Full configuration; defaults to :class:`DashboardConfig`.
        advisor:
            Advisory service wrapper.  An :class:`AdvisoryClient` built from
            ``config.advisory`` is used (and closed on teardown) when omitted.
        rng:
            Random source for the simulation engine.
        clock:
            Wall-clock source for snapshot timestamps and advisory staleness.
        snapshot:
            Starting telemetry; the built-in initial values when omitted.
    """

    def __init__(
        self,
        *,
        config: DashboardConfig | None = None,
        advisor: Advisor | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], float] = time.time,
        snapshot: TelemetrySnapshot | None = None,
    ) -> None:
        self._config = config or DashboardConfig()
        self._rng = rng or random.Random()
        self._clock = clock
        self._snapshot = snapshot if snapshot is not None else initial_snapshot(clock())
        self._history: tuple[HistorySample, ...] = ()
        self._mode = self._config.mode

        self._owns_advisor = advisor is None
        self._advisor = advisor or AdvisoryClient(self._config.advisory)
        self._advisory = AdvisoryAdapter(
            self._advisor,
            refresh_interval_s=self._config.advisory.refresh_interval_s,
            clock=clock,
        )

        self._runners: list[SinkRunner] = []
        self._simulation_task: asyncio.Task[None] | None = None
        self._advisory_task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._tick_count = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._snapshot

    @property
    def history(self) -> tuple[HistorySample, ...]:
        return self._history

    @property
    def mode(self) -> SystemMode:
        return self._mode

    @property
    def flows(self) -> FlowState:
        return classify(self._snapshot)

    @property
    def simulating(self) -> bool:
        return self._simulation_task is not None and not self._simulation_task.done()

    @property
    def advisory_text(self) -> str:
        return self._advisory.text

    @property
    def advisory_loading(self) -> bool:
        return self._advisory.loading

    @property
    def last_advisory_update(self) -> float | None:
        return self._advisory.last_update

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def view(self) -> DashboardView:
        """Return everything the presentation layer needs, recomputed now."""
        return DashboardView(
            snapshot=self._snapshot,
            history=self._history,
            mode=self._mode,
            flows=classify(self._snapshot),
            advisory_text=self._advisory.text,
            advisory_loading=self._advisory.loading,
            simulating=self.simulating,
        )

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def add_sink(
        self,
        sink: Sink | Callable[[DashboardView], Any],
        *,
        min_interval_s: float | None = None,
    ) -> None:
        """Register a sink (or callable) to receive dashboard views.

        Parameters:
            sink:
                A :class:`Sink` instance **or** any callable that accepts a
                :class:`DashboardView`.
            min_interval_s:
                Override the sink's delivery throttle.
        """
        if not isinstance(sink, Sink):
            sink = CallbackSink(sink, min_interval_s=min_interval_s)
        elif min_interval_s is not None:
            sink.sink_config.min_interval_s = min_interval_s
        self._runners.append(SinkRunner(sink))

    # ------------------------------------------------------------------
    # Operator commands
    # ------------------------------------------------------------------

    def set_mode(self, mode: SystemMode | str) -> SystemMode:
        """Select the operating mode; raises ``ValueError`` for unknown names."""
        self._mode = SystemMode(mode)
        logger.info("System mode set to %s", self._mode.value)
        return self._mode

    def start_simulation(self) -> None:
        """Start the periodic simulation timer (no-op when already running)."""
        if self.simulating:
            return
        self._simulation_task = asyncio.create_task(self._simulation_loop(), name="hrems-simulation")
        logger.info("Simulation started (%.1fs interval)", self._config.simulation.tick_interval_s)

    async def stop_simulation(self) -> None:
        """Cancel the simulation timer; no tick fires after this returns."""
        task, self._simulation_task = self._simulation_task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Simulation stopped after %d ticks", self._tick_count)

    async def toggle_simulation(self) -> bool:
        """Flip the simulation timer; returns the new running state."""
        if self.simulating:
            await self.stop_simulation()
        else:
            self.start_simulation()
        return self.simulating

    async def request_advisory(self) -> bool:
        """Manually refresh the advice; ``False`` when one is already pending."""
        if not self._config.advisory.enabled or self._advisory_pending():
            logger.debug("Manual advisory request ignored")
            return False
        started = await self._advisory.refresh(self._snapshot)
        if started:
            await self._publish()
        return started

    def check_advisory(self) -> bool:
        """Schedule a background advisory refresh when the advice is stale.

        Called after every state change; returns ``True`` when a refresh
        was scheduled.
        """
        if not self._config.advisory.enabled or self._advisory_pending():
            return False
        if not self._advisory.is_due():
            return False
        self._advisory_task = asyncio.create_task(self._advisory_refresh(), name="hrems-advisory")
        return True

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def tick(self) -> TelemetrySnapshot:
        """Advance the simulation once, record history and notify sinks."""
        snapshot = advance(self._snapshot, self._rng, now=self._clock(), config=self._config.simulation)
        history = record(self._history, sample_from_snapshot(snapshot), self._config.history_capacity)
        self._snapshot, self._history = snapshot, history
        self._tick_count += 1

        if self._tick_count % 100 == 0:
            logger.debug("Tick %d - soc %.2f%%", self._tick_count, snapshot.battery_soc)

        await self._publish()
        self.check_advisory()
        return snapshot

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect sinks, start the timer (if configured) and fetch first advice."""
        for runner in self._runners:
            await runner.start()
        if self._config.simulate:
            self.start_simulation()
        self.check_advisory()

    async def close(self) -> None:
        """Stop all tasks and release sinks and the advisory HTTP client."""
        await self.stop_simulation()

        task, self._advisory_task = self._advisory_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._owns_advisor and isinstance(self._advisor, AdvisoryClient):
            await self._advisor.close()

        logger.info("Stopping %d sinks...", len(self._runners))
        for runner in self._runners:
            try:
                await runner.stop()
            except Exception as exc:
                logger.error("%s close failed: %s", runner.sink.name, exc)

    def stop(self) -> None:
        """Ask a running :meth:`run_async` to shut down."""
        if self._stop_event is not None:
            self._stop_event.set()

    def run(self, duration_s: float | None = None) -> None:
        """Blocking entry point - starts the event loop.

        Works inside environments that already have a running event loop
        (Jupyter, IPython) by spawning a dedicated thread with its own loop.

        Parameters:
            duration_s: If provided, stop automatically after this many
                        seconds.  ``None`` means run until Ctrl-C.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None and loop.is_running():
            exc: list[BaseException | None] = [None]

            def _target() -> None:
                try:
                    asyncio.run(self.run_async(duration_s=duration_s))
                except KeyboardInterrupt:
                    logger.info("Interrupted by user")
                except BaseException as e:
                    exc[0] = e

            t = threading.Thread(target=_target, daemon=True)
            t.start()
            t.join()
            if exc[0] is not None:
                raise exc[0]
        else:
            try:
                asyncio.run(self.run_async(duration_s=duration_s))
            except KeyboardInterrupt:
                logger.info("Interrupted by user")

    async def run_async(self, duration_s: float | None = None) -> None:
        """Async entry point - runs until *duration_s*, a signal or :meth:`stop`."""
        logger.info(
            "Starting dashboard: mode %s, %.1fs ticks, history %d, %d sinks",
            self._mode.value,
            self._config.simulation.tick_interval_s,
            self._config.history_capacity,
            len(self._runners),
        )

        # NotImplementedError: raised on Windows where signal handlers are unsupported.
        # RuntimeError: raised when running in a non-main thread (e.g. notebook env).
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, self._stop_event.set)

        try:
            await self.start()
            if duration_s is None:
                await self._stop_event.wait()
                logger.info("Stop signal received - shutting down")
            else:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=duration_s)
                    logger.info("Stop signal received - shutting down")
                except asyncio.TimeoutError:
                    logger.info("Duration reached (%.1fs) - stopping", duration_s)
        except asyncio.CancelledError:
            logger.info("Dashboard cancelled")
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(sig)
            await self.close()
            self._stop_event = None
            logger.info("Dashboard stopped.")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _advisory_pending(self) -> bool:
        task = self._advisory_task
        return self._advisory.loading or (task is not None and not task.done())

    async def _advisory_refresh(self) -> None:
        if await self._advisory.refresh(self._snapshot):
            await self._publish()

    async def _simulation_loop(self) -> None:
        interval = self._config.simulation.tick_interval_s
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            await self.tick()
            next_tick = max(next_tick + interval, loop.time())

    async def _publish(self) -> None:
        if not self._runners:
            return
        view = self.view()
        for runner in self._runners:
            await runner.push(view)
