"""Console sink - prints a one-line dashboard summary per view.

Useful for demos and for verifying the simulation is running.
"""

from __future__ import annotations

import sys
from typing import IO

from hrems.models import DashboardView
from hrems.sinks.base import Sink

__all__ = ["ConsoleSink"]


class ConsoleSink(Sink):
    """Writes dashboard views to the console (stdout by default).

    Parameters:
        fmt: Output format - ``"text"`` (human-readable) or ``"json"``
             (one JSON object per view).
        stream: Writable file-like object (defaults to ``sys.stdout``).
        show_advice: Print the advisory text whenever it changes (text
            format only).
        **kwargs: Forwarded to :class:`Sink`.
    """

    def __init__(
        self,
        *,
        fmt: str = "text",
        stream: IO[str] | None = None,
        show_advice: bool = True,
        **kwargs,
    ) -> None:
        if fmt not in ("text", "json"):
            raise ValueError(f"Unknown console format '{fmt}' (expected 'text' or 'json')")
        super().__init__(**kwargs)
        self._fmt = fmt
        self._stream = stream or sys.stdout
        self._show_advice = show_advice
        self._last_advice: str | None = None

    async def connect(self) -> None:
        """No-op - stdout is always available."""

    async def write(self, view: DashboardView) -> None:
        if self._fmt == "json":
            self._stream.write(view.to_json() + "\n")
        else:
            snap = view.snapshot
            flows = view.flows
            self._stream.write(
                f"[{view.history[-1].time if view.history else '--:--:--'}] "
                f"{view.mode.value:<12s} "
                f"solar={snap.solar.power:7.1f}W{'*' if flows.solar_active else ' '} "
                f"wind={snap.wind.power:7.1f}W{'*' if flows.wind_active else ' '} "
                f"load={snap.load.active:7.1f}W "
                f"soc={snap.battery_soc:6.2f}% ({snap.battery.status})"
                f"{' CHARGING' if flows.charging else ''}\n"
            )
            if self._show_advice and view.advisory_text != self._last_advice:
                self._last_advice = view.advisory_text
                self._stream.write(f"  advisor: {view.advisory_text}\n")
        self._stream.flush()

    async def flush(self) -> None:
        self._stream.flush()

    async def close(self) -> None:
        """No-op - we do not own stdout."""
