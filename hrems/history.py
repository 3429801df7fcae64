"""History aggregator - rolling, fixed-capacity sample window for charting."""

from __future__ import annotations

from datetime import datetime

from hrems.models import HistorySample, TelemetrySnapshot

__all__ = ["DEFAULT_CAPACITY", "record", "sample_from_snapshot"]

DEFAULT_CAPACITY = 30


def sample_from_snapshot(snapshot: TelemetrySnapshot) -> HistorySample:
    """Derive a chart sample from *snapshot* (values rounded to 0.1)."""
    return HistorySample(
        time=datetime.fromtimestamp(snapshot.timestamp).strftime("%H:%M:%S"),
        solar_power=round(snapshot.solar.power, 1),
        wind_power=round(snapshot.wind.power, 1),
        load_power=round(snapshot.load.active, 1),
        battery_soc=round(snapshot.battery_soc, 1),
        timestamp=snapshot.timestamp,
    )


def record(
    buffer: tuple[HistorySample, ...],
    sample: HistorySample,
    capacity: int = DEFAULT_CAPACITY,
) -> tuple[HistorySample, ...]:
    """Return a new buffer with *sample* appended, oldest entries evicted.

    The input buffer is left untouched.
    """
    if capacity < 1:
        raise ValueError(f"capacity must be >= 1, got {capacity}")
    kept = buffer[-(capacity - 1):] if capacity > 1 else ()
    return (*kept, sample)
