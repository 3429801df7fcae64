"""Activity / flow flags derived from a telemetry snapshot.

Pure functions; callers recompute them from the current snapshot whenever it
changes.
"""

from __future__ import annotations

from hrems.models import FlowState, TelemetrySnapshot

__all__ = ["ACTIVE_POWER_THRESHOLD", "FlowState", "classify", "is_charging", "is_source_active"]

# Watts below which a source is treated as idle / sensor noise
ACTIVE_POWER_THRESHOLD = 5.0


def is_source_active(power: float) -> bool:
    return power > ACTIVE_POWER_THRESHOLD


def is_charging(snapshot: TelemetrySnapshot) -> bool:
    """True when generation exceeds load and the battery has headroom."""
    return snapshot.generation > snapshot.load.active and snapshot.battery_soc < 100


def classify(snapshot: TelemetrySnapshot) -> FlowState:
    return FlowState(
        solar_active=is_source_active(snapshot.solar.power),
        wind_active=is_source_active(snapshot.wind.power),
        charging=is_charging(snapshot),
    )
