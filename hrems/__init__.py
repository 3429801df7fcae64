"""HREMS - telemetry simulation and aggregation core for a hybrid renewable
energy dashboard (solar, wind, battery, load).

Quick start::

    from hrems import Dashboard
    from hrems.sinks import ConsoleSink

    dash = Dashboard()
    dash.add_sink(ConsoleSink())
    dash.run(duration_s=30)
"""

from __future__ import annotations

from hrems.advisory import AdvisoryAdapter, AdvisoryClient, AdvisoryConfig, is_refresh_due
from hrems.classifier import classify, is_charging, is_source_active
from hrems.config import DashboardConfig, load_yaml_config
from hrems.dashboard import Dashboard
from hrems.engine import SimulationConfig, advance
from hrems.history import record, sample_from_snapshot
from hrems.models import (
    BatteryStatus,
    DashboardView,
    FlowState,
    HistorySample,
    InverterState,
    LoadPriority,
    LoadState,
    SensorReading,
    SystemMode,
    TelemetrySnapshot,
    initial_snapshot,
)

__all__ = [
    "AdvisoryAdapter",
    "AdvisoryClient",
    "AdvisoryConfig",
    "BatteryStatus",
    "Dashboard",
    "DashboardConfig",
    "DashboardView",
    "FlowState",
    "HistorySample",
    "InverterState",
    "LoadPriority",
    "LoadState",
    "SensorReading",
    "SimulationConfig",
    "SystemMode",
    "TelemetrySnapshot",
    "advance",
    "classify",
    "initial_snapshot",
    "is_charging",
    "is_refresh_due",
    "is_source_active",
    "load_yaml_config",
    "record",
    "sample_from_snapshot",
]

__version__ = "0.1.0"
