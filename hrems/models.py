"""Telemetry data models for the HREMS core.

Defines the frozen snapshot types (``SensorReading``, ``InverterState``,
``LoadState``, ``TelemetrySnapshot``), the chart-facing ``HistorySample``,
the operator-selected ``SystemMode`` and the ``DashboardView`` handed to sinks.
"""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

__all__ = [
    "BatteryStatus",
    "DashboardView",
    "FlowState",
    "HistorySample",
    "InverterState",
    "LoadPriority",
    "LoadState",
    "SensorReading",
    "SystemMode",
    "TelemetrySnapshot",
    "initial_snapshot",
]


class SystemMode(StrEnum):
    """Operating mode selected by the operator."""

    HYBRID = "Hybrid"
    SOLAR_ONLY = "Solar Only"
    WIND_ONLY = "Wind Only"
    BATTERY_ONLY = "Battery Only"
    ECO_MODE = "Eco Mode"


class LoadPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class BatteryStatus(StrEnum):
    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    IDLE = "Idle"


class SensorReading(BaseModel):
    """Reading from a generation or storage source.

    Attributes:
        voltage: Terminal voltage (V).
        current: Current (A).
        power: Power in watts, never negative.
        irradiance: Solar irradiance (W/m²), solar only.
        temperature: Panel / cell temperature (°C).
        wind_speed: Wind speed (m/s), wind only.
        rpm: Rotor speed, wind only.
        soc: State of charge in percent, battery only.
        status: Free-form status label (e.g. ``"Charging"``).
    """

    model_config = {"frozen": True}

    voltage: float
    current: float
    power: float = Field(default=0.0, ge=0)
    irradiance: float | None = Field(default=None, ge=0)
    temperature: float | None = None
    wind_speed: float | None = Field(default=None, ge=0)
    rpm: float | None = None
    soc: float | None = Field(default=None, ge=0, le=100)
    status: str | None = None


class InverterState(BaseModel):
    model_config = {"frozen": True}

    input_voltage: float
    output_voltage: float
    frequency: float
    efficiency: float = Field(ge=0, le=100)


class LoadState(BaseModel):
    model_config = {"frozen": True}

    active: float = Field(ge=0)
    status: str
    priority: LoadPriority


class TelemetrySnapshot(BaseModel):
    """One complete telemetry value at a point in time.

    Snapshots are frozen; the simulation engine produces a new instance on
    every tick rather than editing the current one.
    """

    model_config = {"frozen": True}

    solar: SensorReading
    wind: SensorReading
    battery: SensorReading
    inverter: InverterState
    load: LoadState
    timestamp: float

    @property
    def generation(self) -> float:
        """Combined solar and wind output in watts."""
        return self.solar.power + self.wind.power

    @property
    def battery_soc(self) -> float:
        return self.battery.soc if self.battery.soc is not None else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` representation (JSON-safe types)."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return self.model_dump_json()


class HistorySample(BaseModel):
    """One point on the generation-vs-demand chart.

    Attributes:
        time: Local wall-clock label, ``HH:MM:SS``.
        solar_power: Solar output (W), rounded to one decimal.
        wind_power: Wind output (W), rounded to one decimal.
        load_power: Load demand (W), rounded to one decimal.
        battery_soc: Battery state of charge (%), rounded to one decimal.
        timestamp: Epoch seconds of the snapshot the sample was taken from.
    """

    model_config = {"frozen": True}

    time: str
    solar_power: float
    wind_power: float
    load_power: float
    battery_soc: float
    timestamp: float


def initial_snapshot(timestamp: float | None = None) -> TelemetrySnapshot:
    """Return the fixed start-of-process telemetry value."""
    return TelemetrySnapshot(
        solar=SensorReading(voltage=18.5, current=5.2, power=96.2, irradiance=820, temperature=38),
        wind=SensorReading(voltage=24.0, current=3.1, power=74.4, wind_speed=12.0, rpm=420),
        battery=SensorReading(
            voltage=12.8,
            current=1.2,
            soc=75,
            temperature=28,
            status=BatteryStatus.IDLE.value,
        ),
        inverter=InverterState(input_voltage=12.8, output_voltage=230, frequency=50.0, efficiency=94),
        load=LoadState(active=140, status="Stable", priority=LoadPriority.HIGH),
        timestamp=time.time() if timestamp is None else timestamp,
    )


class FlowState(BaseModel):
    """Activity flags for the power-flow diagram."""

    model_config = {"frozen": True}

    solar_active: bool
    wind_active: bool
    charging: bool


class DashboardView(BaseModel):
    """Read-only picture of everything the presentation layer shows.

    Attributes:
        snapshot: Current telemetry.
        history: Chart samples, oldest first.
        mode: Operator-selected system mode.
        flows: Activity flags computed from ``snapshot``.
        advisory_text: Latest advisory text (or a fallback).
        advisory_loading: ``True`` while an advisory request is in flight.
        simulating: ``True`` while the simulation timer is running.
    """

    model_config = {"frozen": True}

    snapshot: TelemetrySnapshot
    history: tuple[HistorySample, ...]
    mode: SystemMode
    flows: FlowState
    advisory_text: str
    advisory_loading: bool
    simulating: bool

    def to_json(self) -> str:
        return self.model_dump_json()
