"""Tests for hrems.models – telemetry shapes, validation and the initial snapshot."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from hrems.models import (
    BatteryStatus,
    InverterState,
    LoadPriority,
    LoadState,
    SensorReading,
    SystemMode,
    TelemetrySnapshot,
    initial_snapshot,
)

# -----------------------------------------------------------------------
# SensorReading / InverterState / LoadState
# -----------------------------------------------------------------------


class TestSensorReading:
    """Field constraints on generation / storage readings."""

    def test_minimal_construction(self) -> None:
        reading = SensorReading(voltage=12.0, current=1.0)
        assert reading.power == 0.0
        assert reading.soc is None
        assert reading.status is None

    def test_negative_power_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SensorReading(voltage=12.0, current=1.0, power=-0.1)

    @pytest.mark.parametrize("soc", [-1, 100.5])
    def test_soc_out_of_range_rejected(self, soc: float) -> None:
        with pytest.raises(ValidationError):
            SensorReading(voltage=12.0, current=1.0, soc=soc)

    @pytest.mark.parametrize("soc", [0, 100])
    def test_soc_bounds_accepted(self, soc: float) -> None:
        assert SensorReading(voltage=12.0, current=1.0, soc=soc).soc == soc

    def test_negative_irradiance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SensorReading(voltage=18.0, current=5.0, irradiance=-5)

    def test_frozen(self) -> None:
        reading = SensorReading(voltage=12.0, current=1.0, power=10.0)
        with pytest.raises(ValidationError):
            reading.power = 20.0  # type: ignore[misc]


class TestInverterAndLoad:
    def test_efficiency_above_100_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InverterState(input_voltage=12.8, output_voltage=230, frequency=50, efficiency=101)

    def test_negative_load_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoadState(active=-1, status="Stable", priority=LoadPriority.LOW)

    def test_priority_from_string(self) -> None:
        load = LoadState(active=50, status="Stable", priority="Medium")
        assert load.priority is LoadPriority.MEDIUM

    def test_unknown_priority_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoadState(active=50, status="Stable", priority="Critical")


# -----------------------------------------------------------------------
# TelemetrySnapshot
# -----------------------------------------------------------------------


class TestTelemetrySnapshot:
    """Initial values and derived helpers."""

    def test_initial_values(self) -> None:
        snap = initial_snapshot(timestamp=1_700_000_000.0)
        assert snap.solar.power == 96.2
        assert snap.solar.irradiance == 820
        assert snap.wind.power == 74.4
        assert snap.wind.wind_speed == 12.0
        assert snap.battery.soc == 75
        assert snap.battery.status == BatteryStatus.IDLE.value
        assert snap.inverter.efficiency == 94
        assert snap.load.active == 140
        assert snap.load.priority is LoadPriority.HIGH
        assert snap.timestamp == 1_700_000_000.0

    def test_initial_timestamp_defaults_to_now(self) -> None:
        import time

        before = time.time()
        snap = initial_snapshot()
        assert before <= snap.timestamp <= time.time()

    def test_generation(self) -> None:
        snap = initial_snapshot(timestamp=1.0)
        assert snap.generation == pytest.approx(96.2 + 74.4)

    def test_battery_soc_defaults_to_zero_when_missing(self) -> None:
        snap = initial_snapshot(timestamp=1.0)
        snap = snap.model_copy(update={"battery": SensorReading(voltage=12.0, current=0.0)})
        assert snap.battery_soc == 0.0

    def test_json_round_trip(self) -> None:
        snap = initial_snapshot(timestamp=1.0)
        data = json.loads(snap.to_json())
        assert data["load"]["priority"] == "High"
        assert TelemetrySnapshot.model_validate(data) == snap

    def test_to_dict(self) -> None:
        d = initial_snapshot(timestamp=1.0).to_dict()
        assert d["battery"]["soc"] == 75
        assert d["timestamp"] == 1.0


class TestSystemMode:
    def test_values(self) -> None:
        assert [m.value for m in SystemMode] == [
            "Hybrid",
            "Solar Only",
            "Wind Only",
            "Battery Only",
            "Eco Mode",
        ]

    def test_lookup_by_value(self) -> None:
        assert SystemMode("Eco Mode") is SystemMode.ECO_MODE
