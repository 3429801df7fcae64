"""Simulation engine - advances telemetry by one tick.

Each call to :func:`advance` applies bounded random walks to solar, wind and
load power, derives irradiance / wind speed from the same deltas, integrates
the power balance into the battery state of charge and labels the battery
status.  The previous snapshot is never modified.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Protocol

from pydantic import BaseModel, Field

from hrems.models import BatteryStatus, TelemetrySnapshot

__all__ = ["RandomSource", "SimulationConfig", "advance", "battery_status"]

logger = logging.getLogger("hrems.engine")


class RandomSource(Protocol):
    """Anything with a ``random.Random``-style ``uniform`` method."""

    def uniform(self, a: float, b: float) -> float: ...


class SimulationConfig(BaseModel):
    """Random-walk and battery model parameters.

    Attributes:
        tick_interval_s:
            Seconds between simulation ticks.
        solar_amplitude:
            Width of the symmetric solar power step (W).
        wind_amplitude:
            Width of the symmetric wind power step (W).
        load_amplitude:
            Width of the load step; the step is drawn from
            ``[-0.4 * A, 0.6 * A]`` so demand drifts upwards.
        load_floor:
            Idle draw the load never falls below (W).
        irradiance_gain:
            Irradiance change per watt of solar change.
        wind_speed_gain:
            Wind speed change per watt of wind change.
        soc_coefficient:
            SOC percent gained per watt of surplus per tick.
        discharge_deadband:
            Deficit (W) that must be exceeded before the battery reports
            ``Discharging``.
    """

    tick_interval_s: float = Field(default=2.0, gt=0)
    solar_amplitude: float = Field(default=4.0, ge=0)
    wind_amplitude: float = Field(default=6.0, ge=0)
    load_amplitude: float = Field(default=5.0, ge=0)
    load_floor: float = Field(default=10.0, ge=0)
    irradiance_gain: float = 5.0
    wind_speed_gain: float = 0.2
    soc_coefficient: float = 0.001
    discharge_deadband: float = 5.0


_DEFAULT_CONFIG = SimulationConfig()


def battery_status(balance: float, deadband: float = 5.0) -> BatteryStatus:
    """Classify a power balance (generation minus load)."""
    if balance > 0:
        return BatteryStatus.CHARGING
    if balance < -deadband:
        return BatteryStatus.DISCHARGING
    return BatteryStatus.IDLE


def advance(
    previous: TelemetrySnapshot,
    rng: RandomSource | None = None,
    now: float | None = None,
    config: SimulationConfig | None = None,
) -> TelemetrySnapshot:
    """Return the snapshot that follows *previous*.

    Parameters:
        previous: Current snapshot.
        rng: Random source; a fresh ``random.Random`` when omitted.
        now: Timestamp for the new snapshot; ``time.time()`` when omitted.
        config: Model parameters; defaults to :class:`SimulationConfig`.
    """
    cfg = config or _DEFAULT_CONFIG
    rng = rng or random.Random()

    delta_solar = rng.uniform(-cfg.solar_amplitude / 2, cfg.solar_amplitude / 2)
    delta_wind = rng.uniform(-cfg.wind_amplitude / 2, cfg.wind_amplitude / 2)
    delta_load = rng.uniform(-cfg.load_amplitude * 0.4, cfg.load_amplitude * 0.6)

    solar_p = max(0.0, previous.solar.power + delta_solar)
    wind_p = max(0.0, previous.wind.power + delta_wind)
    load_p = max(cfg.load_floor, previous.load.active + delta_load)

    # Excess generation charges the battery, a deficit drains it
    balance = (solar_p + wind_p) - load_p
    soc = min(100.0, max(0.0, previous.battery_soc + balance * cfg.soc_coefficient))
    status = battery_status(balance, cfg.discharge_deadband)

    irradiance = max(0.0, (previous.solar.irradiance or 0.0) + delta_solar * cfg.irradiance_gain)
    wind_speed = max(0.0, (previous.wind.wind_speed or 0.0) + delta_wind * cfg.wind_speed_gain)

    logger.debug(
        "advance: solar=%.1fW wind=%.1fW load=%.1fW balance=%.1fW soc=%.2f%% (%s)",
        solar_p,
        wind_p,
        load_p,
        balance,
        soc,
        status.value,
    )

    return previous.model_copy(
        update={
            "solar": previous.solar.model_copy(update={"power": solar_p, "irradiance": irradiance}),
            "wind": previous.wind.model_copy(update={"power": wind_p, "wind_speed": wind_speed}),
            "battery": previous.battery.model_copy(update={"soc": soc, "status": status.value}),
            "load": previous.load.model_copy(update={"active": load_p}),
            "timestamp": time.time() if now is None else now,
        }
    )
