"""Configuration loader for the HREMS dashboard.

Parses YAML files with the following top-level sections::

    simulation:   # tick interval and random-walk parameters
    history:      # rolling window capacity
    advisory:     # advisory service endpoint, model and refresh interval
    sinks:        # list of sink configs
    mode:         # initial SystemMode
    duration_s:   # optional auto-stop
    log_level:    # DEBUG, INFO, WARNING, ERROR

Example:

.. code-block:: yaml

    simulation:
      tick_interval_s: 2.0
      solar_amplitude: 4.0

    history:
      capacity: 30

    advisory:
      model: gemini-3-flash-preview
      api_key_env: GEMINI_API_KEY
      refresh_interval_s: 30

    sinks:
      - type: console
        fmt: text
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from hrems.advisory import AdvisoryConfig
from hrems.engine import SimulationConfig
from hrems.history import DEFAULT_CAPACITY
from hrems.models import SystemMode

__all__ = ["DashboardConfig", "load_yaml_config"]

logger = logging.getLogger("hrems.config")


class DashboardConfig(BaseModel):
    """Parsed representation of the full YAML configuration.

    Attributes:
        simulation: Engine parameters and tick interval.
        history_capacity: Maximum samples kept for the chart.
        advisory: Advisory service settings.
        mode: Initial operating mode.
        simulate: Start with the simulation timer running.
        sink_configs: Raw dicts passed to the sink factory.
        duration_s: Optional run duration (seconds).
        log_level: Logging level string.
    """

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    history_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    advisory: AdvisoryConfig = Field(default_factory=AdvisoryConfig)
    mode: SystemMode = SystemMode.HYBRID
    simulate: bool = True
    sink_configs: list[dict[str, Any]] = Field(default_factory=list)
    duration_s: float | None = None
    log_level: str = "INFO"


def load_yaml_config(path: str | Path) -> DashboardConfig:
    """Load and validate a YAML configuration file.

    Raises ``FileNotFoundError`` for a missing file and
    ``pydantic.ValidationError`` for invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    history_section = raw.get("history") or {}
    duration_s = raw.get("duration_s")

    config = DashboardConfig(
        simulation=SimulationConfig(**(raw.get("simulation") or {})),
        history_capacity=int(history_section.get("capacity", DEFAULT_CAPACITY)),
        advisory=AdvisoryConfig(**(raw.get("advisory") or {})),
        mode=SystemMode(raw.get("mode", SystemMode.HYBRID.value)),
        simulate=bool(raw.get("simulate", True)),
        sink_configs=raw.get("sinks") or [],
        duration_s=float(duration_s) if duration_s is not None else None,
        log_level=str(raw.get("log_level", "INFO")).upper(),
    )

    logger.info(
        "Loaded config: tick %.1fs, history %d, advisor %s, %d sinks",
        config.simulation.tick_interval_s,
        config.history_capacity,
        "on" if config.advisory.enabled else "off",
        len(config.sink_configs),
    )
    return config
