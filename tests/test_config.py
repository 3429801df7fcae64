"""Tests for hrems.config – DashboardConfig defaults and YAML loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from hrems.__main__ import _SAMPLE_CONFIG
from hrems.config import DashboardConfig, load_yaml_config
from hrems.models import SystemMode

# -----------------------------------------------------------------------
# DashboardConfig model
# -----------------------------------------------------------------------


class TestDashboardConfig:
    def test_defaults(self) -> None:
        cfg = DashboardConfig()
        assert cfg.simulation.tick_interval_s == 2.0
        assert cfg.simulation.solar_amplitude == 4.0
        assert cfg.simulation.wind_amplitude == 6.0
        assert cfg.simulation.load_amplitude == 5.0
        assert cfg.simulation.load_floor == 10.0
        assert cfg.history_capacity == 30
        assert cfg.advisory.refresh_interval_s == 30.0
        assert cfg.advisory.enabled is True
        assert cfg.mode is SystemMode.HYBRID
        assert cfg.simulate is True
        assert cfg.sink_configs == []
        assert cfg.duration_s is None
        assert cfg.log_level == "INFO"

    def test_zero_capacity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DashboardConfig(history_capacity=0)


# -----------------------------------------------------------------------
# load_yaml_config
# -----------------------------------------------------------------------


class TestLoadYAMLConfig:
    """load_yaml_config() parsing from temporary YAML files."""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "nonexistent.yaml")

    def test_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "empty.yaml"
        cfg_file.write_text("")
        cfg = load_yaml_config(cfg_file)
        assert cfg == DashboardConfig()

    def test_minimal_config(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("""\
simulation:
  tick_interval_s: 1.0
""")
        cfg = load_yaml_config(cfg_file)
        assert cfg.simulation.tick_interval_s == 1.0
        assert cfg.simulation.solar_amplitude == 4.0

    def test_full_config(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("""\
mode: Eco Mode
simulate: false
duration_s: 45
log_level: debug

simulation:
  tick_interval_s: 0.5
  load_floor: 25

history:
  capacity: 60

advisory:
  enabled: false
  model: other-model
  api_key_env: MY_KEY
  refresh_interval_s: 120

sinks:
  - type: console
    fmt: json
  - type: webhook
    url: https://example.com/hrems
""")
        cfg = load_yaml_config(cfg_file)
        assert cfg.mode is SystemMode.ECO_MODE
        assert cfg.simulate is False
        assert cfg.duration_s == 45.0
        assert cfg.log_level == "DEBUG"
        assert cfg.simulation.tick_interval_s == 0.5
        assert cfg.simulation.load_floor == 25.0
        assert cfg.history_capacity == 60
        assert cfg.advisory.enabled is False
        assert cfg.advisory.model == "other-model"
        assert cfg.advisory.api_key_env == "MY_KEY"
        assert cfg.advisory.refresh_interval_s == 120.0
        assert len(cfg.sink_configs) == 2
        assert cfg.sink_configs[1]["type"] == "webhook"

    def test_unknown_mode_raises(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("mode: Turbo\n")
        with pytest.raises(ValueError):
            load_yaml_config(cfg_file)

    def test_invalid_interval_raises(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("simulation:\n  tick_interval_s: 0\n")
        with pytest.raises(ValidationError):
            load_yaml_config(cfg_file)

    def test_negative_load_floor_raises(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("simulation:\n  load_floor: -50\n")
        with pytest.raises(ValidationError):
            load_yaml_config(cfg_file)

    def test_sample_config_loads(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "sample.yaml"
        cfg_file.write_text(_SAMPLE_CONFIG)
        cfg = load_yaml_config(cfg_file)
        assert cfg.mode is SystemMode.HYBRID
        assert cfg.history_capacity == 30
        assert cfg.sink_configs == [{"type": "console", "fmt": "text"}]
