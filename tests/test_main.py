"""Tests for hrems.__main__ - CLI entry point."""

from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import patch

import pytest

from hrems.__main__ import _apply_overrides, _cmd_list_modes, _sink_configs, main
from hrems.config import DashboardConfig
from hrems.models import SystemMode

# -----------------------------------------------------------------------
# main() dispatch
# -----------------------------------------------------------------------


class TestMainDispatch:
    """CLI argument parsing and sub-command dispatch."""

    def test_no_args_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        main([])
        out = capsys.readouterr().out
        assert "usage" in out.lower() or "commands" in out.lower()

    def test_help_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_list_modes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["list-modes"])
        out = capsys.readouterr().out
        for mode in SystemMode:
            assert mode.value in out

    def test_init_config_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["init-config"])
        out = capsys.readouterr().out
        assert "simulation:" in out
        assert "advisory:" in out

    def test_init_config_to_file(self, tmp_path: Path) -> None:
        outfile = tmp_path / "nested" / "hrems.yaml"
        main(["init-config", "--output", str(outfile)])
        assert outfile.exists()
        assert "history:" in outfile.read_text()

    def test_bare_flags_inject_run(self) -> None:
        with patch("hrems.__main__._cmd_run") as mock_run:
            main(["--duration", "0.1"])
            mock_run.assert_called_once()
            assert mock_run.call_args[0][0].duration == 0.1

    def test_run_subcommand_dispatches(self) -> None:
        with patch("hrems.__main__._cmd_run") as mock_run:
            main(["run", "--mode", "Wind Only", "--no-advisor"])
            args = mock_run.call_args[0][0]
            assert args.mode == "Wind Only"
            assert args.no_advisor is True

    def test_invalid_mode_exits(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--mode", "Turbo"])
        assert exc_info.value.code == 2


# -----------------------------------------------------------------------
# run
# -----------------------------------------------------------------------


class TestRunCommand:
    def test_apply_overrides(self) -> None:
        args = argparse.Namespace(interval=0.5, mode="Eco Mode", no_advisor=True, log_level="DEBUG")
        cfg = _apply_overrides(DashboardConfig(), args)
        assert cfg.simulation.tick_interval_s == 0.5
        assert cfg.mode is SystemMode.ECO_MODE
        assert cfg.advisory.enabled is False
        assert cfg.log_level == "DEBUG"

    def test_apply_no_overrides(self) -> None:
        args = argparse.Namespace(interval=None, mode=None, no_advisor=False, log_level=None)
        base = DashboardConfig()
        assert _apply_overrides(base, args) is base

    def test_short_run_prints_telemetry(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["run", "--duration", "0.3", "--interval", "0.02", "--no-advisor", "--seed", "3"])
        out = capsys.readouterr().out
        assert "soc=" in out
        assert "Hybrid" in out

    def test_run_from_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("""\
mode: Solar Only
simulation:
  tick_interval_s: 0.02
advisory:
  enabled: false
sinks:
  - type: console
    fmt: json
""")
        main(["run", "--config", str(cfg_file), "--duration", "0.3"])
        out = capsys.readouterr().out
        assert '"mode":"Solar Only"' in out


    def test_format_flag_overrides_config_console_sink(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cfg_file = tmp_path / "hrems.yaml"
        cfg_file.write_text("""\
simulation:
  tick_interval_s: 0.02
advisory:
  enabled: false
sinks:
  - type: console
    fmt: text
""")
        main(["run", "--config", str(cfg_file), "--duration", "0.3", "--format", "json"])
        out = capsys.readouterr().out
        assert '"mode":"Hybrid"' in out
        assert "soc=" not in out


class TestSinkConfigs:
    def test_format_applied_to_console_entries_only(self) -> None:
        configs = [
            {"type": "console", "fmt": "text"},
            {"type": "Webhook", "url": "https://example.com/hrems"},
        ]
        result = _sink_configs(configs, "json")
        assert result[0] == {"type": "console", "fmt": "json"}
        assert result[1] == configs[1]
        assert configs[0]["fmt"] == "text"

    def test_no_flag_keeps_configs(self) -> None:
        configs = [{"type": "console", "fmt": "text"}]
        assert _sink_configs(configs, None) is configs


class TestListModes:
    def test_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        _cmd_list_modes()
        out = capsys.readouterr().out
        assert "ECO_MODE" in out
        assert "Eco Mode" in out
