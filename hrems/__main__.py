"""CLI entry point for the HREMS dashboard core.

Usage::

    hrems run --duration 60
    hrems run --config hrems.yaml
    hrems run --mode "Eco Mode" --no-advisor --format json
    hrems list-modes
    hrems init-config --output hrems.yaml
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import textwrap

# ---------------------------------------------------------------------------
# Sample YAML config template for init-config
# ---------------------------------------------------------------------------
_SAMPLE_CONFIG = """\
# HREMS dashboard configuration

mode: Hybrid                          # Hybrid, Solar Only, Wind Only, Battery Only, Eco Mode
simulate: true                        # start with the simulation timer running
# duration_s: 60                      # optional: auto-stop after N seconds
# log_level: INFO                     # DEBUG, INFO, WARNING, ERROR

simulation:
  tick_interval_s: 2.0                # seconds between telemetry updates
  solar_amplitude: 4.0                # W, symmetric random-walk step
  wind_amplitude: 6.0                 # W, symmetric random-walk step
  load_amplitude: 5.0                 # W, step drawn from [-0.4A, +0.6A]
  load_floor: 10.0                    # W, idle draw
  soc_coefficient: 0.001              # SOC % per W of surplus per tick
  discharge_deadband: 5.0             # W deficit before 'Discharging'

history:
  capacity: 30                        # samples kept for the chart

advisory:
  enabled: true
  model: gemini-3-flash-preview
  api_key_env: GEMINI_API_KEY         # environment variable holding the key
  refresh_interval_s: 30              # refresh advice older than this
  timeout_s: 30

sinks:
  - type: console
    fmt: text                         # text or json

  # - type: webhook
  #   url: https://example.com/hrems
  #   min_interval_s: 10
  #   headers:
  #     Authorization: Bearer my-token
"""


# ======================================================================
# Main entry point
# ======================================================================


def main(argv: list[str] | None = None) -> None:
    from hrems.models import SystemMode

    epilog = textwrap.dedent("""\
        examples:
          hrems run --duration 60
          hrems run --config hrems.yaml
          hrems run --mode "Eco Mode" --no-advisor --format json
          hrems list-modes
          hrems init-config --output hrems.yaml
    """)

    parser = argparse.ArgumentParser(
        prog="hrems",
        description="Simulate hybrid renewable telemetry and stream the dashboard state.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    # -- run ---------------------------------------------------------------
    run_parser = subparsers.add_parser(
        "run",
        help="Run the dashboard core (simulation, history, advisor).",
    )
    run_parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML config file. Other flags override its values.",
    )
    run_parser.add_argument(
        "--duration",
        "-d",
        type=float,
        default=None,
        help="Run duration in seconds (default: indefinite, Ctrl-C to stop).",
    )
    run_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Simulation tick interval in seconds (default: 2.0).",
    )
    run_parser.add_argument(
        "--mode",
        type=str,
        default=None,
        choices=[m.value for m in SystemMode],
        help="Initial system mode (default: Hybrid).",
    )
    run_parser.add_argument(
        "--no-advisor",
        action="store_true",
        help="Disable the advisory service.",
    )
    run_parser.add_argument(
        "--format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Console output format (default: text). Also applied to console sinks from the config file.",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the simulation random source for a reproducible run.",
    )
    run_parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )

    # -- list-modes --------------------------------------------------------
    subparsers.add_parser(
        "list-modes",
        help="List the selectable system modes.",
    )

    # -- init-config -------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init-config",
        help="Generate a sample YAML configuration file.",
    )
    init_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write config to this file instead of stdout.",
    )

    # A bare flag list (e.g. `hrems --duration 10`) means `run`
    _known_commands = {"run", "list-modes", "init-config"}
    raw_args = argv if argv is not None else sys.argv[1:]
    if raw_args and raw_args[0] not in _known_commands and raw_args[0] not in ("-h", "--help"):
        raw_args = ["run", *list(raw_args)]

    args = parser.parse_args(raw_args)

    if args.command is None:
        parser.print_help()
        return

    # -- Dispatch ----------------------------------------------------------
    if args.command == "run":
        _cmd_run(args)
    elif args.command == "list-modes":
        _cmd_list_modes()
    elif args.command == "init-config":
        _cmd_init_config(args.output)
    else:
        parser.print_help()


# ======================================================================
# Command implementations
# ======================================================================


def _cmd_run(args: argparse.Namespace) -> None:
    """Build the dashboard from config + flags and run it."""
    from hrems.config import DashboardConfig, load_yaml_config
    from hrems.dashboard import Dashboard
    from hrems.sinks.console import ConsoleSink
    from hrems.sinks.factory import create_sink

    cfg = load_yaml_config(args.config) if args.config else DashboardConfig()

    logging.basicConfig(
        level=getattr(logging, args.log_level or cfg.log_level, logging.INFO),
        format="%(asctime)s %(name)-30s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )

    cfg = _apply_overrides(cfg, args)

    dash = Dashboard(
        config=cfg,
        rng=random.Random(args.seed) if args.seed is not None else None,
    )

    if not cfg.sink_configs:
        dash.add_sink(ConsoleSink(fmt=args.format or "text"))
    else:
        for sink_dict in _sink_configs(cfg.sink_configs, args.format):
            dash.add_sink(create_sink(sink_dict))

    duration = args.duration if args.duration is not None else cfg.duration_s
    dash.run(duration_s=duration)


def _sink_configs(sink_configs: list[dict], fmt: str | None) -> list[dict]:
    """Apply a `--format` flag to the console entries of *sink_configs*."""
    if fmt is None:
        return sink_configs
    return [
        {**sc, "fmt": fmt} if str(sc.get("type", "")).lower().strip() == "console" else sc
        for sc in sink_configs
    ]


def _apply_overrides(cfg, args: argparse.Namespace):
    """Return a copy of *cfg* with CLI flags applied on top."""
    from hrems.models import SystemMode

    update: dict = {}
    if args.interval is not None:
        update["simulation"] = cfg.simulation.model_copy(update={"tick_interval_s": args.interval})
    if args.mode is not None:
        update["mode"] = SystemMode(args.mode)
    if args.no_advisor:
        update["advisory"] = cfg.advisory.model_copy(update={"enabled": False})
    if args.log_level is not None:
        update["log_level"] = args.log_level
    return cfg.model_copy(update=update) if update else cfg


# -- list-modes -------------------------------------------------------------


def _cmd_list_modes() -> None:
    from hrems.models import SystemMode

    print(f"\n{'Mode':<14} {'Name'}")
    print("-" * 30)
    for mode in SystemMode:
        print(f"{mode.value:<14} {mode.name}")
    print()


# -- init-config ------------------------------------------------------------


def _cmd_init_config(output_path: str | None) -> None:
    if output_path:
        from pathlib import Path

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(_SAMPLE_CONFIG)
        print(f"Sample config written to {output_path}")
    else:
        print(_SAMPLE_CONFIG)


# ======================================================================
if __name__ == "__main__":
    main()
