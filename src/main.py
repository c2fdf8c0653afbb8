#!/usr/bin/env python3
"""
===============================================================================
MISSION TELEMETRY REPLAY - MAIN ENTRY POINT
===============================================================================
Replays pre-recorded Earth-Moon mission telemetry and reports the derived
mission stage and prioritized ground antenna at every simulation index.

USAGE:
    python main.py                              # Replay with default config
    python main.py --config my_mission.yaml     # Custom configuration
    python main.py --start 100 --stop 500       # Replay an index range
    python main.py --output replay.csv          # Export per-tick state
    python main.py --plot-path path.png         # Save trajectory preview

OUTPUTS:
    CSV of (index, stage, stage_start_index, antenna) per tick
    PNG preview of the recorded trajectory path

DEPENDENCIES:
    numpy, pandas, matplotlib, pyyaml

===============================================================================
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import DEFAULT_CONFIG_PATH, get_section, load_config
from core.events import EventBus
from core.exceptions import TelemetryReplayError
from simulation.replay import ReplayDriver
from simulation.telemetry_coordinator import DataLoaded, build_coordinator

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

logger = logging.getLogger('TELEMETRY_MAIN')


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> None:
    """Configure root logging to stdout and, optionally, a log file."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format=LOG_FORMAT, handlers=handlers, force=True)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Replay recorded mission telemetry and derive stage and antenna state',
    )
    parser.add_argument('--config', type=str, default=str(DEFAULT_CONFIG_PATH),
                        help='Path to mission YAML configuration')
    parser.add_argument('--start', type=int, default=None, help='First index to replay')
    parser.add_argument('--stop', type=int, default=None, help='Stop index (exclusive)')
    parser.add_argument('--step', type=int, default=None, help='Index increment per tick')
    parser.add_argument('--output', type=str, default=None,
                        help='Write the per-tick telemetry to this CSV file')
    parser.add_argument('--plot-path', type=str, default=None,
                        help='Save a trajectory path preview image to this file')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (DEBUG, INFO, WARNING, ...)')
    return parser.parse_args(argv)


def save_path_preview(coordinator, config: dict, filepath: str) -> str:
    """Render the configured trajectory table as a two-colour path preview."""
    from visualization.trajectory_path import parse_positions, plot_trajectory_path

    preview = get_section(config, 'path_preview')
    if preview.get('source', 'off_nominal') == 'nominal':
        table = coordinator.nominal_trajectory_table
    else:
        table = coordinator.off_nominal_trajectory_table

    points = parse_positions(table, scale=preview.get('scale', 0.01))
    kwargs = {}
    if 'beginning_color' in preview:
        kwargs['beginning_color'] = preview['beginning_color']
    if 'end_color' in preview:
        kwargs['end_color'] = preview['end_color']
    return plot_trajectory_path(
        points, filepath,
        level_of_detail=preview.get('level_of_detail', 10),
        title=config.get('mission', {}).get('name'),
        **kwargs,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, KeyError, ValueError) as e:
        setup_logging(args.log_level or 'INFO')
        logger.error("Unable to load configuration: %s", e)
        return 1

    log_cfg = get_section(config, 'logging')
    setup_logging(args.log_level or log_cfg.get('level', 'INFO'), log_cfg.get('file'))

    bus = EventBus()
    bus.subscribe(DataLoaded, lambda event: logger.info(
        "Data loaded. Initial stage: %s", event.initial_stage.name))

    try:
        coordinator = build_coordinator(config, event_bus=bus)
        coordinator.start()
    except (TelemetryReplayError, KeyError, ValueError) as e:
        logger.error("Startup failed: %s", e)
        return 1

    replay_cfg = get_section(config, 'replay')
    try:
        driver = ReplayDriver(
            coordinator,
            start=args.start if args.start is not None else replay_cfg.get('start', 0),
            stop=args.stop if args.stop is not None else replay_cfg.get('stop'),
            step=args.step if args.step is not None else replay_cfg.get('step', 1),
        )
    except (TypeError, ValueError) as e:
        logger.error("Invalid replay range: %s", e)
        return 1
    df = driver.run()

    logger.info("=" * 60)
    logger.info("STAGE TRANSITIONS")
    logger.info("=" * 60)
    for transition in driver.transitions:
        logger.info("  index %6d : %s", transition['index'], transition['stage'])
    logger.info("Antenna switches: %d", max(len(driver.antenna_switches()) - 1, 0))
    logger.info("Link budget rows available: %d", len(coordinator.link_budget_table))

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.output, index=False)
        logger.info("Telemetry written to %s", args.output)

    if args.plot_path:
        save_path_preview(coordinator, config, args.plot_path)

    return 0


if __name__ == '__main__':
    sys.exit(main())
