"""
===============================================================================
MISSION TELEMETRY REPLAY - Configuration Loader
===============================================================================
Reads the mission configuration from YAML.  The file names the four telemetry
tables, the ordered stage list, antenna-priority tuning, replay range, path
preview styling, and logging options.

Relative data file paths are resolved against the directory holding the
configuration file, so a config can be moved together with its data.
===============================================================================
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / 'config' / 'mission_config.yaml'

REQUIRED_SECTIONS = ('data_files', 'stages')
DATA_FILE_KEYS = (
    'nominal_trajectory',
    'off_nominal_trajectory',
    'antenna_availability',
    'link_budget',
)


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load mission configuration from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/mission_config.yaml

    Returns:
        Dictionary of mission configuration parameters, with every entry of
        ``data_files`` converted to an absolute Path.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        KeyError: If a required section or data file entry is missing.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}

    for section in REQUIRED_SECTIONS:
        if section not in config:
            raise KeyError(f"Missing required config section '{section}' in {config_path}")

    base_dir = config_path.resolve().parent
    data_files = config['data_files'] = config['data_files'] or {}
    for key in DATA_FILE_KEYS:
        if key not in data_files:
            raise KeyError(f"Missing data file entry 'data_files.{key}' in {config_path}")
        path = Path(data_files[key])
        data_files[key] = path if path.is_absolute() else base_dir / path

    mission_name = config.get('mission', {}).get('name', 'unnamed mission')
    logger.info("Mission: %s (%d stages)", mission_name, len(config['stages'] or []))
    return config


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return an optional section, or an empty dict if absent or null."""
    return config.get(name) or {}
