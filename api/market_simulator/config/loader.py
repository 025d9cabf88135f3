"""YAML configuration loader."""
from pathlib import Path

import yaml
from pydantic import ValidationError

from .schemas import SimulationConfig


def load_config(config_path: str | Path) -> SimulationConfig:
    """
    Load and validate simulation configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated SimulationConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is not valid YAML, not a mapping, or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        raise ValueError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    # Validate and create config
    try:
        config = SimulationConfig.from_dict(config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config
